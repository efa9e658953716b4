"""Exceptions raised by erbcop.

GitHub API failures are not wrapped: ``github.GithubException`` propagates
as-is from the host adapter and the executor so callers see the real status
and payload.
"""


class ErbcopError(Exception):
    """Base class for every error erbcop raises on its own."""


class ConfigError(ErbcopError):
    """Missing or malformed configuration, environment or event payload."""


class LintError(ErbcopError):
    """The linter could not be run or its report could not be parsed."""


class InstallError(ErbcopError):
    """Installing the linter gems failed."""

"""Run erb_lint and turn its JSON report into Findings.

Reference for the report format: ``erb_lint --format json foo.html.erb``
prints an object with a ``files`` list. Each entry holds ``path`` and an
ordered ``offenses`` list; each offense holds ``linter``, ``message`` and a
``location`` with at least ``start_line``.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
from collections.abc import Sequence

from rich.console import Console

from erbcop_core.errors import LintError
from erbcop_core.models import Finding

console = Console()
logger = logging.getLogger(__name__)


def build_command(paths: Sequence[str], command: str = "erb_lint", extra_args: Sequence[str] = ()) -> list[str]:
    return [*shlex.split(command), *paths, "--format", "json", *extra_args]


def run_linter(paths: Sequence[str], command: str = "erb_lint", extra_args: Sequence[str] = ()) -> list[Finding]:
    """Lint ``paths`` and return every offense as a Finding, in report order.

    An empty ``paths`` skips the linter entirely. erb_lint exits non-zero
    whenever it reports offenses, so the exit status is only consulted when
    stdout cannot be parsed.
    """
    if not paths:
        console.print("No changed .erb files, skipping erb_lint")
        return []

    argv = build_command(paths, command, extra_args)
    console.print(f"Running erb_lint with: {shlex.join(argv)}")

    try:
        result = subprocess.run(argv, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise LintError(f"Linter executable not found: {argv[0]}") from e

    logger.debug("erb_lint exited with status %d", result.returncode)
    try:
        return parse_report(result.stdout)
    except LintError as e:
        stderr = result.stderr.strip()
        if stderr:
            raise LintError(f"{e} (exit status {result.returncode}): {stderr}") from e
        raise


def parse_report(text: str) -> list[Finding]:
    """Parse an erb_lint JSON report. Anything malformed raises LintError."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LintError(f"Could not parse erb_lint output as JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("files"), list):
        raise LintError("erb_lint report has no 'files' list.")

    findings: list[Finding] = []
    for entry in data["files"]:
        try:
            path = entry["path"]
            offenses = entry["offenses"]
            for offense in offenses:
                line = offense["location"]["start_line"]
                if not isinstance(line, int) or isinstance(line, bool):
                    raise TypeError(f"start_line must be an integer, got {line!r}")
                findings.append(
                    Finding(
                        path=str(path),
                        line=line,
                        rule=str(offense["linter"]),
                        message=str(offense["message"]),
                    )
                )
        except (KeyError, TypeError) as e:
            raise LintError(f"Malformed erb_lint report entry: {e}") from e

    return findings

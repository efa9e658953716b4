from __future__ import annotations

import fnmatch
from collections.abc import Iterable


def _glob_match(filename: str, pattern: str) -> bool:
    # "*.erb" matches "app/views/index.html.erb" through the basename.
    return fnmatch.fnmatch(filename, pattern) or fnmatch.fnmatch(filename.rsplit("/", 1)[-1], pattern)


def is_excluded(filename: str, patterns: Iterable[str]) -> bool:
    """Return True if filename matches any exclude pattern.

    Supports:
    - fnmatch globs on the full path: "app/views/generated/*.erb"
    - fnmatch globs on the basename: "*.text.erb"
    - Directory names/prefixes: "vendor/", "spec" (matches any file within that tree)
    """
    for pattern in patterns:
        if _glob_match(filename, pattern):
            return True
        prefix = pattern.rstrip("/") + "/"
        if filename.startswith(prefix) or ("/" + prefix) in filename:
            return True
    return False


def is_lint_target(filename: str, include: Iterable[str], exclude: Iterable[str] = ()) -> bool:
    return any(_glob_match(filename, p) for p in include) and not is_excluded(filename, exclude)

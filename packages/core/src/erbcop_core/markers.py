"""Identity markers embedded as HTML comments in every body erbcop posts."""

from __future__ import annotations

import re

MARKER_PREFIX = "erb_lint-comment-id"
OUTSIDE_DIFF_KEY = "outside-diff"

_MARKER_RE = re.compile(r"<!-- " + re.escape(MARKER_PREFIX) + r": (.+?) -->")


def inline_key(path: str, line: int) -> str:
    return f"{path}-{line}"


def marker(key: str) -> str:
    return f"<!-- {MARKER_PREFIX}: {key} -->"


def parse_marker(body: str | None) -> str | None:
    """Return the identity key embedded in a comment body, or None."""
    match = _MARKER_RE.search(body or "")
    return match.group(1) if match else None

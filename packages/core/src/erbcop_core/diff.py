"""Changed-line bookkeeping for pull request files.

GitHub only anchors a review comment to a line that appears in the file's
diff, either as an added line or as context. Everything here works in
new-file line numbers.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from erbcop_core.models import ChangedFile

_HUNK_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(?P<new_start>\d+)(?:,\d+)? @@")


def changed_lines_from_patch(patch: str | None) -> frozenset[int]:
    """Return the new-file line numbers present in a unified diff patch.

    Removed lines do not advance the new-file counter. A hunk header that
    cannot be parsed stops mapping until the next valid header.
    """
    lines: set[int] = set()
    file_line: int | None = None

    for raw in (patch or "").splitlines():
        if raw.startswith("@@"):
            match = _HUNK_RE.match(raw)
            file_line = int(match.group("new_start")) if match else None
            continue
        if file_line is None or raw.startswith("\\"):
            continue  # "\ No newline at end of file"
        if raw.startswith("-"):
            continue
        lines.add(file_line)
        file_line += 1

    return frozenset(lines)


class ChangedRangeIndex:
    """Answers whether a (path, line) pair can carry an inline comment."""

    def __init__(self, changed_files: Iterable[ChangedFile]):
        lines: dict[str, set[int]] = {}
        for changed in changed_files:
            lines.setdefault(changed.path, set()).update(changed.changed_lines)
        self._lines = {path: frozenset(numbers) for path, numbers in lines.items()}

    def is_in_diff(self, path: str, line: int) -> bool:
        # Unknown paths are never in the diff.
        return line in self._lines.get(path, frozenset())

    def __len__(self) -> int:
        return len(self._lines)

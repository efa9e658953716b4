"""Value objects shared by the linter adapter, the inventory and the engine."""

from __future__ import annotations

from dataclasses import dataclass

from erbcop_core.markers import MARKER_PREFIX


@dataclass(frozen=True)
class Finding:
    """A single offense reported by the linter."""

    path: str
    line: int
    rule: str
    message: str

    @property
    def text(self) -> str:
        return f"{self.rule}: {self.message}"


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request and the new-file lines visible in its diff."""

    path: str
    changed_lines: frozenset[int] = frozenset()


@dataclass(frozen=True)
class Comment:
    """A review comment or issue comment as fetched from GitHub.

    ``path`` and ``line`` are None for issue comments. Review comments whose
    line no longer exists in the diff (e.g. after a force-push) also come
    back from GitHub with ``line`` set to None.
    """

    id: int
    body: str
    path: str | None = None
    line: int | None = None

    @property
    def authored_by_tool(self) -> bool:
        return MARKER_PREFIX in self.body

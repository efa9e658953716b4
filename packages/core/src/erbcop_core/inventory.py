"""Index the comments erbcop posted on a previous run.

Only comments carrying an identity marker are considered. Anything else on
the pull request belongs to a human or another bot and is never touched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from erbcop_core.markers import OUTSIDE_DIFF_KEY, parse_marker
from erbcop_core.models import Comment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inventory:
    """Snapshot of erbcop's own comments taken before any action is applied."""

    inline: dict[str, Comment] = field(default_factory=dict)
    summary: Comment | None = None
    inline_duplicates: list[Comment] = field(default_factory=list)
    duplicates: list[Comment] = field(default_factory=list)


def build_inventory(review_comments: Iterable[Comment], issue_comments: Iterable[Comment]) -> Inventory:
    """Partition fetched comments into inline comments keyed by marker and the summary comment.

    When GitHub returns more than one comment for the same key the first one
    wins. Extra inline comments go to ``inline_duplicates`` so the cleanup pass
    can delete them once their key has no findings. Extra summary comments go
    to ``duplicates`` and are left for a human to clean up.
    """
    inline: dict[str, Comment] = {}
    inline_duplicates: list[Comment] = []
    duplicates: list[Comment] = []

    for comment in review_comments:
        if not comment.authored_by_tool:
            continue
        key = parse_marker(comment.body)
        if key is None:
            logger.warning("Comment %s has an unreadable erb_lint marker; leaving it alone", comment.id)
            continue
        if comment.line is None:
            logger.debug("Ignoring outdated comment %s on %s", comment.id, comment.path)
            continue
        if key in inline:
            logger.warning("Duplicate erb_lint comment %s for %s (keeping %s)", comment.id, key, inline[key].id)
            inline_duplicates.append(comment)
            continue
        inline[key] = comment

    summary: Comment | None = None
    for comment in issue_comments:
        if parse_marker(comment.body) != OUTSIDE_DIFF_KEY:
            continue
        if summary is not None:
            logger.warning("Duplicate outside-diff comment %s (keeping %s)", comment.id, summary.id)
            duplicates.append(comment)
            continue
        summary = comment

    return Inventory(inline=inline, summary=summary, inline_duplicates=inline_duplicates, duplicates=duplicates)

"""Apply a reconciliation plan to GitHub."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rich.console import Console

from erbcop_core.reconcile import CREATE, DELETE, INLINE, SUMMARY, UPDATE, Action

console = Console()
logger = logging.getLogger(__name__)


def apply_action(action: Action, host) -> int | None:
    """Perform the single API call behind ``action``. Returns the new id for creations.

    Errors from GitHub are not caught: a failed mutation leaves the remaining
    actions unapplied and the next run recomputes everything from scratch.
    """
    if action.target == INLINE:
        if action.kind == CREATE:
            console.print(f"Commenting on {action.path} line {action.line}")
            return host.create_review_comment(action.path, action.line, action.body, action.commit_sha)
        if action.kind == UPDATE:
            console.print(f"Updating comment {action.comment_id} on {action.path} line {action.line}")
            host.update_review_comment(action.comment_id, action.body)
            return None
        if action.kind == DELETE:
            console.print(f"Deleting resolved comment {action.comment_id} on {action.path} line {action.line}")
            host.delete_review_comment(action.comment_id)
            return None

    if action.target == SUMMARY:
        if action.kind == CREATE:
            console.print("Commenting on pull request with offenses found outside the diff")
            return host.create_issue_comment(action.body)
        if action.kind == UPDATE:
            console.print(f"Updating separate comment {action.comment_id}")
            host.update_issue_comment(action.comment_id, action.body)
            return None
        if action.kind == DELETE:
            console.print(f"Deleting resolved separate comment {action.comment_id}")
            host.delete_issue_comment(action.comment_id)
            return None

    raise ValueError(f"Unknown action {action.kind!r} on {action.target!r}")


def apply_actions(actions: Iterable[Action], host) -> int:
    """Apply every action in order and return how many were applied."""
    applied = 0
    for action in actions:
        apply_action(action, host)
        applied += 1
    logger.debug("Applied %d comment action(s)", applied)
    return applied

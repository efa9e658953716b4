"""Reconcile current lint findings with the comments already on the pull request.

The engine never talks to GitHub. It turns three inputs into a Plan:

    findings  ─┐
    index     ─┼─► desired state (key → body) ─► diff against inventory ─► actions
    inventory ─┘

Desired state is a map from identity key to rendered body. An inline comment
is skipped when its body is already current, updated when the body changed,
created when it is missing and deleted when its key no longer has findings.
Duplicate inline comments for a key are deleted along with it.
Findings on lines GitHub cannot anchor to are rolled into one issue comment.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from erbcop_core.diff import ChangedRangeIndex
from erbcop_core.inventory import Inventory
from erbcop_core.markers import OUTSIDE_DIFF_KEY, inline_key, marker, parse_marker
from erbcop_core.models import Comment, Finding

DEFAULT_FAILURE_EXIT_CODE = 109

CREATE = "create"
UPDATE = "update"
DELETE = "delete"

INLINE = "inline"
SUMMARY = "summary"

_OUTSIDE_DIFF_HEADING = "Erb Lint offenses found outside of the diff:"


@dataclass(frozen=True)
class Action:
    """One comment mutation. The executor maps each Action to exactly one API call."""

    kind: str  # CREATE | UPDATE | DELETE
    target: str  # INLINE | SUMMARY
    body: str | None = None
    comment_id: int | None = None
    path: str | None = None
    line: int | None = None
    commit_sha: str | None = None


@dataclass
class Plan:
    """Everything one reconciliation pass decided."""

    actions: list[Action] = field(default_factory=list)
    unchanged: list[Comment] = field(default_factory=list)
    outside_diff: list[Finding] = field(default_factory=list)
    outside_diff_body: str | None = None
    total_findings: int = 0

    def exit_code(self, failure_exit_code: int = DEFAULT_FAILURE_EXIT_CODE) -> int:
        return exit_code_for(self.total_findings, failure_exit_code)


def group_findings(findings: Iterable[Finding]) -> dict[tuple[str, int], list[Finding]]:
    """Group findings by (path, line), keeping the linter's order inside each group."""
    groups: dict[tuple[str, int], list[Finding]] = {}
    for finding in findings:
        groups.setdefault((finding.path, finding.line), []).append(finding)
    return groups


def render_inline_body(path: str, line: int, findings: Iterable[Finding]) -> str:
    message = "\n".join(f.text for f in findings)
    return f"{marker(inline_key(path, line))}\n{message}\n"


def render_outside_diff_body(findings: Iterable[Finding]) -> str:
    blocks = "\n\n".join(f"**{f.path}:{f.line}**\n{f.text}" for f in findings)
    return f"{marker(OUTSIDE_DIFF_KEY)}\n{_OUTSIDE_DIFF_HEADING}\n\n{blocks}"


def exit_code_for(total_findings: int, failure_exit_code: int = DEFAULT_FAILURE_EXIT_CODE) -> int:
    return failure_exit_code if total_findings > 0 else 0


def plan_actions(
    findings: Iterable[Finding],
    index: ChangedRangeIndex,
    inventory: Inventory,
    head_sha: str,
    post_outside_diff: bool = True,
) -> Plan:
    """Compute the actions that make erbcop's comments mirror ``findings``.

    ``inventory`` must be the snapshot fetched before any action is applied;
    both the classification and the cleanup pass read that same snapshot.
    ``post_outside_diff=False`` suppresses creating the outside-diff comment
    only. The body is still rendered and the verdict still counts every
    finding.
    """
    findings = list(findings)
    groups = group_findings(findings)
    plan = Plan(total_findings=len(findings))

    desired: dict[str, tuple[str, int, str]] = {}
    for (path, line), group in groups.items():
        if index.is_in_diff(path, line):
            desired[inline_key(path, line)] = (path, line, render_inline_body(path, line, group))
        else:
            plan.outside_diff.extend(group)

    for key, (path, line, body) in desired.items():
        existing = inventory.inline.get(key)
        if existing is None:
            plan.actions.append(Action(CREATE, INLINE, body=body, path=path, line=line, commit_sha=head_sha))
        elif existing.body == body:
            plan.unchanged.append(existing)
        else:
            plan.actions.append(Action(UPDATE, INLINE, body=body, comment_id=existing.id, path=path, line=line))

    # A fixed offense produces no finding, so orphans are found by scanning the inventory.
    live_keys = {inline_key(path, line) for path, line in groups}
    orphans = [*inventory.inline.items(), *((parse_marker(c.body), c) for c in inventory.inline_duplicates)]
    for key, comment in orphans:
        if key not in live_keys:
            plan.actions.append(Action(DELETE, INLINE, comment_id=comment.id, path=comment.path, line=comment.line))

    plan.actions.extend(_plan_summary(plan, inventory.summary, post_outside_diff))
    return plan


def _plan_summary(plan: Plan, existing: Comment | None, post_outside_diff: bool) -> list[Action]:
    if not plan.outside_diff:
        if existing is None:
            return []
        return [Action(DELETE, SUMMARY, comment_id=existing.id)]

    body = render_outside_diff_body(plan.outside_diff)
    plan.outside_diff_body = body
    if existing is None:
        return [Action(CREATE, SUMMARY, body=body)] if post_outside_diff else []
    if existing.body == body:
        plan.unchanged.append(existing)
        return []
    return [Action(UPDATE, SUMMARY, body=body, comment_id=existing.id)]

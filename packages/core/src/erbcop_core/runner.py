"""Core lint-and-comment orchestration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from github import GithubException
from rich.console import Console

from erbcop_core.diff import ChangedRangeIndex
from erbcop_core.errors import ConfigError
from erbcop_core.executor import apply_actions
from erbcop_core.gh.pull_request import PullRequestComments, get_changed_files, get_pull, get_repo
from erbcop_core.inventory import build_inventory
from erbcop_core.linter import run_linter
from erbcop_core.models import Finding
from erbcop_core.reconcile import INLINE, Plan, plan_actions

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Result returned by run_lint_review; the CLI turns ``exit_code`` into the process status."""

    repo: str
    pr_number: int
    head_sha: str
    findings: list[Finding] = field(default_factory=list)
    plan: Plan = field(default_factory=Plan)
    applied: int = 0
    exit_code: int = 0


def print_shadow_actions(plan: Plan) -> None:
    """Print the planned comment changes without posting them to GitHub."""
    _kind_color = {"create": "green", "update": "yellow", "delete": "red"}
    if not plan.actions:
        console.print("[yellow]Shadow mode: comments are already up to date.[/yellow]")
        return
    console.print(f"\n[bold]Shadow run: {len(plan.actions)} action(s) (not posted)[/bold]\n")
    for action in plan.actions:
        color = _kind_color.get(action.kind, "white")
        if action.target == INLINE:
            where = f"[bold cyan]{action.path}[/bold cyan]  line [bold]{action.line}[/bold]"
        else:
            where = "[bold cyan]outside-diff comment[/bold cyan]"
        console.print(f"{where}  [{color}]{action.kind.upper()}[/{color}]")
        if action.body:
            console.print(f"  [dim]{action.body.strip()}[/dim]")
        console.print()


def _report(plan: Plan, outside_diff_enabled: bool) -> None:
    for comment in plan.unchanged:
        where = f"on {comment.path} line {comment.line}" if comment.path else "outside the diff"
        console.print(f"Skipping unchanged comment {comment.id} {where}")
    if plan.outside_diff:
        console.print(f"Found {len(plan.outside_diff)} offenses outside of the diff")
        if not outside_diff_enabled:
            console.print("[dim]Posting the outside-diff comment is disabled.[/dim]")


def run_lint_review(
    repo: str,
    pr_number: int,
    config: dict,
    head_sha: str | None = None,
    linter_args: Sequence[str] = (),
    shadow: bool = False,
    repo_obj=None,
) -> RunSummary:
    """Lint the pull request's changed templates and sync erbcop's comments with the result.

    Steps run strictly in order: fetch changed files, lint, fetch the comment
    inventory, plan, apply. Any GitHub error aborts the run where it happens.
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException as e:
        if e.status == 404:
            raise ConfigError(f"PR #{pr_number} not found in {repo}.") from e
        raise

    head_sha = head_sha or this_pr.head.sha

    changed_files = get_changed_files(this_pr, config.get("include", ["*.erb"]), config.get("exclude", []))
    index = ChangedRangeIndex(changed_files)
    logger.debug("%d lintable file(s) changed in %s#%d", len(index), repo, pr_number)

    console.print("::group::Running erb_lint")
    findings = run_linter(
        [f.path for f in changed_files],
        command=config.get("linter_command", "erb_lint"),
        extra_args=linter_args,
    )
    console.print("::endgroup::")

    console.print(f"Fetching PR comments for {repo}#{pr_number}")
    host = PullRequestComments(this_repo, this_pr)
    review_comments, issue_comments = host.fetch()
    inventory = build_inventory(review_comments, issue_comments)

    outside_diff_enabled = config.get("outside_diff", True)
    plan = plan_actions(
        findings,
        index,
        inventory,
        head_sha,
        post_outside_diff=outside_diff_enabled,
    )
    _report(plan, outside_diff_enabled)

    if shadow:
        print_shadow_actions(plan)
        applied = 0
    else:
        applied = apply_actions(plan.actions, host)

    exit_code = plan.exit_code(config.get("failure_exit_code", 109))
    if plan.total_findings:
        console.print(f"\n{plan.total_findings} offenses found! Failing the build...")
    else:
        console.print("[green]No erb_lint offenses found.[/green]")

    return RunSummary(
        repo=repo,
        pr_number=pr_number,
        head_sha=head_sha,
        findings=findings,
        plan=plan,
        applied=applied,
        exit_code=exit_code,
    )

"""run command: lints a pull request and syncs its erb_lint comments."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from erbcop_core.errors import ErbcopError
from erbcop_core.runner import run_lint_review

console = Console(stderr=True)


@click.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to GITHUB_REPOSITORY.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the number in the GITHUB_EVENT_PATH payload.",
)
@click.option(
    "--outside-diff/--no-outside-diff",
    "outside_diff",
    default=None,
    help="Post a summary comment for offenses outside the diff. Overrides OUTSIDE_DIFF.",
)
@click.option(
    "--failure-exit-code",
    type=click.IntRange(1, 255),
    default=None,
    help="Exit status when offenses are found. Overrides FAILURE_EXIT_CODE (default 109).",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the planned comment changes without posting to GitHub.",
)
@click.argument("linter_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    outside_diff: bool | None,
    failure_exit_code: int | None,
    shadow: bool,
    linter_args: tuple[str, ...],
):
    """Run erb_lint on the templates changed in a pull request.

    Offenses inside the diff become inline review comments, offenses outside
    it are collected in a single pull request comment, and comments for fixed
    offenses are deleted. Extra LINTER_ARGS are passed through to erb_lint.

    \b
    Environment variables:
      GITHUB_TOKEN           GitHub token (or use the gh CLI session)
      GITHUB_REPOSITORY      owner/name of the repository
      GITHUB_EVENT_PATH      pull_request event payload (PR number, head SHA)
      OUTSIDE_DIFF           "true" to post the outside-diff comment
      FAILURE_EXIT_CODE      exit status when offenses are found (default 109)
    """
    from erbcop_cli.auth import resolve_github_token
    from erbcop_core.config import load_config, read_event

    config_path = ctx.obj.get("config_path", ".erbcop.yml") if ctx.obj else ".erbcop.yml"

    try:
        config = load_config(
            config_path,
            cli_overrides={
                "repository": repo,
                "outside_diff": outside_diff,
                "failure_exit_code": failure_exit_code,
            },
        )

        head_sha = None
        if pr_number is None:
            pr_number, head_sha = read_event(config.get("event_path"))
    except ErbcopError as e:
        raise click.UsageError(str(e))

    if not config.get("repository"):
        raise click.UsageError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")

    token = resolve_github_token()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
    config["github_token"] = token

    try:
        summary = run_lint_review(
            repo=config["repository"],
            pr_number=pr_number,
            config=config,
            head_sha=head_sha,
            linter_args=linter_args,
            shadow=shadow,
        )
    except ErbcopError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
    except GithubException as e:
        console.print(f"[red]GitHub API error:[/red] {e.status} {e.data}")
        ctx.exit(1)

    ctx.exit(summary.exit_code)

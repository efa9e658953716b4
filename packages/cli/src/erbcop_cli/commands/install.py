"""install command: installs the erb_lint gems."""

from __future__ import annotations

import click
from rich.console import Console

from erbcop_core.errors import ErbcopError
from erbcop_core.install import install_gems, resolve_gem_specs

console = Console()


@click.command("install")
@click.option(
    "--gem-versions",
    default=None,
    help='Gem specs such as "erb_lint:0.9.0", or "gemfile" to use Gemfile.lock. Overrides ERB_LINT_GEM_VERSIONS.',
)
@click.option("--lockfile", default="Gemfile.lock", show_default=True, help="Lockfile read in gemfile mode.")
@click.pass_context
def install_cmd(ctx, gem_versions: str | None, lockfile: str):
    """Install the erb_lint gems before running erbcop."""
    from erbcop_core.config import load_config

    config_path = ctx.obj.get("config_path", ".erbcop.yml") if ctx.obj else ".erbcop.yml"

    console.print("::group::Installing erb_lint gems")
    try:
        config = load_config(config_path, cli_overrides={"gem_versions": gem_versions})
        specs = resolve_gem_specs(config.get("gem_versions"), lockfile=lockfile)
        if not specs:
            console.print("[yellow]No erb_lint gem versions configured. Nothing to install.[/yellow]")
        install_gems(specs)
    except ErbcopError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
    finally:
        console.print("::endgroup::")

"""CLI entry point for erbcop.

Commands:
  run      lint a pull request's changed templates and sync the review comments
  install  install the erb_lint gems the workflow asks for
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from erbcop_cli.commands.install import install_cmd
from erbcop_cli.commands.run import run_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("erbcop"),
    prog_name="erbcop",
)
@click.option(
    "--config",
    "config_path",
    default=".erbcop.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="ERBCOP_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Mirror erb_lint offenses as GitHub pull request comments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(install_cmd)

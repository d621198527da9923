"""vypr version command - Report tool and compiler versions."""

from __future__ import annotations

import click

from vypr_cli import __version__
from vypr_cli.context import load_cli_config, ready_toolchain
from vypr_cli.errors import handle_vypr_error
from vypr_cli.output import info
from vypr_core.errors import VyprError


@click.command("version")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to vypr.yaml [default: ./vypr.yaml, else VYPR_* variables]",
)
def version(config_path: str | None) -> None:
    """Show the vypr and Vyper compiler versions.

    Examples:

        vypr version
    """
    config = load_cli_config(config_path)
    toolchain = ready_toolchain(config)

    try:
        compiler_version = toolchain.get_version()
    except VyprError as e:
        handle_vypr_error(e)

    info(f"vypr {__version__}")
    info(f"vyper {compiler_version} ({toolchain.binary})")

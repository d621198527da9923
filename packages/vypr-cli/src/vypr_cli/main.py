"""CLI entry point for vypr.

Commands are registered through LazyGroup so that ``vypr --help`` does not
import the compiler orchestration modules.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from vypr_cli import __version__
from vypr_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that imports commands only when they are invoked.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"compile": "vypr_cli.commands.compile.compile_cmd"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return the sorted names of registered and lazy commands."""
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, importing it on first use.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "install": "vypr_cli.commands.install.install",
    "compile": "vypr_cli.commands.compile.compile_cmd",
    "abi": "vypr_cli.commands.abi.abi",
    "artifact": "vypr_cli.commands.artifact.artifact",
    "blueprint": "vypr_cli.commands.blueprint.blueprint",
    "version": "vypr_cli.commands.version.version",
}


def _configure_logging(verbose: bool, log_json: bool) -> None:
    from vypr_core.observability import configure_logging

    configure_logging(
        log_level="DEBUG" if verbose else "WARNING",
        json_format=log_json,
        add_timestamp=log_json,
    )


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="vypr")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.option("--log-json", is_flag=True, default=False, help="Emit logs as JSON lines.")
def cli(verbose: bool, log_json: bool) -> None:
    """vypr - Vyper compiler orchestration.

    Provision the Vyper compiler, compile contracts concurrently and
    extract their artifacts.

    **Getting Started:**

    - `vypr install` - Install the compiler into ./venv
    - `vypr compile contracts/*.vy` - Compile contracts to bytecode
    - `vypr abi contracts/token.vy --write` - Write the contract ABI
    - `vypr blueprint decode 0xfe710000` - Inspect an ERC-5202 blueprint
    """
    if verbose or log_json:
        _configure_logging(verbose, log_json)


if __name__ == "__main__":
    cli()

"""vypr install command - Provision the Vyper compiler."""

from __future__ import annotations

from pathlib import Path

import click

from vypr_cli.context import load_cli_config
from vypr_cli.errors import handle_vypr_error
from vypr_cli.output import info, success
from vypr_core.errors import VyprError
from vypr_core.toolchain import provision


@click.command("install")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to vypr.yaml [default: ./vypr.yaml, else VYPR_* variables]",
)
@click.option(
    "--venv-path",
    type=click.Path(),
    default=None,
    help="Isolated environment location (overrides config)",
)
@click.option(
    "--global",
    "use_global",
    is_flag=True,
    default=False,
    help="Install with the global pip instead of a virtual environment",
)
@click.option(
    "--compiler-version",
    "compiler_version",
    default=None,
    help="Exact Vyper version to install (overrides config)",
)
@click.option(
    "--check",
    is_flag=True,
    default=False,
    help="Only verify that the compiler is installed",
)
def install(
    config_path: str | None,
    venv_path: str | None,
    use_global: bool,
    compiler_version: str | None,
    check: bool,
) -> None:
    """Install the Vyper compiler.

    By default a virtual environment is created at ./venv and the compiler
    is installed into it with pip.

    Examples:

        vypr install

        vypr install --compiler-version 0.3.10

        vypr install --global --check
    """
    config = load_cli_config(config_path)
    target = Path(venv_path) if venv_path else config.venv_path
    use_venv = config.use_venv and not use_global
    version = compiler_version or config.compiler_version

    if not check:
        info(f"Installing {'vyper' if version is None else f'vyper=={version}'}...")

    try:
        toolchain = provision(target, use_venv=use_venv, version=version, install=not check)
    except VyprError as e:
        handle_vypr_error(e)

    scope = f"in {toolchain.environment_root}" if toolchain.environment_root else "globally"
    verb = "available" if check else "installed"
    success(f"Vyper {verb} {scope} ({toolchain.binary})")

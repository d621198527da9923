"""vypr compile command - Compile contracts to bytecode."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from vypr_cli.context import load_cli_config, ready_toolchain
from vypr_cli.errors import CLIError, handle_vypr_error
from vypr_cli.output import print_json, raw, success, warning
from vypr_core.compiler import EvmVersion, scan_workspace
from vypr_core.errors import VyprError

EVM_CHOICES = [v.value for v in EvmVersion]


@click.command("compile")
@click.argument("sources", nargs=-1, type=click.Path())
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to vypr.yaml [default: ./vypr.yaml, else VYPR_* variables]",
)
@click.option(
    "-e",
    "--evm-version",
    type=click.Choice(EVM_CHOICES, case_sensitive=False),
    default=None,
    help="EVM target (overrides config)",
)
@click.option(
    "--blueprint",
    is_flag=True,
    default=False,
    help="Emit ERC-5202 blueprint bytecode",
)
@click.option(
    "-j",
    "--max-concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum simultaneous compiler processes (overrides config)",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print results as JSON")
def compile_cmd(
    sources: tuple[str, ...],
    config_path: str | None,
    evm_version: str | None,
    blueprint: bool,
    max_concurrency: int | None,
    as_json: bool,
) -> None:
    """Compile Vyper contracts to bytecode.

    Without SOURCES the contracts listed in vypr.yaml are compiled, or
    every *.vy file in the workspace (., contracts/, src/).

    Examples:

        vypr compile contracts/token.vy

        vypr compile --evm-version shanghai -j 4

        vypr compile --blueprint contracts/factory.vy
    """
    config = load_cli_config(config_path)
    paths = _select_sources(sources, config.contracts)
    if not paths:
        raise CLIError("No contracts found to compile")

    toolchain = ready_toolchain(config)
    evm = evm_version or config.evm_version

    try:
        batch = toolchain.batch(paths, max_concurrency=max_concurrency or config.max_concurrency)
        if blueprint:
            if evm is not None:
                warning("--evm-version is ignored for blueprint output")
            results = asyncio.run(batch.compile_blueprint_all())
        elif evm is None:
            results = asyncio.run(batch.compile_all())
        else:
            results = asyncio.run(batch.compile_all_for_version(evm))
    except VyprError as e:
        handle_vypr_error(e)

    if as_json:
        print_json([{"source": str(p), "bytecode": code} for p, code in zip(paths, results)])
        return

    for path, code in zip(paths, results):
        if len(paths) > 1:
            raw(f"{path}:")
        raw(code)
    success(f"Compiled {len(paths)} contract{'s' if len(paths) != 1 else ''}")


def _select_sources(sources: tuple[str, ...], configured: list[Path]) -> list[Path]:
    if sources:
        return [Path(s) for s in sources]
    if configured:
        return list(configured)
    return scan_workspace(Path("."))

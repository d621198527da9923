"""vypr abi command - Extract contract ABIs."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from vypr_cli.context import load_cli_config, ready_toolchain
from vypr_cli.errors import CLIError, handle_vypr_error
from vypr_cli.output import print_json, success
from vypr_core.errors import VyprError


@click.command("abi")
@click.argument("sources", nargs=-1, required=True, type=click.Path())
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to vypr.yaml [default: ./vypr.yaml, else VYPR_* variables]",
)
@click.option(
    "-w",
    "--write",
    is_flag=True,
    default=False,
    help="Write <source>.json next to each source instead of printing",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=None,
    help="ABI file path when writing a single source",
)
def abi(
    sources: tuple[str, ...],
    config_path: str | None,
    write: bool,
    output_path: str | None,
) -> None:
    """Extract contract ABIs.

    A single SOURCE prints its ABI. Several SOURCES print a list of
    {"source", "abi"} objects in argument order.

    Examples:

        vypr abi contracts/token.vy

        vypr abi contracts/*.vy --write

        vypr abi contracts/token.vy --output build/token.abi.json
    """
    if output_path is not None and len(sources) != 1:
        raise CLIError("--output requires exactly one source")

    config = load_cli_config(config_path)
    toolchain = ready_toolchain(config)
    paths = [Path(s) for s in sources]

    try:
        if output_path is not None:
            written = [toolchain.unit(paths[0], output_path).write_abi()]
        elif write:
            batch = toolchain.batch(paths, max_concurrency=config.max_concurrency)
            written = asyncio.run(batch.write_abi_all())
        else:
            batch = toolchain.batch(paths, max_concurrency=config.max_concurrency)
            abis = asyncio.run(batch.extract_abi_all())
            if len(abis) == 1:
                print_json(abis[0])
            else:
                print_json([{"source": str(p), "abi": a} for p, a in zip(paths, abis)])
            return
    except VyprError as e:
        handle_vypr_error(e)

    for path in written:
        success(f"ABI written to {path}")

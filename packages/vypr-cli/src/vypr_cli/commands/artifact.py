"""vypr artifact command - Dump compiler artifacts to files."""

from __future__ import annotations

import click

from vypr_cli.context import load_cli_config, ready_toolchain
from vypr_cli.errors import handle_vypr_error
from vypr_cli.output import raw, success
from vypr_core.compiler import ARTIFACT_DUMPS, OutputFormat
from vypr_core.errors import VyprError

FORMAT_CHOICES = [f.value for f in OutputFormat]


@click.command("artifact")
@click.argument("source", type=click.Path())
@click.argument("output_format", metavar="FORMAT", type=click.Choice(FORMAT_CHOICES))
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="Path to vypr.yaml [default: ./vypr.yaml, else VYPR_* variables]",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the dump [default: output_dir from config]",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    default=False,
    help="Print the raw compiler output instead of writing a file",
)
def artifact(
    source: str,
    output_format: str,
    config_path: str | None,
    output_dir: str | None,
    to_stdout: bool,
) -> None:
    """Dump a compiler artifact for one contract.

    Formats with a file dump (layout, ast, external_interface, opcodes,
    opcodes_runtime, userdoc, devdoc) are written under a fixed name;
    the others are printed.

    Examples:

        vypr artifact contracts/token.vy layout

        vypr artifact contracts/token.vy opcodes --output-dir build/

        vypr artifact contracts/token.vy abi --stdout
    """
    config = load_cli_config(config_path)
    toolchain = ready_toolchain(config)
    unit = toolchain.unit(source)
    fmt = OutputFormat(output_format)

    try:
        if to_stdout or fmt not in ARTIFACT_DUMPS:
            raw(unit.extract(fmt))
            return
        path = unit.write_artifact(fmt, output_dir or config.output_dir)
    except VyprError as e:
        handle_vypr_error(e)

    success(f"{fmt.value} written to {path}")

"""vypr blueprint command - Inspect ERC-5202 blueprints."""

from __future__ import annotations

from pathlib import Path

import click

from vypr_cli.errors import CLIError, handle_file_not_found, handle_vypr_error
from vypr_cli.output import print_json
from vypr_core.errors import VyprError


@click.group()
def blueprint() -> None:
    """Work with ERC-5202 blueprint bytecode.

    **Commands:**

    - `vypr blueprint decode` - Decode blueprint bytecode to JSON
    """
    pass


@blueprint.command("decode")
@click.argument("bytecode", required=False)
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(),
    default=None,
    help="Read hex bytecode from a file (e.g. output of 'vypr compile --blueprint')",
)
def decode_cmd(bytecode: str | None, file_path: str | None) -> None:
    """Decode hex blueprint bytecode.

    Prints the ERC version, preamble data and initcode as JSON.

    Examples:

        vypr blueprint decode 0xfe710000

        vypr blueprint decode --file build/factory.blueprint
    """
    if (bytecode is None) == (file_path is None):
        raise CLIError("Provide either BYTECODE or --file")

    if file_path is not None:
        path = Path(file_path)
        if not path.exists():
            handle_file_not_found(file_path)
        bytecode = path.read_text()

    from vypr_core.blueprint import decode_hex

    assert bytecode is not None
    try:
        container = decode_hex(bytecode)
    except VyprError as e:
        handle_vypr_error(e)

    preamble = container.preamble_data
    print_json(
        {
            "erc_version": container.erc_version,
            "preamble_data": "0x" + preamble.hex() if preamble is not None else None,
            "initcode": "0x" + container.initcode.hex(),
            "initcode_size": len(container.initcode),
        }
    )

"""CLI command modules.

Each module holds one subcommand; they are loaded lazily by vypr_cli.main.
"""

from __future__ import annotations

__all__: list[str] = []

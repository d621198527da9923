"""Contract source discovery.

Finds Vyper sources in a single directory or across the conventional
locations of a workspace (root, ``contracts/`` for Ape/Hardhat layouts,
``src/`` for Foundry layouts).
"""

from __future__ import annotations

from pathlib import Path

import structlog

from vypr_core.errors import ToolchainIOError

logger = structlog.get_logger(__name__)

CONTRACT_SUFFIX = ".vy"

WORKSPACE_SUBDIRS = ("contracts", "src")
"""Workspace subdirectories searched in addition to the root."""


def contracts_in_dir(directory: Path | str) -> list[Path]:
    """List the contract sources directly inside a directory.

    Args:
        directory: Directory to scan (not recursive).

    Returns:
        Contract paths sorted by name.

    Raises:
        ToolchainIOError: If the directory cannot be read.
    """
    path = Path(directory)
    try:
        entries = list(path.iterdir())
    except OSError as e:
        raise ToolchainIOError(
            f"Cannot read directory {path}: {e.strerror or e}",
            internal_details=f"errno={e.errno}",
        ) from e

    return sorted(p for p in entries if p.is_file() and p.suffix == CONTRACT_SUFFIX)


def scan_workspace(root: Path | str) -> list[Path]:
    """Collect contract sources from a workspace.

    Missing or unreadable locations are skipped.

    Args:
        root: Workspace root.

    Returns:
        Contract paths from root, ``contracts/`` and ``src/``, in that order.
    """
    root_path = Path(root)
    found: list[Path] = []

    for location in (root_path, *(root_path / d for d in WORKSPACE_SUBDIRS)):
        if not location.is_dir():
            continue
        try:
            found.extend(contracts_in_dir(location))
        except ToolchainIOError:
            logger.warning("workspace_location_unreadable", location=str(location))

    logger.debug("workspace_scanned", root=str(root_path), contracts=len(found))
    return found

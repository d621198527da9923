"""Executable path resolution for the Vyper toolchain.

Every compiler and package-manager invocation resolves its executable
here. The result depends only on the optional environment root:

- ``None``: bare executable name, resolved through the system PATH
- ``Path``: ``<root>/bin/<name>`` (``<root>/Scripts/<name>`` on Windows)
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

COMPILER_NAME = "vyper"
"""Executable name of the compiler."""

PIP_NAME = "pip"
"""Executable name of the package manager."""

PACKAGE_NAME = "vyper"
"""Distribution name installed by the package manager."""


def bin_dir(environment_root: Path | str) -> Path:
    """Return the executables directory of a virtual environment.

    Args:
        environment_root: Root directory of the virtual environment.

    Returns:
        ``<root>/Scripts`` on Windows, ``<root>/bin`` elsewhere.
    """
    subdir = "Scripts" if os.name == "nt" else "bin"
    return Path(environment_root) / subdir


def resolve_executable(name: str, environment_root: Path | str | None = None) -> str:
    """Resolve an executable inside an environment or on PATH.

    Args:
        name: Executable name (e.g., "vyper", "pip").
        environment_root: Virtual environment root, or None for the system PATH.

    Returns:
        Path string suitable as the first element of an argument vector.

    Example:
        >>> resolve_executable("vyper", Path("venv"))
        'venv/bin/vyper'
        >>> resolve_executable("vyper")
        'vyper'
    """
    if environment_root is None:
        return name
    return str(bin_dir(environment_root) / name)


def resolve_compiler(environment_root: Path | str | None = None) -> str:
    """Resolve the compiler executable."""
    return resolve_executable(COMPILER_NAME, environment_root)


def resolve_pip(environment_root: Path | str | None = None) -> str:
    """Resolve the package-manager executable."""
    return resolve_executable(PIP_NAME, environment_root)


def compiler_installed(environment_root: Path | str | None = None) -> bool:
    """Check whether the compiler executable is present, without running it.

    For an environment root this is a filesystem check of the expected
    binary path (``.exe`` variant included on Windows). Without a root it
    is a PATH lookup.

    Args:
        environment_root: Virtual environment root, or None for the system PATH.

    Returns:
        True if the compiler executable can be located.
    """
    if environment_root is None:
        return shutil.which(COMPILER_NAME) is not None

    binary = Path(resolve_compiler(environment_root))
    if binary.exists():
        return True
    return os.name == "nt" and binary.with_suffix(".exe").exists()


def package_spec(version: str | None = None) -> str:
    """Build the pip requirement for the compiler.

    Args:
        version: Exact version to pin, or None for the latest release.

    Returns:
        ``vyper`` or ``vyper==<version>``.
    """
    if version:
        return f"{PACKAGE_NAME}=={version}"
    return PACKAGE_NAME

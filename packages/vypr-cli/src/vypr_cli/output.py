"""Rich console output utilities for vypr-cli.

Colored success/error/warning messages that respect the NO_COLOR
environment variable and the --no-color flag.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console

_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Compiled 3 contracts")
        ✓ Compiled 3 contracts
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Vyper is not installed in venv")
        ✗ Vyper is not installed in venv
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def raw(text: str) -> None:
    """Print compiler output verbatim, without markup or wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def print_json(data: Any, **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable value.
        **kwargs: Additional arguments passed to console.print_json().
    """
    console.print_json(json.dumps(data), **kwargs)


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)

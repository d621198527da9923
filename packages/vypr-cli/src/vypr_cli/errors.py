"""CLI error handling for vypr-cli.

Wraps vypr-core exceptions into user-friendly messages with
appropriate exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from vypr_cli.output import error
from vypr_core.errors import (
    ConcurrencyError,
    InstallationError,
    NotInstalledError,
    ToolchainIOError,
    VersionQueryError,
    VyprError,
)

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Invalid input, compile error
EXIT_SYSTEM_ERROR = 2  # IO failure, missing toolchain

_SYSTEM_ERRORS = (
    ToolchainIOError,
    NotInstalledError,
    InstallationError,
    VersionQueryError,
    ConcurrencyError,
)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(escape(self.format_message()))


def exit_code_for(err: VyprError) -> int:
    """Map a vypr-core exception to a CLI exit code."""
    if isinstance(err, _SYSTEM_ERRORS):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def handle_vypr_error(err: VyprError) -> NoReturn:
    """Re-raise a vypr-core exception as a CLIError.

    Compiler and pip diagnostics are shown verbatim.

    Raises:
        CLIError: Always.
    """
    raise CLIError(err.user_message, exit_code=exit_code_for(err)) from err


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - max_concurrency: Input should be greater than or equal to 1"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_yaml_error(err: Exception, file_path: str) -> NoReturn:
    """Handle YAML parsing errors with line number information.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        line = mark.line + 1
        col = mark.column + 1
        error_msg = f"YAML syntax error at line {line}, column {col}: {err.problem}"  # type: ignore[attr-defined]

    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Handle Pydantic validation errors with user-friendly messages.

    Args:
        err: Pydantic ValidationError instance.
        source: Configuration file path or "environment".

    Raises:
        CLIError: Always raises with formatted error message.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration in {source}:\n{formatted}")


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle file not found errors.

    Raises:
        CLIError: Always, with the system error exit code.
    """
    raise CLIError(f"File not found: {file_path}", exit_code=EXIT_SYSTEM_ERROR)

"""Custom exception hierarchy for vypr-core.

This module defines the exception classes used throughout vypr:
- VyprError: Base exception for all vypr-related errors
- ToolchainIOError: Raised when a process cannot be spawned or a file cannot be written
- CompileError: Raised when the compiler exits non-zero
- SerializationError: Raised when compiler output is not valid JSON
- ConcurrencyError: Raised when a batch task dies unexpectedly
- InstallationError / NotInstalledError: Toolchain provisioning failures
- BlueprintError and subclasses: ERC-5202 decoding failures
- ConfigurationError: Raised when vypr.yaml or VYPR_* variables are invalid

Compiler and package-manager diagnostics are passed through verbatim:
the stderr text of the external tool IS the user-facing message, so
callers can act on it directly. Additional context (paths, argument
vectors) is logged internally via structlog.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class VyprError(Exception):
    """Base exception for vypr.

    All vypr exceptions inherit from this class.

    Args:
        user_message: Message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but not part of ``str(error)``.

    Example:
        >>> raise VyprError(
        ...     "Toolchain unavailable",
        ...     internal_details="spawn of ./venv/bin/vyper failed: ENOENT"
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize VyprError with user message and optional internal details.

        Args:
            user_message: Message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "vypr_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ToolchainIOError(VyprError):
    """Raised when system IO fails.

    Use this exception when:
    - The compiler or pip executable cannot be spawned
    - An artifact file cannot be written
    """

    pass


class CompileError(VyprError):
    """Raised when the compiler exits with a non-zero status.

    The compiler's stderr is kept verbatim as the message.

    Attributes:
        stderr: Raw stderr text of the failed invocation.
        source_path: Source file that failed to compile (if known).

    Example:
        >>> raise CompileError("SyntaxException: invalid syntax", source_path="token.vy")
    """

    def __init__(
        self,
        stderr: str,
        *,
        source_path: Path | str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize CompileError.

        Args:
            stderr: Raw stderr text of the compiler.
            source_path: Source file that failed to compile.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(stderr, internal_details=internal_details)
        self.stderr = stderr
        self.source_path = Path(source_path) if source_path is not None else None


class SerializationError(VyprError):
    """Raised when compiler output cannot be parsed as JSON."""

    pass


class ConcurrencyError(VyprError):
    """Raised when a concurrent batch task fails outside the compiler itself."""

    pass


class VersionQueryError(VyprError):
    """Raised when the compiler version cannot be queried."""

    pass


class InstallationError(VyprError):
    """Raised when the package manager fails to install the compiler.

    Attributes:
        stderr: Raw stderr text of the package manager.
    """

    def __init__(self, stderr: str, *, internal_details: str | None = None) -> None:
        """Initialize InstallationError.

        Args:
            stderr: Raw stderr text of the package manager.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(stderr, internal_details=internal_details)
        self.stderr = stderr


class NotInstalledError(VyprError):
    """Raised when the compiler binary is expected but missing."""

    pass


class InvalidStateError(VyprError):
    """Raised when a toolchain operation is used from the wrong lifecycle state."""

    pass


class InvalidArgumentError(VyprError, ValueError):
    """Raised when an argument violates a precondition.

    Example:
        >>> raise InvalidArgumentError("Mismatched lengths: 3 sources, 2 ABI paths")
    """

    pass


class BlueprintError(VyprError):
    """Base class for ERC-5202 blueprint decoding failures."""

    pass


class NotABlueprintError(BlueprintError):
    """Raised when bytecode does not start with the 0xFE71 blueprint preamble."""

    pass


class ReservedBitsSetError(BlueprintError):
    """Raised when the length-encoding bits hold the reserved value 0b11."""

    pass


class EmptyInputError(BlueprintError):
    """Raised when decoding empty bytecode."""

    pass


class EmptyInitcodeError(BlueprintError):
    """Raised when a blueprint carries no initcode."""

    pass


class IntParseError(BlueprintError):
    """Raised when the preamble length bytes or hex input cannot be parsed."""

    pass


class ConfigurationError(VyprError):
    """Raised when a vypr configuration file or variable is invalid.

    Provides file path and field context for actionable error messages.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Name of the invalid field (e.g., "max_concurrency").

    Example:
        >>> raise ConfigurationError(
        ...     "Configuration must be a mapping",
        ...     file_path="vypr.yaml",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Name of the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path

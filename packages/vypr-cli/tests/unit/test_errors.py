"""Unit tests for vypr_cli.errors."""

from __future__ import annotations

import pytest
import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from vypr_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    exit_code_for,
    format_pydantic_error,
    handle_file_not_found,
    handle_vypr_error,
    handle_yaml_error,
)
from vypr_core.errors import (
    CompileError,
    InstallationError,
    InvalidArgumentError,
    NotABlueprintError,
    NotInstalledError,
    ToolchainIOError,
)


class TestCLIError:
    """Tests for CLIError exception."""

    def test_message_and_default_exit_code(self) -> None:
        """CLIError defaults to the user error exit code."""
        error = CLIError("Test error")
        assert error.message == "Test error"
        assert error.exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        """CLIError accepts a custom exit code."""
        assert CLIError("Test", exit_code=EXIT_SYSTEM_ERROR).exit_code == EXIT_SYSTEM_ERROR


class TestExitCodes:
    """Tests for mapping vypr-core errors to exit codes."""

    @pytest.mark.parametrize(
        "error",
        [CompileError("bad"), InvalidArgumentError("bad"), NotABlueprintError("bad")],
    )
    def test_user_errors(self, error: Exception) -> None:
        """Input and compile problems exit with 1."""
        assert exit_code_for(error) == EXIT_USER_ERROR  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "error",
        [ToolchainIOError("io"), NotInstalledError("missing"), InstallationError("pip")],
    )
    def test_system_errors(self, error: Exception) -> None:
        """Toolchain and IO problems exit with 2."""
        assert exit_code_for(error) == EXIT_SYSTEM_ERROR  # type: ignore[arg-type]

    def test_handle_vypr_error_keeps_message(self) -> None:
        """Compiler stderr reaches the user verbatim."""
        with pytest.raises(CLIError) as exc_info:
            handle_vypr_error(CompileError("vyper.exceptions.SyntaxException: line 4"))

        assert exc_info.value.message == "vyper.exceptions.SyntaxException: line 4"
        assert isinstance(exc_info.value.__cause__, CompileError)


class TestFormatPydanticError:
    """Tests for format_pydantic_error()."""

    def test_lists_each_field(self) -> None:
        """Each invalid field is listed with its message."""

        class Settings(BaseModel):
            max_concurrency: int = Field(ge=1)
            venv_path: str

        with pytest.raises(PydanticValidationError) as exc_info:
            Settings(max_concurrency=0)  # type: ignore[call-arg]

        formatted = format_pydantic_error(exc_info.value)
        assert formatted.startswith("Validation failed:")
        assert "  - max_concurrency:" in formatted
        assert "  - venv_path: Field required" in formatted


class TestHandlers:
    """Tests for the raising helpers."""

    def test_yaml_error_line_number(self) -> None:
        """YAML errors report the line and column."""
        try:
            yaml.safe_load("venv_path: a: b\n")
        except yaml.YAMLError as err:
            with pytest.raises(CLIError, match="line 1"):
                handle_yaml_error(err, "vypr.yaml")
        else:
            pytest.fail("YAML should not parse")

    def test_file_not_found(self) -> None:
        """Missing files are system errors."""
        with pytest.raises(CLIError) as exc_info:
            handle_file_not_found("vypr.yaml")

        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

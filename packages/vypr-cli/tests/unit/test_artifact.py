"""Tests for the vypr artifact command."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from vypr_cli.commands.artifact import artifact
from vypr_core.compiler import OutputFormat
from vypr_core.errors import CompileError


class TestArtifactCommand:
    """Tests for artifact command."""

    def test_dump_to_config_output_dir(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """Formats with a fixed dump name are written to a file."""
        mock_unit.write_artifact.return_value = Path("storage_layout.json")

        with patch("vypr_cli.commands.artifact.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(artifact, ["token.vy", "layout"])

        assert result.exit_code == 0, result.output
        mock_unit.write_artifact.assert_called_once_with(OutputFormat.LAYOUT, Path("."))
        assert "layout written to storage_layout.json" in result.output

    def test_dump_to_output_dir(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """--output-dir overrides the configured directory."""
        mock_unit.write_artifact.return_value = Path("build/opcodes.txt")

        with patch("vypr_cli.commands.artifact.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(
                artifact, ["token.vy", "opcodes", "--output-dir", "build"]
            )

        assert result.exit_code == 0, result.output
        mock_unit.write_artifact.assert_called_once_with(OutputFormat.OPCODES, "build")

    def test_stdout(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """--stdout prints the raw compiler output."""
        with patch("vypr_cli.commands.artifact.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(artifact, ["token.vy", "opcodes", "--stdout"])

        assert result.exit_code == 0, result.output
        assert "PUSH1 0x03" in result.output
        mock_unit.extract.assert_called_once_with(OutputFormat.OPCODES)
        mock_unit.write_artifact.assert_not_called()

    def test_format_without_dump_is_printed(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """Formats without a fixed dump name go to stdout."""
        mock_unit.extract.return_value = "0x6003"

        with patch("vypr_cli.commands.artifact.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(artifact, ["token.vy", "bytecode"])

        assert result.exit_code == 0, result.output
        assert "0x6003" in result.output
        mock_unit.write_artifact.assert_not_called()

    def test_unknown_format(self, isolated_runner: CliRunner) -> None:
        """Unknown formats are rejected by argument parsing."""
        result = isolated_runner.invoke(artifact, ["token.vy", "ir"])
        assert result.exit_code == 2

    def test_compile_error(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """Compiler diagnostics, including brackets, are shown verbatim."""
        mock_unit.extract.side_effect = CompileError("StructureException: [line 4] bad")

        with patch("vypr_cli.commands.artifact.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(artifact, ["token.vy", "abi"])

        assert result.exit_code == 1
        assert "StructureException: [line 4] bad" in result.output

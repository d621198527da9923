"""Tests for the vypr abi command."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from vypr_cli.commands.abi import abi
from vypr_core.errors import ToolchainIOError


class TestAbiCommand:
    """Tests for abi command."""

    def test_print_single_abi(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_batch: MagicMock
    ) -> None:
        """A single source prints its ABI array."""
        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(abi, ["token.vy"])

        assert result.exit_code == 0, result.output
        assert '"name": "totalSupply"' in result.output
        mock_batch.extract_abi_all.assert_awaited_once()

    def test_print_several_abis(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_batch: MagicMock
    ) -> None:
        """Several sources print an index-aligned list of source/ABI entries."""
        mock_batch.extract_abi_all = AsyncMock(return_value=[[], [{"name": "deposit"}]])

        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(abi, ["token.vy", "vault.vy"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [
            {"source": "token.vy", "abi": []},
            {"source": "vault.vy", "abi": [{"name": "deposit"}]},
        ]
        mock_toolchain.batch.assert_called_once_with(
            [Path("token.vy"), Path("vault.vy")], max_concurrency=None
        )

    def test_repeated_source_keeps_every_result(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_batch: MagicMock
    ) -> None:
        """A source given twice yields two entries."""
        mock_batch.extract_abi_all = AsyncMock(return_value=[[{"name": "a"}], [{"name": "b"}]])

        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(abi, ["token.vy", "token.vy"])

        assert result.exit_code == 0, result.output
        entries = json.loads(result.output)
        assert [e["abi"] for e in entries] == [[{"name": "a"}], [{"name": "b"}]]
        assert {e["source"] for e in entries} == {"token.vy"}

    def test_write_batch(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_batch: MagicMock
    ) -> None:
        """--write reports every written file."""
        mock_batch.write_abi_all = AsyncMock(return_value=[Path("token.json"), Path("vault.json")])

        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(abi, ["token.vy", "vault.vy", "--write"])

        assert result.exit_code == 0, result.output
        assert "ABI written to token.json" in result.output
        assert "ABI written to vault.json" in result.output

    def test_explicit_output(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_unit: MagicMock
    ) -> None:
        """--output writes through a single unit."""
        mock_unit.write_abi.return_value = Path("build/token.abi.json")

        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(
                abi, ["token.vy", "--output", "build/token.abi.json"]
            )

        assert result.exit_code == 0, result.output
        mock_toolchain.unit.assert_called_once_with(Path("token.vy"), "build/token.abi.json")
        assert "ABI written to build/token.abi.json" in result.output

    def test_output_requires_one_source(self, isolated_runner: CliRunner) -> None:
        """--output with several sources is a user error."""
        result = isolated_runner.invoke(abi, ["a.vy", "b.vy", "--output", "x.json"])

        assert result.exit_code == 1
        assert "exactly one source" in result.output

    def test_sources_required(self, isolated_runner: CliRunner) -> None:
        """At least one source is required."""
        result = isolated_runner.invoke(abi, [])
        assert result.exit_code == 2

    def test_write_failure(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock, mock_batch: MagicMock
    ) -> None:
        """A failed write exits with the system error code."""
        mock_batch.write_abi_all = AsyncMock(
            side_effect=ToolchainIOError("Cannot write token.json: Permission denied")
        )

        with patch("vypr_cli.commands.abi.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(abi, ["token.vy", "--write"])

        assert result.exit_code == 2
        assert "Permission denied" in result.output

"""Tests for the vypr version command."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from vypr_cli import __version__
from vypr_cli.commands.version import version
from vypr_core.errors import VersionQueryError


class TestVersionCommand:
    """Tests for version command."""

    def test_reports_both_versions(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock
    ) -> None:
        """vypr and compiler versions are printed."""
        with patch("vypr_cli.commands.version.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(version, [])

        assert result.exit_code == 0, result.output
        assert f"vypr {__version__}" in result.output
        assert "vyper 0.3.10+commit.91361694 (vyper)" in result.output

    def test_version_query_failure(
        self, isolated_runner: CliRunner, mock_toolchain: MagicMock
    ) -> None:
        """A failing --version query exits with the system error code."""
        mock_toolchain.get_version.side_effect = VersionQueryError(
            "Couldn't locate version info, installation does not exist"
        )

        with patch("vypr_cli.commands.version.ready_toolchain", return_value=mock_toolchain):
            result = isolated_runner.invoke(version, [])

        assert result.exit_code == 2
        assert "Couldn't locate version info" in result.output

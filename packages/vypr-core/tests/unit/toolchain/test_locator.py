"""Unit tests for executable resolution."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vypr_core.toolchain.locator import (
    bin_dir,
    compiler_installed,
    package_spec,
    resolve_compiler,
    resolve_pip,
)


class TestResolve:
    """Tests for resolve_compiler() / resolve_pip()."""

    @pytest.mark.requirement("001-FR-001")
    def test_global_resolution_is_bare_name(self) -> None:
        """Without an environment root the PATH is used."""
        assert resolve_compiler() == "vyper"
        assert resolve_pip(None) == "pip"

    @pytest.mark.requirement("001-FR-001")
    @pytest.mark.skipif(os.name == "nt", reason="POSIX layout")
    def test_venv_resolution(self) -> None:
        """Executables live under <root>/bin."""
        assert resolve_compiler(Path("venv")) == str(Path("venv") / "bin" / "vyper")
        assert resolve_pip("venv") == str(Path("venv") / "bin" / "pip")

    @pytest.mark.requirement("001-FR-001")
    def test_windows_scripts_dir(self) -> None:
        """Windows environments keep executables under Scripts."""
        with patch("vypr_core.toolchain.locator.os") as mock_os:
            mock_os.name = "nt"
            assert bin_dir("venv") == Path("venv") / "Scripts"

    @pytest.mark.requirement("001-FR-001")
    def test_resolution_depends_only_on_root(self) -> None:
        """The same root always yields the same path."""
        assert resolve_compiler("env") == resolve_compiler(Path("env"))


class TestCompilerInstalled:
    """Tests for compiler_installed()."""

    @pytest.mark.requirement("001-FR-002")
    def test_venv_binary_present(self, tmp_path: Path) -> None:
        """An existing binary path counts as installed."""
        binary = bin_dir(tmp_path) / "vyper"
        binary.parent.mkdir(parents=True)
        binary.write_text("#!/bin/sh\n")

        assert compiler_installed(tmp_path) is True

    @pytest.mark.requirement("001-FR-002")
    def test_venv_binary_missing(self, tmp_path: Path) -> None:
        """A missing binary path is not installed."""
        assert compiler_installed(tmp_path) is False

    @pytest.mark.requirement("001-FR-002")
    @patch("vypr_core.toolchain.locator.shutil.which")
    def test_global_lookup_uses_path(self, mock_which: MagicMock) -> None:
        """Global lookup searches PATH."""
        mock_which.return_value = "/usr/local/bin/vyper"
        assert compiler_installed(None) is True
        mock_which.assert_called_once_with("vyper")

        mock_which.return_value = None
        assert compiler_installed() is False


class TestPackageSpec:
    """Tests for package_spec()."""

    @pytest.mark.requirement("001-FR-003")
    def test_latest(self) -> None:
        """No version installs the latest release."""
        assert package_spec() == "vyper"

    @pytest.mark.requirement("001-FR-003")
    def test_pinned(self) -> None:
        """A version is pinned exactly."""
        assert package_spec("0.3.10") == "vyper==0.3.10"

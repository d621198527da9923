"""Shared test fixtures for vypr-cli tests.

Commands are exercised through CliRunner with the toolchain replaced by
mocks, so no Vyper installation is required.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from click.testing import CliRunner

from vypr_core.toolchain import GloballyReady

VYPR_VARIABLES = (
    "VYPR_VENV_PATH",
    "VYPR_USE_VENV",
    "VYPR_COMPILER_VERSION",
    "VYPR_EVM_VERSION",
    "VYPR_MAX_CONCURRENCY",
)


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def clear_vypr_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep VYPR_* variables of the developer's shell out of the tests."""
    for name in VYPR_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner inside a temporary working directory."""
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def mock_unit() -> MagicMock:
    """Return a CompilationUnit stand-in."""
    unit = MagicMock(name="CompilationUnit")
    unit.extract.return_value = "PUSH1 0x03\n"
    return unit


@pytest.fixture
def mock_batch() -> MagicMock:
    """Return a BatchOrchestrator stand-in with async operations."""
    batch = MagicMock(name="BatchOrchestrator")
    batch.compile_all = AsyncMock(return_value=["0x6001"])
    batch.compile_all_for_version = AsyncMock(return_value=["0x6002"])
    batch.compile_blueprint_all = AsyncMock(return_value=["0xfe710000"])
    batch.extract_abi_all = AsyncMock(return_value=[[{"name": "totalSupply"}]])
    batch.write_abi_all = AsyncMock(return_value=[])
    return batch


@pytest.fixture
def mock_toolchain(mock_unit: MagicMock, mock_batch: MagicMock) -> MagicMock:
    """Return a ready toolchain whose units and batches are mocks."""
    toolchain = MagicMock(spec=GloballyReady)
    toolchain.environment_root = None
    toolchain.binary = "vyper"
    toolchain.unit.return_value = mock_unit
    toolchain.batch.return_value = mock_batch
    toolchain.get_version.return_value = "0.3.10+commit.91361694"
    return toolchain

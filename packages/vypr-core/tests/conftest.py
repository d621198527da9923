"""Shared pytest fixtures for vypr-core tests.

Process spawning is always stubbed; no test requires a real Vyper
installation.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from vypr_core.toolchain.process import ProcessResult


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def make_result() -> Callable[..., ProcessResult]:
    """Return a factory for ProcessResult stubs.

    Example:
        >>> make_result(stdout="0x6003\\n")
        >>> make_result(returncode=1, stderr="SyntaxException")
    """

    def factory(
        *,
        args: list[str] | None = None,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> ProcessResult:
        return ProcessResult(
            args=args or ["vyper"],
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    return factory


@pytest.fixture
def contracts_dir(tmp_path: Path) -> Path:
    """Create a directory with three contract sources and one unrelated file."""
    directory = tmp_path / "contracts"
    directory.mkdir()
    for name in ("vault.vy", "token.vy", "auction.vy"):
        (directory / name).write_text("# @version ^0.3.10\n")
    (directory / "README.md").write_text("not a contract\n")
    return directory

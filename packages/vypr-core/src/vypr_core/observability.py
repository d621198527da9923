"""Structured logging for vypr.

This module provides:
- Structured logging setup via structlog
- An operation context manager that logs start, completion and failure
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_logger: BoundLogger | None = None

LOGGER_NAME = "vypr"


def get_logger() -> BoundLogger:
    """Get the package logger, creating it if necessary.

    Example:
        >>> logger = get_logger()
        >>> logger.info("toolchain_ready", venv="./venv")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(LOGGER_NAME)
    assert _logger is not None
    return _logger


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for vypr.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        force=True,
    )


@contextmanager
def operation(name: str, **attributes: Any) -> Iterator[dict[str, Any]]:
    """Log an operation's start, completion and failure with its duration.

    Args:
        name: Operation name (e.g., "install_binary", "compile_all").
        **attributes: Extra fields bound to every event.

    Yields:
        Mutable dict; keys added inside the block are logged on completion.

    Example:
        >>> with operation("install_binary", version="0.3.10") as result:
        ...     result["path"] = "./venv/bin/vyper"
    """
    logger = get_logger().bind(**attributes)
    extra: dict[str, Any] = {}
    start = time.perf_counter()

    logger.debug(f"{name}_started")
    try:
        yield extra
    except Exception as exc:
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.error(f"{name}_failed", error=str(exc), duration_ms=duration_ms)
        raise

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.info(f"{name}_completed", duration_ms=duration_ms, **extra)

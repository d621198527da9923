"""External process execution.

Thin wrappers around ``subprocess`` and ``asyncio`` subprocesses that
capture exit status, stdout and stderr into an immutable ProcessResult.

A process that cannot be spawned at all (missing executable, permission
denied) raises ToolchainIOError. A process that runs and exits non-zero
is NOT an error at this layer; callers decide what a failure means.
"""

from __future__ import annotations

import asyncio
import subprocess
from collections.abc import Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field

from vypr_core.errors import ToolchainIOError

logger = structlog.get_logger(__name__)


class ProcessResult(BaseModel):
    """Captured outcome of one external process.

    Attributes:
        args: Argument vector the process was spawned with
        returncode: Exit status
        stdout: Decoded standard output
        stderr: Decoded standard error

    Example:
        >>> result = ProcessResult(args=["vyper", "--version"], returncode=0, stdout="0.3.10\\n")
        >>> result.succeeded
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    args: list[str] = Field(..., min_length=1, description="Argument vector")
    returncode: int = Field(..., description="Exit status")
    stdout: str = Field(default="", description="Standard output")
    stderr: str = Field(default="", description="Standard error")

    @property
    def succeeded(self) -> bool:
        """Check if the process exited with status 0."""
        return self.returncode == 0


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def run_process(args: Sequence[str]) -> ProcessResult:
    """Run a process to completion and capture its output.

    Args:
        args: Argument vector; the first element is the executable.

    Returns:
        ProcessResult with exit status and decoded output.

    Raises:
        ToolchainIOError: If the process cannot be spawned.
    """
    argv = [str(a) for a in args]
    logger.debug("process_spawn", args=argv)

    try:
        completed = subprocess.run(argv, capture_output=True, check=False)
    except OSError as e:
        raise ToolchainIOError(
            f"Failed to run {argv[0]}: {e.strerror or e}",
            internal_details=f"args={argv} errno={e.errno}",
        ) from e

    return ProcessResult(
        args=argv,
        returncode=completed.returncode,
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr),
    )


async def run_process_async(args: Sequence[str]) -> ProcessResult:
    """Run a process asynchronously and capture its output.

    The calling task suspends only while waiting on process exit and
    output capture.

    Args:
        args: Argument vector; the first element is the executable.

    Returns:
        ProcessResult with exit status and decoded output.

    Raises:
        ToolchainIOError: If the process cannot be spawned.
    """
    argv = [str(a) for a in args]
    logger.debug("process_spawn", args=argv, mode="async")

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolchainIOError(
            f"Failed to run {argv[0]}: {e.strerror or e}",
            internal_details=f"args={argv} errno={e.errno}",
        ) from e

    stdout, stderr = await process.communicate()
    returncode = process.returncode if process.returncode is not None else -1

    return ProcessResult(
        args=argv,
        returncode=returncode,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
    )


def can_spawn(args: Sequence[str]) -> bool:
    """Check whether a process can be spawned, regardless of its exit status.

    Args:
        args: Argument vector of a cheap health-check invocation.

    Returns:
        True if the process started, False if spawning failed.
    """
    argv = [str(a) for a in args]
    try:
        subprocess.run(argv, capture_output=True, check=False)
    except OSError:
        logger.debug("process_spawn_failed", args=argv)
        return False
    return True

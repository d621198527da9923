"""Compiler invocation helpers shared by CompilationUnit and BatchOrchestrator.

Argument vectors are built and process results interpreted in exactly one
place, so single-unit and batch operations behave identically and differ
only in how many processes they spawn.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from vypr_core.compiler.models import EvmVersion, OutputFormat
from vypr_core.errors import (
    CompileError,
    SerializationError,
    ToolchainIOError,
    VersionQueryError,
)
from vypr_core.toolchain.process import ProcessResult, run_process

ABI_SUFFIX = ".json"


def derive_abi_path(source_path: Path | str) -> Path:
    """Derive the sibling ABI path of a source file.

    Example:
        >>> derive_abi_path("contracts/token.vy")
        PosixPath('contracts/token.json')
    """
    return Path(source_path).with_suffix(ABI_SUFFIX)


def compiler_args(
    binary: str,
    source_path: Path | str,
    *,
    evm_version: EvmVersion | None = None,
    output_format: OutputFormat | None = None,
) -> list[str]:
    """Build the compiler argument vector.

    Args:
        binary: Resolved compiler executable.
        source_path: Contract source file.
        evm_version: Optional EVM target (``--evm-version``).
        output_format: Optional artifact format (``-f``); None emits bytecode.

    Returns:
        ``[binary, (-f fmt), source, (--evm-version target)]``
    """
    args = [binary]
    if output_format is not None:
        args += ["-f", output_format.value]
    args.append(str(source_path))
    if evm_version is not None:
        args += ["--evm-version", evm_version.value]
    return args


def check_output(result: ProcessResult, source_path: Path | str) -> str:
    """Return raw stdout of a compiler run, or raise on failure.

    Raises:
        CompileError: If the compiler exited non-zero (stderr kept verbatim).
    """
    if not result.succeeded:
        raise CompileError(
            result.stderr,
            source_path=source_path,
            internal_details=f"args={result.args} returncode={result.returncode}",
        )
    return result.stdout


def parse_bytecode(result: ProcessResult, source_path: Path | str) -> str:
    """Extract the bytecode string (trimmed stdout) from a compiler run."""
    return check_output(result, source_path).strip()


def parse_json(result: ProcessResult, source_path: Path | str) -> Any:
    """Parse the JSON artifact emitted by a compiler run.

    Raises:
        CompileError: If the compiler exited non-zero.
        SerializationError: If stdout is not valid JSON.
    """
    stdout = check_output(result, source_path)
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        raise SerializationError(
            f"Compiler output for {source_path} is not valid JSON: {e}",
            internal_details=f"args={result.args} stdout={stdout[:200]!r}",
        ) from e


def write_json(path: Path | str, data: Any) -> Path:
    """Persist a JSON value pretty-printed (indent 2).

    Raises:
        ToolchainIOError: If the file cannot be written.
    """
    return write_text(path, json.dumps(data, indent=2) + "\n")


def write_text(path: Path | str, content: str) -> Path:
    """Persist text, creating parent directories as needed.

    Raises:
        ToolchainIOError: If the file cannot be written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    except OSError as e:
        raise ToolchainIOError(
            f"Cannot write {target}: {e.strerror or e}",
            internal_details=f"errno={e.errno}",
        ) from e
    return target


def query_version(binary: str) -> str:
    """Query a compiler executable for its version.

    Returns:
        Trimmed output of ``<binary> --version``.

    Raises:
        VersionQueryError: If the compiler cannot be run or exits non-zero.
    """
    try:
        result = run_process([binary, "--version"])
    except ToolchainIOError as e:
        raise VersionQueryError(
            "Couldn't locate version info, installation does not exist"
        ) from e

    if not result.succeeded:
        raise VersionQueryError(
            "Couldn't locate version info, installation does not exist",
            internal_details=result.stderr,
        )
    return result.stdout.strip()

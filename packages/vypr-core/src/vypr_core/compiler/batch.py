"""BatchOrchestrator: concurrent compilation of many contracts.

The orchestrator owns index-aligned sequences:

    source_paths[i]  <->  abi_paths[i]  <->  bytecode_results[i]

Every batch operation dispatches one independently scheduled task per
index. Each task writes only to its own pre-allocated slot, so results
stay aligned with the inputs whatever order the compiler processes finish
in. Failure policy:

- all tasks run to completion; siblings are never cancelled
- the first failure detected (in completion order) is raised once every
  task has settled
- no result sequence is published unless every unit succeeded
- nothing is retried
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar, cast

import structlog

from vypr_core.compiler.discovery import contracts_in_dir, scan_workspace
from vypr_core.compiler.invocation import derive_abi_path, write_json
from vypr_core.compiler.models import EvmVersion
from vypr_core.compiler.unit import CompilationUnit
from vypr_core.errors import ConcurrencyError, InvalidArgumentError, VyprError
from vypr_core.toolchain.locator import resolve_compiler

if TYPE_CHECKING:
    from vypr_core.toolchain.lifecycle import Toolchain

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BatchOrchestrator:
    """Compile and extract artifacts from many contracts concurrently.

    Attributes:
        source_paths: Contract sources, in caller order
        abi_paths: ABI output paths, index-aligned with ``source_paths``
        bytecode_results: Bytecode per source after a successful batch compile
        environment_root: Virtual environment root, or None for the global install
        max_concurrency: Upper bound on simultaneous compiler processes (None = unbounded)

    Example:
        >>> batch = BatchOrchestrator(["a.vy", "b.vy"])
        >>> await batch.compile_all()
        >>> batch.bytecode_results[1]  # bytecode of b.vy
    """

    def __init__(
        self,
        source_paths: Sequence[Path | str],
        abi_paths: Sequence[Path | str] | None = None,
        environment_root: Path | str | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the batch.

        Args:
            source_paths: Contract sources.
            abi_paths: ABI output paths, index-aligned with ``source_paths``.
                Derived from each source when omitted.
            environment_root: Virtual environment holding the compiler,
                or None to use the compiler on PATH.
            max_concurrency: Upper bound on simultaneous compiler processes.

        Raises:
            InvalidArgumentError: If ``abi_paths`` and ``source_paths`` differ
                in length, or ``max_concurrency`` is not positive.
        """
        sources = [Path(p) for p in source_paths]

        if abi_paths is None:
            abis = [derive_abi_path(p) for p in sources]
        else:
            abis = [Path(p) for p in abi_paths]
            if len(abis) != len(sources):
                raise InvalidArgumentError(
                    f"Mismatched lengths: {len(sources)} source paths, {len(abis)} ABI paths"
                )

        if max_concurrency is not None and max_concurrency < 1:
            raise InvalidArgumentError(f"max_concurrency must be >= 1, got {max_concurrency}")

        self.source_paths = sources
        self.abi_paths = abis
        self.bytecode_results: list[str] | None = None
        self.environment_root = Path(environment_root) if environment_root is not None else None
        self.max_concurrency = max_concurrency
        self._log = logger.bind(component="batch_orchestrator")

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_units(cls, units: Sequence[CompilationUnit]) -> BatchOrchestrator:
        """Build a batch from existing compilation units.

        Raises:
            InvalidArgumentError: If the units resolve different environments.
        """
        roots = {u.environment_root for u in units}
        if len(roots) > 1:
            raise InvalidArgumentError(
                "All units in a batch must share one environment root; "
                f"got {sorted(str(r) for r in roots)}"
            )
        return cls(
            [u.source_path for u in units],
            [u.abi_output_path for u in units],
            environment_root=roots.pop() if roots else None,
        )

    @classmethod
    def from_dir(
        cls,
        directory: Path | str,
        environment_root: Path | str | None = None,
    ) -> BatchOrchestrator:
        """Build a batch from every contract directly inside a directory.

        Raises:
            ToolchainIOError: If the directory cannot be read.
        """
        return cls(contracts_in_dir(directory), environment_root=environment_root)

    @classmethod
    def from_workspace(
        cls,
        root: Path | str,
        environment_root: Path | str | None = None,
    ) -> BatchOrchestrator:
        """Build a batch from the contracts of a workspace (root, contracts/, src/)."""
        return cls(scan_workspace(root), environment_root=environment_root)

    @classmethod
    def from_toolchain(
        cls,
        toolchain: Toolchain,
        source_paths: Sequence[Path | str],
        abi_paths: Sequence[Path | str] | None = None,
        max_concurrency: int | None = None,
    ) -> BatchOrchestrator:
        """Build a batch from a provisioned toolchain.

        Raises:
            InvalidStateError: If the toolchain is not Ready / GloballyReady.
        """
        from vypr_core.toolchain.lifecycle import ensure_ready

        ready = ensure_ready(toolchain)
        return cls(
            source_paths,
            abi_paths,
            environment_root=ready.environment_root,
            max_concurrency=max_concurrency,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.source_paths)

    def __repr__(self) -> str:
        return (
            f"BatchOrchestrator(units={len(self)}, "
            f"environment_root={str(self.environment_root) if self.environment_root else None!r})"
        )

    @property
    def binary(self) -> str:
        """Resolved compiler executable shared by every unit."""
        return resolve_compiler(self.environment_root)

    def units(self) -> list[CompilationUnit]:
        """Return index-aligned CompilationUnits carrying any batch results."""
        units = [
            CompilationUnit(src, abi, environment_root=self.environment_root)
            for src, abi in zip(self.source_paths, self.abi_paths, strict=True)
        ]
        if self.bytecode_results is not None:
            for unit, bytecode in zip(units, self.bytecode_results, strict=True):
                unit.bytecode = bytecode
        return units

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _begin(self, operation: str) -> float:
        self._log.info("batch_started", operation=operation, units=len(self))
        return time.monotonic()

    def _settle(self, operation: str, started: float, failures: Sequence[VyprError]) -> None:
        """Log the batch outcome and raise the first failure detected, if any."""
        duration_ms = int((time.monotonic() - started) * 1000)

        if failures:
            first_error = failures[0]
            self._log.warning(
                "batch_failed",
                operation=operation,
                units=len(self),
                failed=len(failures),
                duration_ms=duration_ms,
                error_type=type(first_error).__name__,
            )
            raise first_error

        self._log.info(
            "batch_completed", operation=operation, units=len(self), duration_ms=duration_ms
        )

    def _as_library_error(self, index: int, exc: BaseException) -> VyprError:
        if isinstance(exc, VyprError):
            return exc
        error = ConcurrencyError(
            f"Task for {self.source_paths[index]} failed: {type(exc).__name__}: {exc}"
        )
        error.__cause__ = exc
        return error

    async def _fan_out(
        self,
        operation: str,
        job: Callable[[CompilationUnit], Awaitable[T]],
    ) -> list[T]:
        """Run ``job`` on every unit concurrently and collect results by slot.

        Raises:
            VyprError: The first failure detected, after all tasks settled.
        """
        units = self.units()
        slots: list[T | None] = [None] * len(units)
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run_slot(index: int) -> None:
            try:
                if semaphore is None:
                    slots[index] = await job(units[index])
                else:
                    async with semaphore:
                        slots[index] = await job(units[index])
            except Exception as e:
                raise self._as_library_error(index, e) from e

        started = self._begin(operation)
        tasks = [
            asyncio.create_task(run_slot(i), name=f"vypr-{operation}-{i}")
            for i in range(len(units))
        ]
        failures: list[VyprError] = []

        try:
            for finished in asyncio.as_completed(tasks):
                try:
                    await finished
                except VyprError as e:
                    failures.append(e)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        self._settle(operation, started, failures)
        return cast(list[T], slots)

    async def _compile_many(
        self,
        operation: str,
        job: Callable[[CompilationUnit], Awaitable[str]],
    ) -> list[str]:
        results = await self._fan_out(operation, job)
        self.bytecode_results = results
        return results

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    async def compile_all(self) -> list[str]:
        """Compile every source concurrently.

        Returns:
            Bytecode per source, index-aligned (also stored in ``bytecode_results``).

        Raises:
            CompileError: First unit failure detected; ``bytecode_results`` unchanged.
            ToolchainIOError: If the compiler cannot be spawned.
        """
        return await self._compile_many("compile", lambda unit: unit.compile_async())

    async def compile_all_for_version(self, evm_version: EvmVersion | str) -> list[str]:
        """Compile every source concurrently for one EVM target.

        Raises:
            InvalidArgumentError: If ``evm_version`` names no known target.
            CompileError: First unit failure detected; ``bytecode_results`` unchanged.
        """
        evm = EvmVersion.parse(evm_version)
        return await self._compile_many(
            f"compile_{evm.value}", lambda unit: unit.compile_for_version_async(evm)
        )

    async def compile_blueprint_all(self) -> list[str]:
        """Compile every source concurrently to ERC-5202 blueprint bytecode.

        Returns:
            Blueprint bytecode per source, index-aligned (also stored in
            ``bytecode_results``, so ``units()[i].blueprint()`` decodes it).

        Raises:
            CompileError: First unit failure detected; ``bytecode_results`` unchanged.
        """
        return await self._compile_many(
            "compile_blueprint", lambda unit: unit.compile_blueprint_async()
        )

    async def extract_abi_all(self) -> list[Any]:
        """Return every contract's ABI as parsed JSON, index-aligned. Writes nothing.

        Raises:
            CompileError: First unit failure detected.
            SerializationError: If a unit's output is not valid JSON.
        """
        return await self._fan_out("extract_abi", lambda unit: unit.extract_abi_async())

    async def write_abi_all(self) -> list[Path]:
        """Write every contract's ABI as pretty-printed JSON to ``abi_paths[i]``.

        Returns:
            Written paths, index-aligned.

        Raises:
            CompileError: First unit failure detected.
            SerializationError: If a unit's output is not valid JSON.
            ToolchainIOError: If a file cannot be written.
        """

        async def write_one(unit: CompilationUnit) -> Path:
            abi = await unit.extract_abi_async()
            return await asyncio.to_thread(write_json, unit.abi_output_path, abi)

        return await self._fan_out("write_abi", write_one)

    def compile_all_blocking(
        self,
        evm_version: EvmVersion | str | None = None,
        max_workers: int | None = None,
    ) -> list[str]:
        """Compile every source on a bounded thread pool, for synchronous callers.

        Same slot-per-index aggregation and failure policy as compile_all().

        Args:
            evm_version: Optional EVM target applied to every unit.
            max_workers: Thread pool size (defaults to ``max_concurrency``,
                then to the executor's default).

        Returns:
            Bytecode per source, index-aligned (also stored in ``bytecode_results``).

        Raises:
            CompileError: First unit failure detected; ``bytecode_results`` unchanged.
        """
        evm = EvmVersion.parse(evm_version) if evm_version is not None else None
        units = self.units()
        slots: list[str | None] = [None] * len(units)

        def compile_one(index: int) -> None:
            unit = units[index]
            slots[index] = unit.compile() if evm is None else unit.compile_for_version(evm)

        started = self._begin("compile_blocking")
        failures: list[VyprError] = []
        workers = max_workers or self.max_concurrency
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vypr") as executor:
            futures = {executor.submit(compile_one, i): i for i in range(len(units))}
            for future in as_completed(futures):
                exc = future.exception()
                if exc is not None:
                    failures.append(self._as_library_error(futures[future], exc))

        self._settle("compile_blocking", started, failures)
        results = cast(list[str], slots)
        self.bytecode_results = results
        return results

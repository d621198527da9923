"""CompilationUnit: one contract source and its artifacts.

A CompilationUnit resolves the compiler through its optional environment
root, so isolated and global installations differ only in the resolved
executable path; every operation below is otherwise identical.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from vypr_core.blueprint import BlueprintContainer, decode_hex
from vypr_core.compiler.invocation import (
    check_output,
    compiler_args,
    derive_abi_path,
    parse_bytecode,
    parse_json,
    query_version,
    write_json,
    write_text,
)
from vypr_core.compiler.models import ARTIFACT_DUMPS, EvmVersion, OutputFormat
from vypr_core.errors import InvalidArgumentError, InvalidStateError
from vypr_core.toolchain.locator import resolve_compiler
from vypr_core.toolchain.process import can_spawn, run_process, run_process_async

if TYPE_CHECKING:
    from vypr_core.compiler.batch import BatchOrchestrator
    from vypr_core.toolchain.lifecycle import Toolchain

logger = structlog.get_logger(__name__)


class CompilationUnit:
    """A single contract source compiled with the Vyper compiler.

    Attributes:
        source_path: Contract source file
        abi_output_path: Where write_abi() persists the ABI
        bytecode: Bytecode from the last successful compile, or None
        environment_root: Virtual environment root, or None for the global install

    Example:
        >>> unit = CompilationUnit("contracts/token.vy")
        >>> unit.abi_output_path
        PosixPath('contracts/token.json')
        >>> unit.compile()
        >>> unit.bytecode.startswith("0x")
        True
    """

    def __init__(
        self,
        source_path: Path | str,
        abi_output_path: Path | str | None = None,
        environment_root: Path | str | None = None,
    ) -> None:
        """Initialize the unit.

        Args:
            source_path: Contract source file.
            abi_output_path: ABI output path; defaults to the source path
                with a ``.json`` suffix.
            environment_root: Virtual environment holding the compiler,
                or None to use the compiler on PATH.
        """
        self.source_path = Path(source_path)
        self.abi_output_path = (
            Path(abi_output_path) if abi_output_path is not None else derive_abi_path(source_path)
        )
        self.environment_root = Path(environment_root) if environment_root is not None else None
        self.bytecode: str | None = None
        self._log = logger.bind(source=str(self.source_path))

    @classmethod
    def from_toolchain(
        cls,
        toolchain: Toolchain,
        source_path: Path | str,
        abi_output_path: Path | str | None = None,
    ) -> CompilationUnit:
        """Create a unit from a provisioned toolchain.

        Raises:
            InvalidStateError: If the toolchain is not Ready / GloballyReady.
        """
        from vypr_core.toolchain.lifecycle import ensure_ready

        ready = ensure_ready(toolchain)
        return cls(source_path, abi_output_path, environment_root=ready.environment_root)

    @property
    def binary(self) -> str:
        """Resolved compiler executable."""
        return resolve_compiler(self.environment_root)

    def __repr__(self) -> str:
        return (
            f"CompilationUnit(source_path={str(self.source_path)!r}, "
            f"abi_output_path={str(self.abi_output_path)!r}, "
            f"bytecode={self.bytecode!r})"
        )

    # ------------------------------------------------------------------
    # Toolchain queries
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        """Check whether the compiler can be spawned. Never raises."""
        return can_spawn([self.binary, "-h"])

    def get_version(self) -> str:
        """Query the compiler version.

        Returns:
            Trimmed output of ``vyper --version``.

        Raises:
            VersionQueryError: If the compiler cannot be run or exits non-zero.
        """
        return query_version(self.binary)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def _compile(
        self,
        evm_version: EvmVersion | None = None,
        output_format: OutputFormat | None = None,
    ) -> str:
        args = compiler_args(
            self.binary,
            self.source_path,
            evm_version=evm_version,
            output_format=output_format,
        )
        self._log.info(
            "compile_started",
            evm_version=evm_version.value if evm_version else None,
            output_format=output_format.value if output_format else None,
        )
        bytecode = parse_bytecode(run_process(args), self.source_path)
        self.bytecode = bytecode
        self._log.info("compile_completed", bytecode_size=len(bytecode))
        return bytecode

    def compile(self) -> str:
        """Compile the source to creation bytecode.

        On success ``bytecode`` is updated; on failure it is left unchanged.

        Returns:
            The bytecode string.

        Raises:
            CompileError: If the compiler exits non-zero (stderr verbatim).
            ToolchainIOError: If the compiler cannot be spawned.
        """
        return self._compile()

    def compile_for_version(self, evm_version: EvmVersion | str) -> str:
        """Compile the source for a specific EVM target.

        Args:
            evm_version: EVM target, as EvmVersion or its flag string.

        Returns:
            The bytecode string.

        Raises:
            InvalidArgumentError: If ``evm_version`` names no known target.
            CompileError: If the compiler exits non-zero.
            ToolchainIOError: If the compiler cannot be spawned.
        """
        return self._compile(evm_version=EvmVersion.parse(evm_version))

    def compile_blueprint(self) -> str:
        """Compile the source to ERC-5202 blueprint bytecode.

        Returns:
            The blueprint bytecode string.

        Raises:
            CompileError: If the compiler exits non-zero.
            ToolchainIOError: If the compiler cannot be spawned.
        """
        return self._compile(output_format=OutputFormat.BLUEPRINT_BYTECODE)

    def blueprint(self) -> BlueprintContainer:
        """Decode the cached bytecode as an ERC-5202 blueprint.

        Raises:
            InvalidStateError: If nothing has been compiled yet.
            BlueprintError: If the bytecode is not a valid blueprint.
        """
        if self.bytecode is None:
            raise InvalidStateError(
                f"{self.source_path} has not been compiled; call compile_blueprint() first"
            )
        return decode_hex(self.bytecode)

    async def _compile_async(
        self,
        evm_version: EvmVersion | None = None,
        output_format: OutputFormat | None = None,
    ) -> str:
        args = compiler_args(
            self.binary,
            self.source_path,
            evm_version=evm_version,
            output_format=output_format,
        )
        bytecode = parse_bytecode(await run_process_async(args), self.source_path)
        self.bytecode = bytecode
        self._log.debug("compile_completed", bytecode_size=len(bytecode))
        return bytecode

    async def compile_async(self, evm_version: EvmVersion | str | None = None) -> str:
        """Compile without blocking the event loop.

        Args:
            evm_version: Optional EVM target.

        Returns:
            The bytecode string (also stored in ``bytecode``).
        """
        evm = EvmVersion.parse(evm_version) if evm_version is not None else None
        return await self._compile_async(evm_version=evm)

    async def compile_for_version_async(self, evm_version: EvmVersion | str) -> str:
        """Async twin of compile_for_version()."""
        return await self.compile_async(evm_version)

    async def compile_blueprint_async(self) -> str:
        """Async twin of compile_blueprint()."""
        return await self._compile_async(output_format=OutputFormat.BLUEPRINT_BYTECODE)

    # ------------------------------------------------------------------
    # Artifact extraction
    # ------------------------------------------------------------------

    def extract(self, output_format: OutputFormat | str) -> str:
        """Return the raw compiler output for any artifact format.

        Raises:
            InvalidArgumentError: If ``output_format`` is not a known format.
            CompileError: If the compiler exits non-zero.
        """
        fmt = OutputFormat.parse(output_format)
        args = compiler_args(self.binary, self.source_path, output_format=fmt)
        return check_output(run_process(args), self.source_path)

    def extract_abi(self) -> Any:
        """Return the contract ABI as parsed JSON without writing anything.

        Raises:
            CompileError: If the compiler exits non-zero.
            SerializationError: If the output is not valid JSON.
        """
        args = compiler_args(self.binary, self.source_path, output_format=OutputFormat.ABI)
        return parse_json(run_process(args), self.source_path)

    async def extract_abi_async(self) -> Any:
        """Async twin of extract_abi()."""
        args = compiler_args(self.binary, self.source_path, output_format=OutputFormat.ABI)
        return parse_json(await run_process_async(args), self.source_path)

    def write_abi(self) -> Path:
        """Generate the ABI and persist it pretty-printed to ``abi_output_path``.

        Returns:
            Path of the written file.

        Raises:
            CompileError: If the compiler exits non-zero.
            SerializationError: If the output is not valid JSON.
            ToolchainIOError: If the file cannot be written.
        """
        path = write_json(self.abi_output_path, self.extract_abi())
        self._log.info("abi_written", path=str(path))
        return path

    def _dump(self, output_format: OutputFormat, output_dir: Path | str) -> Path:
        dump = ARTIFACT_DUMPS[output_format]
        target = Path(output_dir) / dump.filename
        args = compiler_args(self.binary, self.source_path, output_format=output_format)
        result = run_process(args)

        if dump.is_json:
            path = write_json(target, parse_json(result, self.source_path))
        else:
            path = write_text(target, check_output(result, self.source_path))

        self._log.info("artifact_written", format=output_format.value, path=str(path))
        return path

    def write_storage_layout(self, output_dir: Path | str = ".") -> Path:
        """Write the storage layout as ``storage_layout.json``."""
        return self._dump(OutputFormat.LAYOUT, output_dir)

    def write_ast(self, output_dir: Path | str = ".") -> Path:
        """Write the AST as ``ast.json``."""
        return self._dump(OutputFormat.AST, output_dir)

    def write_interface(self, output_dir: Path | str = ".") -> Path:
        """Write the external interface as ``interface.vy``."""
        return self._dump(OutputFormat.EXTERNAL_INTERFACE, output_dir)

    def write_opcodes(self, output_dir: Path | str = ".") -> Path:
        """Write the deployment opcodes as ``opcodes.txt``."""
        return self._dump(OutputFormat.OPCODES, output_dir)

    def write_opcodes_runtime(self, output_dir: Path | str = ".") -> Path:
        """Write the runtime opcodes as ``opcodes_runtime.txt``."""
        return self._dump(OutputFormat.OPCODES_RUNTIME, output_dir)

    def write_userdoc(self, output_dir: Path | str = ".") -> Path:
        """Write the NatSpec user documentation as ``userdoc.txt``."""
        return self._dump(OutputFormat.USERDOC, output_dir)

    def write_devdoc(self, output_dir: Path | str = ".") -> Path:
        """Write the NatSpec developer documentation as ``devdoc.txt``."""
        return self._dump(OutputFormat.DEVDOC, output_dir)

    def write_artifact(
        self,
        output_format: OutputFormat | str,
        output_dir: Path | str = ".",
    ) -> Path:
        """Write any dumpable artifact under its fixed file name.

        Raises:
            InvalidArgumentError: If the format has no file dump (bytecode, abi, blueprint).
        """
        fmt = OutputFormat.parse(output_format)
        if fmt not in ARTIFACT_DUMPS:
            choices = ", ".join(f.value for f in ARTIFACT_DUMPS)
            raise InvalidArgumentError(
                f"Format '{fmt.value}' cannot be dumped. Expected one of: {choices}"
            )
        return self._dump(fmt, output_dir)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def to_batch(self) -> BatchOrchestrator:
        """Wrap this unit as a one-element batch."""
        from vypr_core.compiler.batch import BatchOrchestrator

        return BatchOrchestrator.from_units([self])

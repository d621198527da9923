"""Toolchain provisioning lifecycle.

The compiler must be provisioned before anything can be compiled. Each
provisioning state is its own class and only exposes the operations that
are valid in that state:

    NotProvisioned --init()--> Initialized --install_binary()--> Ready
                                           --try_ready()-------> Ready
                   --skip()--> Skipped --install_binary_globally()--> GloballyReady
                                       --try_ready()----------------> GloballyReady

Ready and GloballyReady are terminal and are the only states that can
hand out CompilationUnit / BatchOrchestrator instances, so "compile before
the install is verified" does not type-check. At runtime, transitions
consume the object they are called on; reusing a consumed state raises
InvalidStateError, and ensure_ready() rejects any non-ready value.

Example:
    >>> toolchain = NotProvisioned(Path("./venv")).init().install_binary("0.3.10")
    >>> unit = toolchain.unit("contracts/token.vy")
    >>> unit.compile()
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import structlog

from vypr_core.errors import InstallationError, InvalidStateError, NotInstalledError
from vypr_core.observability import operation
from vypr_core.toolchain.locator import (
    compiler_installed,
    package_spec,
    resolve_compiler,
    resolve_pip,
)
from vypr_core.toolchain.process import run_process

if TYPE_CHECKING:
    from vypr_core.compiler.batch import BatchOrchestrator
    from vypr_core.compiler.unit import CompilationUnit

logger = structlog.get_logger(__name__)

DEFAULT_VENV_PATH = Path("./venv")
"""Default location of the isolated environment."""

_T = TypeVar("_T", bound="Toolchain")


class ToolchainState(str, Enum):
    """Provisioning state of the toolchain.

    Attributes:
        NOT_PROVISIONED: Nothing has been decided yet
        INITIALIZED: Isolated environment exists
        READY: Compiler verified inside the isolated environment
        SKIPPED: Isolation declined, global installation will be used
        GLOBALLY_READY: Compiler verified on the system PATH
    """

    NOT_PROVISIONED = "not_provisioned"
    INITIALIZED = "initialized"
    READY = "ready"
    SKIPPED = "skipped"
    GLOBALLY_READY = "globally_ready"


class Toolchain(ABC):
    """Base class shared by every lifecycle state.

    Holds the environment path and the consumed flag. Subclasses set
    ``state`` as a class attribute and declare the transitions valid for it.

    Attributes:
        venv_path: Location of the isolated environment (unused once skipped)
    """

    @property
    @abstractmethod
    def state(self) -> ToolchainState:
        """Provisioning state tag of this value."""

    def __init__(self, venv_path: Path | str = DEFAULT_VENV_PATH) -> None:
        """Initialize the state.

        Args:
            venv_path: Location of the isolated environment.
        """
        self.venv_path = Path(venv_path)
        self._consumed = False
        self._log = logger.bind(state=self.state.value, venv_path=str(self.venv_path))

    @property
    def consumed(self) -> bool:
        """Check whether a transition has already been taken from this value."""
        return self._consumed

    def _ensure_live(self, operation: str) -> None:
        if self._consumed:
            raise InvalidStateError(
                f"Cannot call {operation}() on a consumed {type(self).__name__} toolchain; "
                "use the value returned by the previous transition"
            )

    def _advance(self, target: type[_T]) -> _T:
        self._consumed = True
        next_state = target(self.venv_path)
        self._log.info("toolchain_transition", to_state=target.state.value)
        return next_state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(venv_path={str(self.venv_path)!r})"


class NotProvisioned(Toolchain):
    """Initial state: choose between an isolated environment and a global install.

    Example:
        >>> initialized = NotProvisioned(Path("./venv")).init()
        >>> skipped = NotProvisioned().skip()
    """

    state = ToolchainState.NOT_PROVISIONED

    def __init__(
        self,
        venv_path: Path | str = DEFAULT_VENV_PATH,
        python: str | None = None,
    ) -> None:
        """Initialize the state.

        Args:
            venv_path: Location of the isolated environment.
            python: Interpreter used to create the environment
                (defaults to the running interpreter).
        """
        super().__init__(venv_path)
        self.python = python or sys.executable

    def init(self) -> Initialized:
        """Create the isolated environment if it does not exist yet.

        A no-op when ``venv_path`` already exists.

        Returns:
            Initialized state.

        Raises:
            InvalidStateError: If this value was already consumed.
            InstallationError: If environment creation exits non-zero.
            ToolchainIOError: If the interpreter cannot be spawned.
        """
        self._ensure_live("init")

        if self.venv_path.exists():
            self._log.debug("venv_exists")
        else:
            self.venv_path.mkdir(parents=True, exist_ok=True)
            result = run_process([self.python, "-m", "venv", str(self.venv_path)])
            if not result.succeeded:
                raise InstallationError(
                    result.stderr,
                    internal_details=f"venv creation failed: args={result.args} "
                    f"returncode={result.returncode}",
                )
            self._log.info("venv_created")

        return self._advance(Initialized)

    def skip(self) -> Skipped:
        """Decline the isolated environment.

        Returns:
            Skipped state.

        Raises:
            InvalidStateError: If this value was already consumed.
        """
        self._ensure_live("skip")
        return self._advance(Skipped)


class Initialized(Toolchain):
    """Isolated environment exists; the compiler may still be missing."""

    state = ToolchainState.INITIALIZED

    def install_binary(self, version: str | None = None) -> Ready:
        """Install the compiler into the isolated environment.

        Args:
            version: Exact compiler version to pin, or None for the latest.

        Returns:
            Ready state.

        Raises:
            InvalidStateError: If this value was already consumed.
            InstallationError: If pip exits non-zero (stderr kept verbatim).
            ToolchainIOError: If pip cannot be spawned.
        """
        self._ensure_live("install_binary")

        requirement = package_spec(version)
        result = run_process([resolve_pip(self.venv_path), "install", requirement])
        if not result.succeeded:
            raise InstallationError(
                result.stderr,
                internal_details=f"pip install {requirement} exited {result.returncode}",
            )

        self._log.info("compiler_installed", requirement=requirement, scope="venv")
        return self._advance(Ready)

    def try_ready(self) -> Ready:
        """Verify the compiler exists in the environment without reinstalling.

        Returns:
            Ready state.

        Raises:
            InvalidStateError: If this value was already consumed.
            NotInstalledError: If the expected binary path does not exist.
        """
        self._ensure_live("try_ready")

        if not compiler_installed(self.venv_path):
            raise NotInstalledError(
                f"Vyper is not installed in {self.venv_path}",
                internal_details=f"missing {resolve_compiler(self.venv_path)}",
            )
        return self._advance(Ready)


class Skipped(Toolchain):
    """Isolation declined; a global installation will be used."""

    state = ToolchainState.SKIPPED

    @staticmethod
    def global_exists() -> bool:
        """Check whether the compiler resolves on the system PATH."""
        return compiler_installed(None)

    def install_binary_globally(self, version: str | None = None) -> GloballyReady:
        """Install the compiler with the global package manager.

        Args:
            version: Exact compiler version to pin, or None for the latest.

        Returns:
            GloballyReady state.

        Raises:
            InvalidStateError: If this value was already consumed.
            InstallationError: If pip exits non-zero (stderr kept verbatim).
            ToolchainIOError: If pip cannot be spawned.
        """
        self._ensure_live("install_binary_globally")

        requirement = package_spec(version)
        result = run_process([resolve_pip(None), "install", requirement])
        if not result.succeeded:
            raise InstallationError(
                result.stderr,
                internal_details=f"global pip install {requirement} exited {result.returncode}",
            )

        self._log.info("compiler_installed", requirement=requirement, scope="global")
        return self._advance(GloballyReady)

    def try_ready(self) -> GloballyReady:
        """Verify the compiler resolves on the system PATH.

        Returns:
            GloballyReady state.

        Raises:
            InvalidStateError: If this value was already consumed.
            NotInstalledError: If the compiler is not on PATH.
        """
        self._ensure_live("try_ready")

        if not self.global_exists():
            raise NotInstalledError("Vyper is not installed on PATH")
        return self._advance(GloballyReady)


class ReadyToolchain(Toolchain):
    """Terminal state from which compilation units and batches are created.

    Subclasses differ only in ``environment_root``.
    """

    @property
    @abstractmethod
    def environment_root(self) -> Path | None:
        """Environment root the compiler is resolved against."""

    @property
    def binary(self) -> str:
        """Resolved compiler executable."""
        return resolve_compiler(self.environment_root)

    def get_version(self) -> str:
        """Query the provisioned compiler's version.

        Raises:
            VersionQueryError: If the compiler cannot be run or exits non-zero.
        """
        from vypr_core.compiler.invocation import query_version

        return query_version(self.binary)

    def unit(
        self,
        source_path: Path | str,
        abi_path: Path | str | None = None,
    ) -> CompilationUnit:
        """Create a compilation unit bound to this toolchain.

        Args:
            source_path: Contract source file.
            abi_path: ABI output path (derived from the source if omitted).

        Returns:
            CompilationUnit resolving the compiler through this toolchain.
        """
        from vypr_core.compiler.unit import CompilationUnit

        return CompilationUnit(source_path, abi_path, environment_root=self.environment_root)

    def batch(
        self,
        source_paths: Sequence[Path | str],
        abi_paths: Sequence[Path | str] | None = None,
        max_concurrency: int | None = None,
    ) -> BatchOrchestrator:
        """Create a batch bound to this toolchain.

        Args:
            source_paths: Contract source files.
            abi_paths: ABI output paths, index-aligned with ``source_paths``.
            max_concurrency: Upper bound on simultaneous compiler processes.

        Returns:
            BatchOrchestrator resolving the compiler through this toolchain.

        Raises:
            InvalidArgumentError: If ``abi_paths`` length differs from ``source_paths``.
        """
        from vypr_core.compiler.batch import BatchOrchestrator

        return BatchOrchestrator(
            source_paths,
            abi_paths,
            environment_root=self.environment_root,
            max_concurrency=max_concurrency,
        )

    def batch_from_dir(self, directory: Path | str) -> BatchOrchestrator:
        """Create a batch from every contract in one directory."""
        from vypr_core.compiler.batch import BatchOrchestrator

        return BatchOrchestrator.from_dir(directory, environment_root=self.environment_root)

    def batch_from_workspace(self, root: Path | str) -> BatchOrchestrator:
        """Create a batch from every contract in a workspace."""
        from vypr_core.compiler.batch import BatchOrchestrator

        return BatchOrchestrator.from_workspace(root, environment_root=self.environment_root)


class Ready(ReadyToolchain):
    """Compiler verified inside the isolated environment."""

    state = ToolchainState.READY

    @property
    def environment_root(self) -> Path | None:
        return self.venv_path


class GloballyReady(ReadyToolchain):
    """Compiler verified on the system PATH."""

    state = ToolchainState.GLOBALLY_READY

    @property
    def environment_root(self) -> Path | None:
        return None


def ensure_ready(toolchain: Toolchain) -> ReadyToolchain:
    """Narrow a lifecycle value to a ready toolchain.

    Args:
        toolchain: Any lifecycle state.

    Returns:
        The same value, typed as ReadyToolchain.

    Raises:
        InvalidStateError: If the value is not in a ready state.
    """
    if not isinstance(toolchain, ReadyToolchain):
        state = getattr(toolchain, "state", None)
        label = state.value if isinstance(state, ToolchainState) else type(toolchain).__name__
        raise InvalidStateError(
            f"Toolchain is {label}; install or verify the compiler first"
        )
    return toolchain


def provision(
    venv_path: Path | str = DEFAULT_VENV_PATH,
    *,
    use_venv: bool = True,
    version: str | None = None,
    install: bool = True,
) -> ReadyToolchain:
    """Walk the lifecycle from NotProvisioned to a ready state.

    Args:
        venv_path: Location of the isolated environment.
        use_venv: Provision into the isolated environment, or skip to the
            global installation.
        version: Exact compiler version to pin when installing.
        install: Install the compiler. When False, only verify that it
            is already present.

    Returns:
        Ready or GloballyReady toolchain.

    Raises:
        InstallationError: If environment creation or pip fails.
        NotInstalledError: If ``install`` is False and the compiler is missing.
    """
    start = NotProvisioned(venv_path)
    with operation("provision", use_venv=use_venv, install=install) as result:
        if use_venv:
            if not install and not start.venv_path.exists():
                raise NotInstalledError(
                    f"No environment at {start.venv_path}; install the compiler first"
                )
            initialized = start.init()
            ready: ReadyToolchain = (
                initialized.install_binary(version) if install else initialized.try_ready()
            )
        else:
            skipped = start.skip()
            ready = skipped.install_binary_globally(version) if install else skipped.try_ready()
        result["binary"] = ready.binary
    return ready

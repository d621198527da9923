"""vypr-core: Vyper compiler orchestration.

This package provides:
- Toolchain lifecycle: provision the compiler in a venv or globally
- CompilationUnit: compile one contract and extract its artifacts
- BatchOrchestrator: compile many contracts concurrently
- ERC-5202 blueprint decoding
- VyprConfig: vypr.yaml / VYPR_* configuration
"""

from __future__ import annotations

__version__ = "0.1.0"

# Blueprint codec
from vypr_core.blueprint import BlueprintContainer, decode, decode_hex, encode

# Compiler
from vypr_core.compiler import (
    ARTIFACT_DUMPS,
    BatchOrchestrator,
    CompilationUnit,
    EvmVersion,
    OutputFormat,
    contracts_in_dir,
    scan_workspace,
)

# Configuration
from vypr_core.config import VyprConfig, load_config

# Error types
from vypr_core.errors import (
    BlueprintError,
    CompileError,
    ConcurrencyError,
    ConfigurationError,
    EmptyInitcodeError,
    EmptyInputError,
    InstallationError,
    IntParseError,
    InvalidArgumentError,
    InvalidStateError,
    NotABlueprintError,
    NotInstalledError,
    ReservedBitsSetError,
    SerializationError,
    ToolchainIOError,
    VersionQueryError,
    VyprError,
)

# Toolchain lifecycle
from vypr_core.toolchain import (
    GloballyReady,
    Initialized,
    NotProvisioned,
    Ready,
    ReadyToolchain,
    Skipped,
    ToolchainState,
    ensure_ready,
    provision,
)

__all__ = [
    "__version__",
    # Toolchain
    "NotProvisioned",
    "Initialized",
    "Skipped",
    "Ready",
    "GloballyReady",
    "ReadyToolchain",
    "ToolchainState",
    "ensure_ready",
    "provision",
    # Compiler
    "CompilationUnit",
    "BatchOrchestrator",
    "EvmVersion",
    "OutputFormat",
    "ARTIFACT_DUMPS",
    "contracts_in_dir",
    "scan_workspace",
    # Blueprint
    "BlueprintContainer",
    "decode",
    "decode_hex",
    "encode",
    # Configuration
    "VyprConfig",
    "load_config",
    # Errors
    "VyprError",
    "ToolchainIOError",
    "CompileError",
    "SerializationError",
    "ConcurrencyError",
    "VersionQueryError",
    "InstallationError",
    "NotInstalledError",
    "InvalidStateError",
    "InvalidArgumentError",
    "ConfigurationError",
    "BlueprintError",
    "NotABlueprintError",
    "ReservedBitsSetError",
    "EmptyInputError",
    "EmptyInitcodeError",
    "IntParseError",
]

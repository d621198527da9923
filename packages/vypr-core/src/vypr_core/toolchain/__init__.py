"""Toolchain provisioning and process execution.

This package provides:
- Executable resolution for the compiler and package manager
- ProcessResult and sync/async process runners
- The provisioning lifecycle (NotProvisioned -> ... -> Ready / GloballyReady)
"""

from __future__ import annotations

from vypr_core.toolchain.lifecycle import (
    DEFAULT_VENV_PATH,
    GloballyReady,
    Initialized,
    NotProvisioned,
    Ready,
    ReadyToolchain,
    Skipped,
    Toolchain,
    ToolchainState,
    ensure_ready,
    provision,
)
from vypr_core.toolchain.locator import (
    compiler_installed,
    resolve_compiler,
    resolve_pip,
)
from vypr_core.toolchain.process import (
    ProcessResult,
    can_spawn,
    run_process,
    run_process_async,
)

__all__ = [
    # Lifecycle
    "DEFAULT_VENV_PATH",
    "GloballyReady",
    "Initialized",
    "NotProvisioned",
    "Ready",
    "ReadyToolchain",
    "Skipped",
    "Toolchain",
    "ToolchainState",
    "ensure_ready",
    "provision",
    # Locator
    "compiler_installed",
    "resolve_compiler",
    "resolve_pip",
    # Process
    "ProcessResult",
    "can_spawn",
    "run_process",
    "run_process_async",
]

"""Compiler orchestration package.

This package drives the external Vyper compiler:
- CompilationUnit: one source file, its ABI path and cached bytecode
- BatchOrchestrator: concurrent, index-aligned compilation of many sources
- EvmVersion / OutputFormat: compiler option enumerations
- Contract discovery in directories and workspaces

The typical workflow is:
1. Provision the toolchain: toolchain = NotProvisioned().init().install_binary()
2. Create a batch: batch = toolchain.batch(["a.vy", "b.vy"])
3. Compile: bytecode = await batch.compile_all()
"""

from vypr_core.compiler.batch import BatchOrchestrator
from vypr_core.compiler.discovery import contracts_in_dir, scan_workspace
from vypr_core.compiler.models import ARTIFACT_DUMPS, EvmVersion, OutputFormat
from vypr_core.compiler.unit import CompilationUnit

__all__ = [
    "ARTIFACT_DUMPS",
    "BatchOrchestrator",
    "CompilationUnit",
    "EvmVersion",
    "OutputFormat",
    "contracts_in_dir",
    "scan_workspace",
]

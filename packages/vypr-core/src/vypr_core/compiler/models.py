"""Compiler option enumerations.

- EvmVersion: EVM targets accepted by ``--evm-version``
- OutputFormat: artifact formats accepted by ``-f``
- ArtifactDump: fixed file names used when persisting artifacts
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from vypr_core.errors import InvalidArgumentError


class EvmVersion(str, Enum):
    """EVM protocol upgrade targeted when emitting bytecode.

    The value is the flag string passed to ``--evm-version``.
    """

    BYZANTIUM = "byzantium"
    CONSTANTINOPLE = "constantinople"
    PETERSBURG = "petersburg"
    ISTANBUL = "istanbul"
    BERLIN = "berlin"
    PARIS = "paris"
    SHANGHAI = "shanghai"
    CANCUN = "cancun"
    ATLANTIS = "atlantis"
    AGHARTA = "agharta"

    @classmethod
    def parse(cls, value: EvmVersion | str) -> EvmVersion:
        """Coerce a string (any case) into an EvmVersion.

        Args:
            value: EvmVersion member or its flag string.

        Returns:
            Matching EvmVersion.

        Raises:
            InvalidArgumentError: If the value names no known target.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(v.value for v in cls)
            raise InvalidArgumentError(
                f"Unknown EVM version '{value}'. Expected one of: {choices}"
            ) from None

    def __str__(self) -> str:
        return self.value


class OutputFormat(str, Enum):
    """Artifact formats the compiler can emit with ``-f``."""

    BYTECODE = "bytecode"
    ABI = "abi"
    BLUEPRINT_BYTECODE = "blueprint_bytecode"
    LAYOUT = "layout"
    AST = "ast"
    EXTERNAL_INTERFACE = "external_interface"
    OPCODES = "opcodes"
    OPCODES_RUNTIME = "opcodes_runtime"
    USERDOC = "userdoc"
    DEVDOC = "devdoc"

    @classmethod
    def parse(cls, value: OutputFormat | str) -> OutputFormat:
        """Coerce a string into an OutputFormat.

        Raises:
            InvalidArgumentError: If the value names no known format.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(v.value for v in cls)
            raise InvalidArgumentError(
                f"Unknown output format '{value}'. Expected one of: {choices}"
            ) from None

    def __str__(self) -> str:
        return self.value


class ArtifactDump(NamedTuple):
    """How one artifact format is persisted."""

    filename: str
    is_json: bool


ARTIFACT_DUMPS: dict[OutputFormat, ArtifactDump] = {
    OutputFormat.LAYOUT: ArtifactDump("storage_layout.json", True),
    OutputFormat.AST: ArtifactDump("ast.json", True),
    OutputFormat.EXTERNAL_INTERFACE: ArtifactDump("interface.vy", False),
    OutputFormat.OPCODES: ArtifactDump("opcodes.txt", False),
    OutputFormat.OPCODES_RUNTIME: ArtifactDump("opcodes_runtime.txt", False),
    OutputFormat.USERDOC: ArtifactDump("userdoc.txt", False),
    OutputFormat.DEVDOC: ArtifactDump("devdoc.txt", False),
}
"""Fixed relative file names for per-unit artifact dumps."""

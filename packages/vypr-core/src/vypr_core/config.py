"""Project configuration for vypr.

Configuration is read from ``vypr.yaml`` when present, otherwise from
``VYPR_*`` environment variables:

    VYPR_VENV_PATH          Isolated environment location (default ./venv)
    VYPR_USE_VENV           "false"/"0"/"no" to use the global install
    VYPR_COMPILER_VERSION   Exact compiler version to install
    VYPR_EVM_VERSION        Default EVM target
    VYPR_MAX_CONCURRENCY    Upper bound on simultaneous compiler processes

Example vypr.yaml:

    venv_path: .venv-vyper
    compiler_version: "0.3.10"
    evm_version: shanghai
    contracts:
      - contracts/token.vy
      - contracts/vault.vy
    max_concurrency: 4
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from vypr_core.compiler.models import EvmVersion
from vypr_core.errors import ConfigurationError
from vypr_core.toolchain.lifecycle import DEFAULT_VENV_PATH

logger = structlog.get_logger(__name__)

CONFIG_FILE_NAME = "vypr.yaml"
"""Standard configuration file name, looked up in the working directory."""

ENV_PREFIX = "VYPR_"

_ENV_FIELDS = (
    "venv_path",
    "use_venv",
    "compiler_version",
    "evm_version",
    "max_concurrency",
)


class VyprConfig(BaseModel):
    """Validated vypr configuration.

    Attributes:
        venv_path: Isolated environment location
        use_venv: Whether to provision into the isolated environment
        compiler_version: Exact compiler version to install (None = latest)
        evm_version: Default EVM target (None = compiler default)
        contracts: Contract sources compiled when none are given explicitly
        max_concurrency: Upper bound on simultaneous compiler processes
        output_dir: Directory for artifact dumps
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    venv_path: Path = Field(default=DEFAULT_VENV_PATH, description="Isolated environment path")
    use_venv: bool = Field(default=True, description="Provision into the isolated environment")
    compiler_version: str | None = Field(default=None, description="Compiler version to install")
    evm_version: EvmVersion | None = Field(default=None, description="Default EVM target")
    contracts: list[Path] = Field(default_factory=list, description="Contract sources")
    max_concurrency: int | None = Field(
        default=None, ge=1, description="Maximum simultaneous compiler processes"
    )
    output_dir: Path = Field(default=Path("."), description="Artifact output directory")

    @field_validator("evm_version", mode="before")
    @classmethod
    def _normalize_evm_version(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("compiler_version", mode="before")
    @classmethod
    def _stringify_version(cls, value: Any) -> Any:
        # YAML reads an unquoted 0.4 as a float
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def from_yaml(cls, path: str | Path) -> VyprConfig:
        """Load and validate configuration from a YAML file.

        Relative paths in the file are resolved against the file's directory.

        Args:
            path: Path to vypr.yaml.

        Returns:
            Validated VyprConfig instance.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            ConfigurationError: If the document is not a mapping.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                "Configuration must be a mapping of settings",
                file_path=str(path),
            )

        config = cls.model_validate(dict(data))
        logger.debug("config_loaded", source=str(path))
        return config.relative_to(path.parent)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> VyprConfig:
        """Build configuration from ``VYPR_*`` environment variables.

        Args:
            environ: Environment mapping (defaults to ``os.environ``).

        Returns:
            Validated VyprConfig instance.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for field in _ENV_FIELDS:
            value = env.get(f"{ENV_PREFIX}{field.upper()}")
            if value is not None and value != "":
                data[field] = value
        return cls.model_validate(data)

    def relative_to(self, base: Path) -> VyprConfig:
        """Return a copy with relative paths anchored at ``base``."""

        def anchor(p: Path) -> Path:
            return p if p.is_absolute() else base / p

        return self.model_copy(
            update={
                "venv_path": anchor(self.venv_path),
                "contracts": [anchor(c) for c in self.contracts],
                "output_dir": anchor(self.output_dir),
            }
        )


def load_config(path: str | Path | None = None) -> VyprConfig:
    """Load configuration from an explicit file, ./vypr.yaml, or the environment.

    Args:
        path: Explicit configuration file. When None, ``./vypr.yaml`` is used
            if it exists, otherwise ``VYPR_*`` environment variables.

    Returns:
        Validated VyprConfig instance.
    """
    if path is not None:
        return VyprConfig.from_yaml(path)

    default = Path(CONFIG_FILE_NAME)
    if default.exists():
        return VyprConfig.from_yaml(default)

    return VyprConfig.from_env()

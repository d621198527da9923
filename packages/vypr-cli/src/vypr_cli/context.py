"""Shared configuration and toolchain loading for CLI commands."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from vypr_cli.errors import (
    handle_file_not_found,
    handle_validation_error,
    handle_vypr_error,
    handle_yaml_error,
)
from vypr_core.config import CONFIG_FILE_NAME, VyprConfig, load_config
from vypr_core.errors import VyprError
from vypr_core.toolchain import ReadyToolchain, provision


def load_cli_config(config_path: str | None) -> VyprConfig:
    """Load configuration, translating failures into CLIError.

    Args:
        config_path: Explicit --config value, or None for ./vypr.yaml / environment.

    Raises:
        CLIError: If the configuration is missing or invalid.
    """
    if config_path is not None:
        source = config_path
    elif Path(CONFIG_FILE_NAME).exists():
        source = CONFIG_FILE_NAME
    else:
        source = "environment"

    try:
        return load_config(config_path)
    except FileNotFoundError:
        handle_file_not_found(source)
    except yaml.YAMLError as e:
        handle_yaml_error(e, source)
    except PydanticValidationError as e:
        handle_validation_error(e, source)
    except VyprError as e:
        handle_vypr_error(e)


def ready_toolchain(config: VyprConfig) -> ReadyToolchain:
    """Verify the configured compiler is present without installing it.

    Raises:
        CLIError: If the compiler is missing (exit code 2).
    """
    try:
        return provision(config.venv_path, use_venv=config.use_venv, install=False)
    except VyprError as e:
        handle_vypr_error(e)

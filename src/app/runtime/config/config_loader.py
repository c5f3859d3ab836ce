"""Configuration loading with environment variable substitution."""

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path("config.yaml")


def load_config(file_path: Path = CONFIG_PATH) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file (default: config.yaml)

    Returns:
        Validated ConfigData

    Raises:
        ValueError: If required environment variables are missing, validation fails,
                   or YAML structure is invalid (missing 'config' key)
        FileNotFoundError: If the YAML file doesn't exist

    YAML Structure Requirements:
        The YAML file must have a top-level 'config:' key containing configuration data.

    Environment-Specific Behavior:
        Reads APP_ENVIRONMENT (default: 'development') and applies overrides from
        environment variables prefixed with the uppercased environment name
        (e.g., PRODUCTION_K8S_NAMESPACE -> K8S_NAMESPACE) before substitution.
        This mutates os.environ.
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    prefix = f"{env_mode.upper()}_"
    env_variables = [
        (var, value) for var, value in os.environ.items() if var.startswith(prefix)
    ]
    logger.debug(f"Override keys: {[var for var, _ in env_variables]}")

    # PRODUCTION_FOO=bar becomes FOO=bar
    for var_name, var_value in env_variables:
        os.environ[var_name[len(prefix) :]] = var_value

    content = substitute_env_vars(content)

    try:
        loaded: dict[str, Any] = yaml.safe_load(content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        config = ConfigData(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    logger.debug(
        f"Deployment log settings: interval={config.deploylog.interval_seconds}s "
        f"timeout={config.deploylog.timeout_seconds}s"
    )
    return config

"""
Configuration loader for DevAgent.

Loads and merges configuration from multiple sources:
1. Default values
2. Global config (~/.devagent/config.yaml)
3. Project config (nearest .devagent.yaml)
4. Environment variables (DEVAGENT_*)
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from devagent.config.merger import deep_merge, set_nested_value
from devagent.config.schema import Config
from devagent.exceptions import DevAgentError
from devagent.storage.paths import get_global_config_path, get_project_config_path

ENV_PREFIX = "DEVAGENT_"
# Variables with the prefix that are not configuration keys
RESERVED_ENV = {"DEVAGENT_HOME"}


class ConfigurationError(DevAgentError):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary (empty if the file does not exist).

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    return content


def apply_env_overrides(
    config: dict[str, Any], environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Sections and keys are separated by a double underscore:
    DEVAGENT_AGENT__MAX_ITERATIONS=5 sets agent.max_iterations.

    Args:
        config: Configuration dictionary.
        environ: Environment to read (default: os.environ).

    Returns:
        Configuration with environment overrides applied.
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or key in RESERVED_ENV:
            continue

        config_key = key[len(ENV_PREFIX) :].lower().replace("__", ".")
        if not config_key:
            continue
        config = set_nested_value(config, config_key, _parse_env_value(value))

    return config


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to the appropriate type.

    Returns:
        Parsed value (bool, int, float, list, or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    if re.match(r"^-?\d+$", value):
        return int(value)

    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)

    # List (comma-separated)
    if "," in value:
        return [item.strip() for item in value.split(",")]

    return value


def load_config(
    config_path: Path | None = None,
    project_path: Path | None = None,
    skip_project: bool = False,
    skip_env: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Loading order (later overrides earlier):
    1. Default values from Config model
    2. Global config (or ``config_path`` if given)
    3. Project config (.devagent.yaml found from ``project_path`` upwards)
    4. Environment variables (DEVAGENT_*)

    Returns:
        Merged and validated Config object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = Config().model_dump()

    global_path = config_path or get_global_config_path()
    config_dict = deep_merge(config_dict, load_yaml_file(global_path))

    if not skip_project:
        project_config = get_project_config_path(project_path)
        if project_config is not None:
            config_dict = deep_merge(config_dict, load_yaml_file(project_config))

    if not skip_env:
        config_dict = apply_env_overrides(config_dict)

    try:
        return Config.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

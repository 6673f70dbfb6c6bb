"""
Path utilities for DevAgent.

Provides consistent path resolution for configuration and data files.
"""

import os
from pathlib import Path

PROJECT_CONFIG_NAME = ".devagent.yaml"


def get_devagent_home() -> Path:
    """
    Get the DevAgent home directory.

    Resolution order:
    1. DEVAGENT_HOME environment variable
    2. Default: ~/.devagent

    Returns:
        Path to the DevAgent home directory.
    """
    env_home = os.environ.get("DEVAGENT_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".devagent"


def get_global_config_path() -> Path:
    """Path to ~/.devagent/config.yaml."""
    return get_devagent_home() / "config.yaml"


def get_project_config_path(start: Path | None = None) -> Path | None:
    """
    Find the nearest project config file.

    Walks up from ``start`` (default: cwd) looking for .devagent.yaml.

    Returns:
        Path to the project config, or None if there is none.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def get_whitelist_path() -> Path:
    """Path to the persisted whitelist roots."""
    return get_devagent_home() / "whitelist.json"


def get_metrics_path() -> Path:
    """Path to the persisted tool metrics."""
    return get_devagent_home() / "tool_metrics.json"


def get_audit_log_path() -> Path:
    """Path to the audit log."""
    return get_devagent_home() / "audit.jsonl"

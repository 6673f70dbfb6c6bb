"""Filesystem locations used by DevAgent."""

from devagent.storage.paths import (
    get_audit_log_path,
    get_devagent_home,
    get_global_config_path,
    get_metrics_path,
    get_project_config_path,
    get_whitelist_path,
)

__all__ = [
    "get_audit_log_path",
    "get_devagent_home",
    "get_global_config_path",
    "get_metrics_path",
    "get_project_config_path",
    "get_whitelist_path",
]

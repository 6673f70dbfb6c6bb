"""
Configuration for DevAgent.

YAML files and DEVAGENT_* environment variables are merged and validated
into a Config object whose sections feed the core components.
"""

from devagent.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    load_config,
    load_yaml_file,
)
from devagent.config.merger import deep_merge, set_nested_value
from devagent.config.schema import (
    AgentConfigSchema,
    AuditConfig,
    Config,
    LoggingConfig,
    ProviderConfig,
    SanitizerConfig,
    ToolsConfig,
    WhitelistConfig,
    WhitelistRootConfig,
)

__all__ = [
    "AgentConfigSchema",
    "AuditConfig",
    "Config",
    "ConfigurationError",
    "LoggingConfig",
    "ProviderConfig",
    "SanitizerConfig",
    "ToolsConfig",
    "WhitelistConfig",
    "WhitelistRootConfig",
    "apply_env_overrides",
    "deep_merge",
    "load_config",
    "load_yaml_file",
    "set_nested_value",
]

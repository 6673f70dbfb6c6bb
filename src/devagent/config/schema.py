"""
Pydantic configuration schema for DevAgent.

This module defines all configuration models with validation. The core
components receive values from these models; none of them read
configuration on their own.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from devagent.agent.models import AgentConfig
from devagent.constants import (
    DEFAULT_BLOCKED_PATTERNS,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_TIMEOUT,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_RETRY_MAX_DELAY,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOOL_TIMEOUT,
    MAX_ERROR_MESSAGE_LENGTH,
    MAX_FILE_SIZE,
    MAX_METADATA_VALUE_LENGTH,
)

OPERATION_NAMES = ("read", "write", "list")

# =============================================================================
# Whitelist Configuration
# =============================================================================


class WhitelistRootConfig(BaseModel):
    """One allowed directory."""

    path: str
    operations: list[Literal["read", "write", "list"]] = Field(
        default_factory=lambda: list(OPERATION_NAMES)
    )


class WhitelistConfig(BaseModel):
    """Filesystem whitelist configuration."""

    model_config = ConfigDict(extra="allow")

    roots: list[WhitelistRootConfig] = Field(default_factory=list)
    allow_subdirectories: bool = True
    max_depth: int = Field(default=0, ge=0)
    blocked_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_PATTERNS))
    max_file_size: int = Field(default=MAX_FILE_SIZE, gt=0)
    persist: bool = True  # also load roots added with `devagent whitelist add`

    @field_validator("roots", mode="before")
    @classmethod
    def _accept_plain_paths(cls, value):
        # Allow "roots: [~/code]" as shorthand for full entries
        if isinstance(value, list):
            return [{"path": item} if isinstance(item, str) else item for item in value]
        return value


# =============================================================================
# Tool Configuration
# =============================================================================


class ToolsConfig(BaseModel):
    """Tool execution configuration."""

    model_config = ConfigDict(extra="allow")

    default_timeout: float = Field(default=DEFAULT_TOOL_TIMEOUT, gt=0)
    timeouts: dict[str, float] = Field(default_factory=dict)

    @field_validator("timeouts")
    @classmethod
    def _positive_timeouts(cls, value: dict[str, float]) -> dict[str, float]:
        for name, timeout in value.items():
            if timeout <= 0:
                raise ValueError(f"Timeout for tool '{name}' must be positive")
        return value


# =============================================================================
# Agent Configuration
# =============================================================================


class AgentConfigSchema(BaseModel):
    """Orchestration loop configuration."""

    model_config = ConfigDict(extra="allow")

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1, le=100)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, le=10)
    retry_base_delay: float = Field(default=DEFAULT_RETRY_BASE_DELAY, ge=0)
    retry_max_delay: float = Field(default=DEFAULT_RETRY_MAX_DELAY, ge=0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


# =============================================================================
# Provider Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Model transport configuration. API keys come from the environment only."""

    model_config = ConfigDict(extra="allow")

    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    timeout: float = Field(default=DEFAULT_MODEL_TIMEOUT, gt=0)
    api_base: str | None = None


# =============================================================================
# Sanitizer / Logging / Audit Configuration
# =============================================================================


class SanitizerConfig(BaseModel):
    """Error sanitization limits."""

    max_message_length: int = Field(default=MAX_ERROR_MESSAGE_LENGTH, ge=50)
    metadata_value_length: int = Field(default=MAX_METADATA_VALUE_LENGTH, ge=20)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value):
        return value.upper() if isinstance(value, str) else value


class AuditConfig(BaseModel):
    """Audit log configuration."""

    enable: bool = True
    path: str | None = None  # default: ~/.devagent/audit.jsonl
    buffer_size: int = Field(default=20, ge=1)


# =============================================================================
# Root Configuration
# =============================================================================


class Config(BaseModel):
    """
    Root configuration model for DevAgent.

    Configuration can be loaded from YAML files and environment variables,
    merged in order of priority.
    """

    model_config = ConfigDict(extra="allow")

    whitelist: WhitelistConfig = Field(default_factory=WhitelistConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    agent: AgentConfigSchema = Field(default_factory=AgentConfigSchema)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)

    def to_agent_config(self) -> AgentConfig:
        """Build the orchestration settings from the agent and provider sections."""
        return AgentConfig(
            max_iterations=self.agent.max_iterations,
            max_retries=self.agent.max_retries,
            retry_base_delay=self.agent.retry_base_delay,
            retry_max_delay=self.agent.retry_max_delay,
            model_timeout=self.provider.timeout,
            system_prompt=self.agent.system_prompt,
        )

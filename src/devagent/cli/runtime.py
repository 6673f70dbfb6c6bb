"""
Wiring of the core components for CLI commands.

Builds the validator, registry, engine and loop from a Config object. The
core never reads configuration itself; this module hands it explicit values.
"""

import logging
from dataclasses import dataclass

from devagent.agent import AgentLoop
from devagent.audit import AuditLogger
from devagent.config import Config
from devagent.providers import LiteLLMTransport, ModelTransport
from devagent.security import ErrorSanitizer, WhitelistStore, WhitelistValidator
from devagent.storage.paths import get_audit_log_path, get_metrics_path, get_whitelist_path
from devagent.tools import ToolExecutionEngine, ToolMetricsTracker, ToolRegistry
from devagent.tools.builtin import register_builtin_tools

logger = logging.getLogger(__name__)


def build_sanitizer(config: Config) -> ErrorSanitizer:
    return ErrorSanitizer(
        max_length=config.sanitizer.max_message_length,
        metadata_value_length=config.sanitizer.metadata_value_length,
    )


def build_audit_logger(config: Config, sanitizer: ErrorSanitizer | None = None) -> AuditLogger:
    return AuditLogger.from_config(
        config.audit, get_audit_log_path(), sanitizer=sanitizer or build_sanitizer(config)
    )


def get_whitelist_store() -> WhitelistStore:
    return WhitelistStore(get_whitelist_path())


def build_validator(config: Config) -> WhitelistValidator:
    """Validator with configured roots plus, if enabled, the persisted ones."""
    validator = WhitelistValidator.from_config(config.whitelist)
    if config.whitelist.persist:
        added = get_whitelist_store().load_into(validator)
        logger.debug(f"Loaded {added} persisted whitelist roots")
    return validator


def build_registry(validator: WhitelistValidator) -> ToolRegistry:
    registry = ToolRegistry()
    register_builtin_tools(registry, validator)
    return registry


@dataclass
class Runtime:
    """Everything a turn needs, built from one Config."""

    config: Config
    validator: WhitelistValidator
    registry: ToolRegistry
    engine: ToolExecutionEngine
    loop: AgentLoop
    metrics: ToolMetricsTracker
    audit: AuditLogger

    def close(self) -> None:
        self.audit.flush()


def build_runtime(
    config: Config,
    transport: ModelTransport | None = None,
    event_callback=None,
) -> Runtime:
    """Assemble the orchestration stack for one CLI invocation."""
    sanitizer = build_sanitizer(config)
    validator = build_validator(config)
    registry = build_registry(validator)

    metrics = ToolMetricsTracker(get_metrics_path())
    audit = build_audit_logger(config, sanitizer)

    engine = ToolExecutionEngine.from_config(
        registry, config.tools, sanitizer=sanitizer, telemetry=[metrics, audit]
    )
    loop = AgentLoop(
        transport or LiteLLMTransport.from_config(config.provider),
        engine,
        config=config.to_agent_config(),
        sanitizer=sanitizer,
        event_callback=event_callback,
        telemetry=[audit],
    )
    return Runtime(
        config=config,
        validator=validator,
        registry=registry,
        engine=engine,
        loop=loop,
        metrics=metrics,
        audit=audit,
    )

"""Audit trail for DevAgent."""

from devagent.audit.logger import AuditEventType, AuditLogger

__all__ = [
    "AuditEventType",
    "AuditLogger",
]

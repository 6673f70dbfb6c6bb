"""
Security boundary for DevAgent.

This package provides the filesystem whitelist that every tool must pass
through and the sanitizer applied to all outgoing error text.
"""

from devagent.security.sanitizer import (
    ErrorSanitizer,
    SanitizingFilter,
    redact_api_key,
    sanitize,
)
from devagent.security.store import WhitelistStore, WhitelistStoreError
from devagent.security.whitelist import (
    AccessDeniedError,
    FileOperation,
    WhitelistPolicy,
    WhitelistRoot,
    WhitelistValidator,
)

__all__ = [
    "AccessDeniedError",
    "ErrorSanitizer",
    "FileOperation",
    "SanitizingFilter",
    "WhitelistPolicy",
    "WhitelistRoot",
    "WhitelistStore",
    "WhitelistStoreError",
    "WhitelistValidator",
    "redact_api_key",
    "sanitize",
]

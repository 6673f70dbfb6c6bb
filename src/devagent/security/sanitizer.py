"""
Error and log sanitization.

Every error message that leaves the core (log record, tool error payload,
user-facing failure) is passed through ErrorSanitizer first. Sanitization
redacts credential-looking tokens and user home paths, then bounds the
length of the text.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from devagent.constants import (
    API_KEY_MARKER,
    GENERIC_ERROR_MESSAGE,
    MAX_ERROR_MESSAGE_LENGTH,
    MAX_METADATA_VALUE_LENGTH,
    METADATA_REDACTED_MARKER,
    TRUNCATION_MARKER,
    USER_DIR_MARKER,
)

# A token runs until whitespace, a quote, a comma or a bracket.
_TOKEN_CHARS = r"[^\s\"',{}\[\]]"
_NOT_WORD_BEFORE = r"(?<![A-Za-z0-9_\-])"

CREDENTIAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(_NOT_WORD_BEFORE + r"(?:sk-ant-|sk-|xoxb-|xoxp-|ghp_|gho_|github_pat_)" + _TOKEN_CHARS + "+"),
    re.compile(_NOT_WORD_BEFORE + r"AKIA[0-9A-Z]{16}"),
    re.compile(_NOT_WORD_BEFORE + r"AIza[0-9A-Za-z_\-]{35}"),
)

BEARER_PATTERN = re.compile(r"(Bearer\s+)" + _TOKEN_CHARS + "+", re.IGNORECASE)

# Home directories: the user name and everything below it is dropped.
_NOT_PATH_BEFORE = r"(?:(?<=file://)|(?<![\w./\-~]))"
USER_DIR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<![\w\\])[A-Za-z]:[\\/]Users[\\/][^\\/\s\"',]+(?:[\\/][^\s\"',]*)?"),
    re.compile(_NOT_PATH_BEFORE + r"/(?:home|Users)/[^/\s\"',]+(?:/[^\s\"',]*)?"),
    re.compile(_NOT_PATH_BEFORE + r"/root(?=[/\s\"',:;)]|$)(?:/[^\s\"',]*)?"),
)

SENSITIVE_KEY_PARTS = ("key", "secret", "token", "password")
PATH_KEY_PARTS = ("path", "file")

# Bound on redact/truncate passes before falling back to the generic message.
_MAX_PASSES = 4


def truncate(text: str, limit: int) -> str:
    """Bound text to ``limit`` characters with a visible truncation marker.

    The result of truncating is exactly ``limit`` characters long, so a
    second call returns it unchanged.
    """
    if len(text) <= limit:
        return text
    keep = max(limit - len(TRUNCATION_MARKER), 0)
    return text[:keep] + TRUNCATION_MARKER


def redact_api_key(api_key: str | None) -> str:
    """Render an API key in a form that is safe to log.

    Args:
        api_key: The raw key, possibly empty.

    Returns:
        "[EMPTY]", "[REDACTED]" for short keys, or the first six characters
        followed by a fixed mask.
    """
    if not api_key:
        return "[EMPTY]"
    if len(api_key) <= 10:
        return "[REDACTED]"
    return f"[REDACTED-{api_key[:6]}-****]"


class ErrorSanitizer:
    """Redacts secrets and user paths from text before it crosses a boundary.

    ``sanitize`` is pure and idempotent. It never raises; input it cannot
    handle is replaced by a generic message rather than echoed back.
    """

    def __init__(
        self,
        max_length: int = MAX_ERROR_MESSAGE_LENGTH,
        metadata_value_length: int = MAX_METADATA_VALUE_LENGTH,
    ) -> None:
        if max_length <= len(TRUNCATION_MARKER):
            raise ValueError(
                f"max_length must be greater than {len(TRUNCATION_MARKER)}"
            )
        if metadata_value_length <= len(TRUNCATION_MARKER):
            raise ValueError(
                f"metadata_value_length must be greater than {len(TRUNCATION_MARKER)}"
            )
        self.max_length = max_length
        self.metadata_value_length = metadata_value_length

    def sanitize(self, text: Any) -> str:
        """Sanitize a message for logging or display.

        Args:
            text: The message to sanitize.

        Returns:
            The sanitized message, or a generic message for non-text input.
        """
        if not isinstance(text, str):
            return GENERIC_ERROR_MESSAGE
        try:
            return self._converge(text, self.max_length)
        except Exception:
            return GENERIC_ERROR_MESSAGE

    def sanitize_exception(self, error: BaseException) -> str:
        """Sanitize ``str(error)``, falling back to the exception type name."""
        try:
            message = str(error)
        except Exception:
            return GENERIC_ERROR_MESSAGE
        if not message:
            message = type(error).__name__
        return self.sanitize(message)

    def sanitize_metadata(self, metadata: Mapping[str, Any] | None) -> dict[str, Any]:
        """Sanitize a key/value map.

        Values under credential-like keys are replaced outright, values under
        path-like keys are sanitized, and any other string is sanitized and
        shortened. Numbers, booleans and None pass through.
        """
        if not metadata:
            return {}

        sanitized: dict[str, Any] = {}
        try:
            items = list(metadata.items())
        except Exception:
            return {}

        for raw_key, value in items:
            key = self.sanitize(str(raw_key))
            lowered = key.lower()
            if any(part in lowered for part in SENSITIVE_KEY_PARTS):
                sanitized[key] = METADATA_REDACTED_MARKER
            elif value is None or isinstance(value, (bool, int, float)):
                sanitized[key] = value
            elif any(part in lowered for part in PATH_KEY_PARTS):
                sanitized[key] = self.sanitize(str(value))
            else:
                try:
                    sanitized[key] = self._converge(
                        str(value), self.metadata_value_length
                    )
                except Exception:
                    sanitized[key] = GENERIC_ERROR_MESSAGE
        return sanitized

    def _converge(self, text: str, limit: int) -> str:
        # Truncation can cut a token so that a new pattern appears, so the
        # redact/truncate step is repeated until the text stops changing.
        current = text
        for _ in range(_MAX_PASSES):
            updated = truncate(self._redact(current), limit)
            if updated == current:
                return current
            current = updated
        return GENERIC_ERROR_MESSAGE

    @staticmethod
    def _redact(text: str) -> str:
        redacted = BEARER_PATTERN.sub(lambda m: m.group(1) + API_KEY_MARKER, text)
        for pattern in CREDENTIAL_PATTERNS:
            redacted = pattern.sub(API_KEY_MARKER, redacted)
        for pattern in USER_DIR_PATTERNS:
            redacted = pattern.sub(USER_DIR_MARKER, redacted)
        return redacted


class SanitizingFilter(logging.Filter):
    """Logging filter that sanitizes every record before a handler sees it."""

    def __init__(self, sanitizer: ErrorSanitizer | None = None) -> None:
        super().__init__()
        self.sanitizer = sanitizer or ErrorSanitizer()

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.sanitizer.sanitize(record.getMessage())
        record.args = None
        return True


_default_sanitizer = ErrorSanitizer()


def sanitize(text: Any) -> str:
    """Sanitize text with the default limits."""
    return _default_sanitizer.sanitize(text)

"""Shared limits and defaults.

Every bound used by the core lives here so configuration can override it
without touching the modules that enforce it.
"""

# Sanitizer
MAX_ERROR_MESSAGE_LENGTH = 500
MAX_METADATA_VALUE_LENGTH = 100
TRUNCATION_MARKER = "...[TRUNCATED]"
API_KEY_MARKER = "[API_KEY_REDACTED]"
USER_DIR_MARKER = "[USER_DIR_REDACTED]"
METADATA_REDACTED_MARKER = "[REDACTED]"
GENERIC_ERROR_MESSAGE = "An internal error occurred"

# Paths and files
MAX_PATH_LENGTH = 4096
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_WRITE_CONTENT_SIZE = 50 * 1024 * 1024  # 50 MiB
MAX_DIRECTORY_ENTRIES = 1000

DEFAULT_BLOCKED_PATTERNS = (
    "*.env",
    ".env*",
    "id_rsa*",
    "id_dsa*",
    "id_ecdsa*",
    "id_ed25519*",
    "*.key",
    "*.pem",
    "*.p12",
    "*.pfx",
    ".aws/*",
    ".ssh/*",
    ".gnupg/*",
)

PROTECTED_FILE_NAMES = (
    ".env",
    ".gitignore",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "package.json",
    "Cargo.toml",
)

# Tool execution
DEFAULT_TOOL_TIMEOUT = 30.0

# Orchestrator
DEFAULT_MAX_ITERATIONS = 10
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.5
DEFAULT_RETRY_MAX_DELAY = 30.0
DEFAULT_MODEL_TIMEOUT = 120.0

# Model transport
DEFAULT_MODEL = "anthropic/claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.7

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant specialized in software development. "
    "You have access to tools that read, write and list files inside the "
    "directories the user has approved. Use them when they help answer the "
    "request, and explain any tool error to the user in plain language."
)

"""Root exceptions for DevAgent.

Module-specific errors (tools, transport, orchestration, configuration)
all derive from DevAgentError so callers can catch the whole family.
"""


class DevAgentError(Exception):
    """Base exception for all DevAgent errors."""

    pass


class ToolError(DevAgentError):
    """A tool could not complete a request.

    Tool errors are recoverable: the execution engine turns them into error
    tool results that the model explains to the user.
    """

    pass

"""Base classes for tool implementation."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from devagent.exceptions import ToolError
from devagent.security.whitelist import FileOperation, WhitelistValidator
from devagent.tools.models import ToolParameter


class ToolNotFoundError(ToolError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolTimeoutError(ToolError):
    """A tool did not finish within its timeout."""

    def __init__(self, name: str, timeout: float):
        super().__init__(f"Tool '{name}' timed out after {timeout:g}s")
        self.name = name
        self.timeout = timeout


class ToolInputError(ToolError):
    """Arguments did not match the tool's parameters."""

    pass


class WhitelistNotBoundError(ToolError):
    """A filesystem tool ran before a whitelist validator was bound."""

    pass


class Tool(ABC):
    """Base class for all tools.

    Tools are capabilities the model can invoke. Each tool defines:
    - Name and description (for the model to decide when to use it)
    - Input parameters (JSON schema)
    - Execution logic, returning text or raising ToolError

    Security policy is never built into a tool. The whitelist validator is
    injected with :meth:`bind_whitelist` after construction.
    """

    def __init__(self):
        """Initialize the tool."""
        self._whitelist: Optional[WhitelistValidator] = None
        self._validate_definition()

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name (must be unique)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of what the tool does (for the model)."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> list[ToolParameter]:
        """List of tool parameters."""
        pass

    @property
    def is_dangerous(self) -> bool:
        """Whether the tool modifies state on the host."""
        return False

    def bind_whitelist(self, validator: WhitelistValidator) -> None:
        """Supply the validator this tool must consult before touching files."""
        self._whitelist = validator

    @property
    def whitelist(self) -> WhitelistValidator:
        """The bound validator.

        Raises:
            WhitelistNotBoundError: If no validator was bound.
        """
        if self._whitelist is None:
            raise WhitelistNotBoundError(
                f"Tool '{self.name}' has no whitelist bound; refusing to run"
            )
        return self._whitelist

    def get_input_schema(self) -> dict[str, Any]:
        """Get JSON schema for tool input.

        Returns:
            JSON schema describing tool parameters
        """
        properties = {}
        required = []

        for param in self.parameters:
            param_schema: dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            if param.enum:
                param_schema["enum"] = param.enum
            if param.default is not None:
                param_schema["default"] = param.default

            properties[param.name] = param_schema
            if param.required:
                required.append(param.name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }

    def get_tool_definition(self) -> dict[str, Any]:
        """Get the tool definition sent to the model.

        Returns:
            Tool definition in Anthropic format
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.get_input_schema(),
        }

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> str:
        """Run the tool.

        Args:
            arguments: Tool input as sent by the model

        Returns:
            Text payload for the model

        Raises:
            ToolError: If the request cannot be completed
        """
        pass

    def validate_input(self, arguments: dict[str, Any]) -> None:
        """Check arguments against the declared parameters.

        Raises:
            ToolInputError: If parameters are missing, unknown or mistyped
        """
        if not isinstance(arguments, dict):
            raise ToolInputError(f"Arguments for '{self.name}' must be an object")

        param_names = {p.name for p in self.parameters}
        required_params = {p.name for p in self.parameters if p.required}
        provided = set(arguments)

        unknown = provided - param_names
        if unknown:
            raise ToolInputError(f"Unknown parameters: {', '.join(sorted(unknown))}")

        missing = required_params - provided
        if missing:
            raise ToolInputError(f"Missing required parameters: {', '.join(sorted(missing))}")

        for param in self.parameters:
            if param.type == "string" and param.name in arguments:
                if not isinstance(arguments[param.name], str):
                    raise ToolInputError(f"Parameter '{param.name}' must be a string")

    def _validate_definition(self) -> None:
        if not self.name:
            raise ValueError("Tool name cannot be empty")
        if not self.description:
            raise ValueError("Tool description cannot be empty")

        param_names = [p.name for p in self.parameters]
        if len(param_names) != len(set(param_names)):
            raise ValueError("Parameter names must be unique")

    def __str__(self) -> str:
        return f"Tool({self.name})"

    def __repr__(self) -> str:
        return f"<Tool name={self.name} dangerous={self.is_dangerous}>"


class FileSystemTool(Tool):
    """A tool that touches the host filesystem.

    Subclasses obtain paths only through :meth:`authorize`, which runs the
    bound whitelist validator and returns the canonical path to operate on.
    """

    def authorize(self, path: str, operation: FileOperation):
        """Validate ``path`` for ``operation`` with the bound whitelist.

        Returns:
            Canonical path

        Raises:
            AccessDeniedError: If the whitelist rejects the request
            WhitelistNotBoundError: If no validator was bound
        """
        return self.whitelist.validate(path, operation)

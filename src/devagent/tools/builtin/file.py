"""File operation tools.

Every tool here resolves its path through the bound whitelist before any
filesystem call. Blocking I/O runs in a worker thread so that concurrent
tool requests do not stall the event loop.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from devagent.constants import (
    MAX_DIRECTORY_ENTRIES,
    MAX_WRITE_CONTENT_SIZE,
    PROTECTED_FILE_NAMES,
)
from devagent.exceptions import ToolError
from devagent.security.whitelist import FileOperation
from devagent.tools.base import FileSystemTool, ToolInputError
from devagent.tools.models import ToolParameter

logger = logging.getLogger(__name__)


class ReadFileTool(FileSystemTool):
    """Read a UTF-8 text file inside a whitelisted directory."""

    @property
    def name(self) -> str:
        return "read_file"

    @property
    def description(self) -> str:
        return (
            "Read the contents of a text file. "
            "Returns the full file content as a string. "
            "Use this to examine source code, configuration files, or logs. "
            "Only files inside directories approved by the user can be read."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="path",
                type="string",
                description=(
                    "Path to the file to read. "
                    "Can be absolute or relative to the current directory. "
                    "Example: 'src/main.py'"
                ),
                required=True,
            ),
        ]

    async def execute(self, arguments: dict[str, Any]) -> str:
        """Read file contents.

        Args:
            arguments: ``{"path": str}``

        Returns:
            File header followed by the file content
        """
        self.validate_input(arguments)
        path = arguments["path"]
        logger.info(f"Reading file: {path}")
        return await asyncio.to_thread(self._read, path)

    def _read(self, path: str) -> str:
        file_path = self.authorize(path, FileOperation.READ)
        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ToolError(f"File is not valid UTF-8 text: {path}") from None
        except PermissionError:
            raise ToolError(f"Permission denied: {path}") from None
        except OSError as e:
            raise ToolError(f"Failed to read file {path}: {e.strerror or e}") from None

        return f"File: {path}\nSize: {len(content.encode('utf-8'))} bytes\n\n{content}"


class WriteFileTool(FileSystemTool):
    """Create or overwrite a text file inside a whitelisted directory.

    The write runs in a worker thread, which the engine's timeout cannot
    interrupt: a write reported as timed out may still land on disk.
    """

    @property
    def name(self) -> str:
        return "write_file"

    @property
    def description(self) -> str:
        return (
            "Write content to a file, creating it (and missing parent directories) "
            "if needed or overwriting it if it exists. "
            "Use this to create new files or save generated code. "
            "Project manifests and secret files such as .env cannot be written. "
            "If a write is reported as timed out, check the file before retrying: "
            "it may still have been written."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="path",
                type="string",
                description="Path where the file should be written. Example: 'notes/todo.md'",
                required=True,
            ),
            ToolParameter(
                name="content",
                type="string",
                description="Text content to write to the file.",
                required=True,
            ),
        ]

    @property
    def is_dangerous(self) -> bool:
        """Write operations modify the filesystem."""
        return True

    async def execute(self, arguments: dict[str, Any]) -> str:
        """Write file contents.

        Args:
            arguments: ``{"path": str, "content": str}``

        Returns:
            Confirmation with the number of bytes written
        """
        self.validate_input(arguments)
        path = arguments["path"]
        content = arguments["content"]

        size = len(content.encode("utf-8"))
        if size > MAX_WRITE_CONTENT_SIZE:
            raise ToolInputError(
                f"Content is {size} bytes, limit is {MAX_WRITE_CONTENT_SIZE}"
            )

        logger.info(f"Writing file: {path}")
        return await asyncio.to_thread(self._write, path, content)

    def _write(self, path: str, content: str) -> str:
        file_path = self.authorize(path, FileOperation.WRITE)
        if file_path.name in PROTECTED_FILE_NAMES:
            raise ToolError(f"Refusing to write protected file: {file_path.name}")

        existed = file_path.exists()
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except PermissionError:
            raise ToolError(f"Permission denied: {path}") from None
        except OSError as e:
            raise ToolError(f"Failed to write file {path}: {e.strerror or e}") from None

        action = "Updated" if existed else "Created"
        return f"{action} file: {path}\nSize: {len(content.encode('utf-8'))} bytes"


class ListDirectoryTool(FileSystemTool):
    """List the entries of a whitelisted directory."""

    @property
    def name(self) -> str:
        return "list_directory"

    @property
    def description(self) -> str:
        return (
            "List files and subdirectories in a directory. "
            "Directories are shown with a trailing '/'. "
            "Use this to explore project layout and find files."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="path",
                type="string",
                description="Directory path to list. Example: '.' or 'src'",
                required=True,
            ),
        ]

    async def execute(self, arguments: dict[str, Any]) -> str:
        """List directory contents.

        Args:
            arguments: ``{"path": str}``

        Returns:
            One entry per line, sorted by name
        """
        self.validate_input(arguments)
        path = arguments["path"]
        logger.info(f"Listing directory: {path}")
        return await asyncio.to_thread(self._list, path)

    def _list(self, path: str) -> str:
        dir_path = self.authorize(path, FileOperation.LIST)
        try:
            entries = sorted(dir_path.iterdir(), key=lambda p: p.name)
        except PermissionError:
            raise ToolError(f"Permission denied: {path}") from None
        except OSError as e:
            raise ToolError(f"Failed to list directory {path}: {e.strerror or e}") from None

        lines = [f"Directory: {path}", f"Total entries: {len(entries)}", ""]
        if not entries:
            lines.append("(empty directory)")

        for entry in entries[:MAX_DIRECTORY_ENTRIES]:
            lines.append(_format_entry(entry))

        hidden = len(entries) - MAX_DIRECTORY_ENTRIES
        if hidden > 0:
            lines.append(f"... ({hidden} more entries truncated)")

        return "\n".join(lines)


def _format_entry(entry: Path) -> str:
    try:
        if entry.is_dir():
            return f"{entry.name}/"
    except OSError:
        pass
    return entry.name

"""Built-in tools for the DevAgent agent.

Standard tools that let the model:
- Read files
- Write files
- List directory contents

All of them operate only inside whitelisted directories.
"""

from devagent.tools.builtin.file import ListDirectoryTool, ReadFileTool, WriteFileTool
from devagent.tools.builtin.registry_utils import register_builtin_tools

__all__ = [
    "ListDirectoryTool",
    "ReadFileTool",
    "WriteFileTool",
    "register_builtin_tools",
]

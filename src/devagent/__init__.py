"""
DevAgent - tool-use orchestration for AI coding assistants

Lets a model read, write and list files under an explicit whitelist and
always routes tool output back through the model before anything reaches
the user.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("devagent")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "__version__",
]

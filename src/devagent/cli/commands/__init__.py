"""CLI command groups."""

from devagent.cli.commands import run, tools, whitelist

__all__ = ["run", "tools", "whitelist"]

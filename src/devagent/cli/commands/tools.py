"""
devagent tools - Inspect the assistant's tools.

Usage:
    devagent tools list
    devagent tools metrics
"""

import typer
from rich.table import Table

from devagent.cli.output import console, print_info, print_table
from devagent.security import WhitelistValidator
from devagent.storage.paths import get_metrics_path
from devagent.tools.builtin.registry_utils import register_builtin_tools
from devagent.tools.metrics import ToolMetricsTracker
from devagent.tools.registry import ToolRegistry

app = typer.Typer(
    name="tools",
    help="Inspect the tools available to the assistant.",
)


@app.command("list")
def list_tools() -> None:
    """List all available tools."""
    registry = ToolRegistry()
    register_builtin_tools(registry, WhitelistValidator())

    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Description")

    for tool in registry.list_tools():
        tool_type = "Writes" if tool.is_dangerous else "Read-only"
        desc = tool.description[:80] + "..." if len(tool.description) > 80 else tool.description
        table.add_row(tool.name, tool_type, desc)

    console.print(table)
    console.print(f"\n[dim]Total: {len(registry)} tool(s)[/dim]")


@app.command("metrics")
def metrics() -> None:
    """Show tool usage statistics."""
    tracker = ToolMetricsTracker(get_metrics_path())
    stats = tracker.get_all_stats()

    if not stats:
        print_info("No tool executions recorded yet.")
        return

    print_table(
        ["Tool", "Runs", "Success", "Avg time"],
        [
            [
                stat.tool_name,
                stat.total_executions,
                f"{stat.success_rate:.0%}",
                f"{stat.average_execution_time * 1000:.1f} ms",
            ]
            for stat in stats
        ],
        title="Tool Usage",
    )
    console.print(
        f"\n[dim]Total: {tracker.get_total_executions()} executions, "
        f"{tracker.get_success_rate():.0%} successful[/dim]"
    )

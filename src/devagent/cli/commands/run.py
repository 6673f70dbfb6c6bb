"""
devagent run - Ask the assistant something, letting it use file tools.

Usage:
    devagent run "Summarize src/app.py"
    devagent run "Query" --model openai/gpt-4o
    devagent run "Query" --json
"""

import asyncio
import json
from typing import Annotated

import typer
from rich.markdown import Markdown
from rich.markup import escape

from devagent.agent import AgentEvent, EventType, OrchestrationError
from devagent.cli.output import console, print_error, print_warning
from devagent.cli.runtime import build_runtime, build_sanitizer
from devagent.config import ConfigurationError, load_config
from devagent.logging_config import configure_logging
from devagent.security import WhitelistStoreError


def _print_event(event: AgentEvent) -> None:
    if event.event_type == EventType.TOOL_START:
        console.print(f"[dim]→ {event.tool_name}[/dim]")
    elif event.event_type == EventType.TOOL_ERROR:
        console.print(f"[dim red]✗ {event.tool_name}: {escape(event.message or '')}[/dim red]")
    elif event.event_type == EventType.RETRY:
        console.print(f"[dim yellow]{escape(event.message or '')}[/dim yellow]")


def run(
    query: Annotated[
        str,
        typer.Argument(help="What to ask the assistant."),
    ],
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model to use (LiteLLM identifier)."),
    ] = None,
    max_iterations: Annotated[
        int | None,
        typer.Option("--max-iterations", help="Maximum model calls for this request."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Run one request through the assistant."""
    try:
        config = load_config()
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if model:
        config.provider.model = model
    if max_iterations is not None:
        config.agent.max_iterations = max_iterations

    configure_logging(
        level="DEBUG" if verbose else config.logging.level,
        json_output=config.logging.json_output,
        sanitizer=build_sanitizer(config),
    )

    try:
        runtime = build_runtime(config, event_callback=None if json_output else _print_event)
    except WhitelistStoreError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not json_output and len(runtime.validator) == 0:
        print_warning(
            "No directories are whitelisted; file tools will refuse every path. "
            "Use 'devagent whitelist add <dir>'."
        )

    try:
        result = asyncio.run(runtime.loop.run(query))
    except OrchestrationError as e:
        detail = e.context.detail if e.context else ""
        runtime.audit.log_turn_failed(type(e).__name__, detail)
        runtime.close()
        if json_output:
            console.print_json(json.dumps({"success": False, "error": e.user_message}))
        else:
            print_error(e.user_message)
        raise typer.Exit(1)

    runtime.audit.log_turn_complete(
        result.iterations, len(result.tool_results), config.provider.model
    )
    runtime.close()

    if json_output:
        console.print_json(
            json.dumps(
                {
                    "success": True,
                    "response": result.final_text,
                    "iterations": result.iterations,
                    "attempts": result.attempts,
                    "tool_calls": [
                        {"tool": r.tool_name, "success": r.success, "elapsed": round(r.elapsed, 4)}
                        for r in result.tool_results
                    ],
                }
            )
        )
    else:
        console.print(Markdown(result.final_text))

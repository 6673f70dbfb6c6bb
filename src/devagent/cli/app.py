"""
Main Typer application for the devagent CLI.

This module defines the root CLI application and registers all commands.
"""

from typing import Annotated

import typer

from devagent import __version__
from devagent.cli.commands import run, tools, whitelist
from devagent.cli.output import print_info

app = typer.Typer(
    name="devagent",
    help="AI coding assistant that works on whitelisted directories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"devagent version [green]{__version__}[/green]")
        raise typer.Exit()


# noinspection PyUnusedLocal
@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold blue]devagent[/bold blue] - AI coding assistant

    The assistant reads, writes and lists files only inside directories you
    whitelist, and always explains tool results in its own words.
    """


app.command(name="run")(run.run)
app.add_typer(whitelist.app, name="whitelist")
app.add_typer(tools.app, name="tools")


if __name__ == "__main__":
    app()

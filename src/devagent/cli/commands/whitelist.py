"""
devagent whitelist - Manage the directories tools may access.

Usage:
    devagent whitelist add ~/code/project
    devagent whitelist add ~/docs --ops read,list
    devagent whitelist remove ~/code/project
    devagent whitelist list
    devagent whitelist clear
"""

from typing import Annotated

import typer

from devagent.audit import AuditLogger
from devagent.cli.output import console, print_error, print_info, print_success
from devagent.cli.runtime import build_audit_logger, get_whitelist_store
from devagent.config import ConfigurationError, load_config
from devagent.security import FileOperation, WhitelistStoreError, WhitelistValidator

app = typer.Typer(
    name="whitelist",
    help="Manage the directories the assistant's tools may access.",
)


def _load() -> WhitelistValidator:
    validator = WhitelistValidator()
    try:
        get_whitelist_store().load_into(validator)
    except WhitelistStoreError as e:
        print_error(str(e))
        raise typer.Exit(1)
    return validator


def _save(validator: WhitelistValidator) -> None:
    try:
        get_whitelist_store().save(validator.policy)
    except WhitelistStoreError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _audit_logger() -> AuditLogger:
    try:
        config = load_config()
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)
    return build_audit_logger(config)


def _audit(audit: AuditLogger, action: str, path: str) -> None:
    audit.log_whitelist_change(action, path)
    audit.flush()


def _parse_operations(ops: str) -> list[FileOperation]:
    try:
        return [FileOperation(op.strip().lower()) for op in ops.split(",") if op.strip()]
    except ValueError:
        raise typer.BadParameter(
            f"Operations must be a comma-separated subset of: "
            f"{', '.join(op.value for op in FileOperation)}"
        )


@app.command("add")
def add(
    path: Annotated[str, typer.Argument(help="Directory to allow.")],
    ops: Annotated[
        str,
        typer.Option("--ops", help="Permitted operations, e.g. 'read,list'."),
    ] = "read,write,list",
) -> None:
    """Allow tools to access a directory."""
    operations = _parse_operations(ops)
    audit = _audit_logger()
    validator = _load()
    try:
        canonical = validator.add_root(path, operations)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    _save(validator)
    _audit(audit, "add", str(canonical))
    print_success(f"Whitelisted {canonical} ({', '.join(op.value for op in operations)})")


@app.command("remove")
def remove(
    path: Annotated[str, typer.Argument(help="Directory to stop allowing.")],
) -> None:
    """Remove a directory from the whitelist."""
    audit = _audit_logger()
    validator = _load()
    if not validator.remove_root(path):
        print_error(f"Not whitelisted: {path}")
        raise typer.Exit(1)

    _save(validator)
    _audit(audit, "remove", path)
    print_success(f"Removed {path}")


@app.command("list")
def list_roots() -> None:
    """Show the whitelisted directories."""
    roots = _load().list_roots()
    if not roots:
        print_info("No directories are whitelisted.")
        return

    for root in roots:
        ops = ", ".join(sorted(op.value for op in root.operations))
        console.print(f"{root.path}  [dim]({ops})[/dim]")


@app.command("clear")
def clear(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Remove every directory from the whitelist."""
    if not yes and not typer.confirm("Remove all whitelisted directories?"):
        raise typer.Exit(0)

    audit = _audit_logger()
    validator = _load()
    validator.clear()
    _save(validator)
    _audit(audit, "clear", "")
    print_success("Whitelist cleared")

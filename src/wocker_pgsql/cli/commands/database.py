"""Database client and backup commands.

Commands:
    psql           - Interactive psql session
    dump           - Dump a database to stdout
    backup         - Dump a database to a stored backup file
    restore        - Replay a stored backup
    backups        - List stored backups
    delete-backup  - Delete a stored backup
"""

import typer

from wocker_pgsql.cli.context import get_cli_context

from .shared import with_error_handling
from .workflows import (
    backups_table,
    run_backup,
    run_delete_backup,
    run_dump,
    run_psql,
    run_restore,
)

NAME_ARGUMENT_HELP = "Service name (default service)"


@with_error_handling
def psql(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
) -> None:
    """💻 Open psql against a service."""
    exit_code = run_psql(get_cli_context(ctx), name)
    if exit_code:
        raise typer.Exit(exit_code)


@with_error_handling
def dump(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
    database: str | None = typer.Argument(None, help="Database name"),
) -> None:
    """📤 Dump a database as SQL to standard output."""
    exit_code = run_dump(get_cli_context(ctx), name, database)
    if exit_code:
        raise typer.Exit(exit_code)


@with_error_handling
def backup(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
    database: str | None = typer.Argument(None, help="Database name"),
    filename: str | None = typer.Argument(None, help="Backup file name"),
) -> None:
    """💾 Dump a database into a stored backup file.

    Examples:
        wocker-pgsql backup main app
        wocker-pgsql backup main app before-migration.sql
    """
    cli = get_cli_context(ctx)
    path = run_backup(cli, name, database, filename)
    cli.console.info(f"Saved to {path}")


@with_error_handling
def restore(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
    database: str | None = typer.Argument(None, help="Database name"),
    filename: str | None = typer.Argument(None, help="Backup file name"),
) -> None:
    """📥 Replay a stored backup into a database."""
    run_restore(get_cli_context(ctx), name, database, filename)


@with_error_handling
def backups(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
) -> None:
    """📋 List stored backups of a service."""
    cli = get_cli_context(ctx)
    cli.console.print(backups_table(cli, name))


@with_error_handling
def delete_backup(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help=NAME_ARGUMENT_HELP),
    database: str | None = typer.Argument(None, help="Database name"),
    filename: str | None = typer.Argument(None, help="Backup file name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """🗑️  Delete a stored backup."""
    run_delete_backup(get_cli_context(ctx), name, database, filename, yes=yes)

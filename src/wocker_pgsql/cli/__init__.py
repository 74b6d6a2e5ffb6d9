"""Main CLI application module.

This module provides the ``wocker-pgsql`` entry point. Commands are flat
and grouped by concern:

- services: create, destroy, start, stop, restart, upgrade, default, ls
- admin console: init, admin
- databases: psql, dump, backup, restore, backups, delete-backup
"""

import typer

from wocker_pgsql.config import configure_logging, load_settings

from .commands import admin, database, service
from .context import CLIContext, build_cli_context
from .shared.console import console

# Create the main CLI application
app = typer.Typer(
    help="🐘 PostgreSQL services for the workspace",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logs on stderr"
    ),
) -> None:
    """Load settings and build the command context."""
    if isinstance(ctx.obj, CLIContext):
        configure_logging(ctx.obj.settings.log_level, verbose=verbose)
        return

    try:
        settings = load_settings()
    except ValueError as e:
        console.handle_error("Invalid configuration", str(e))
        return
    configure_logging(settings.log_level, verbose=verbose)
    ctx.obj = build_cli_context(settings)


# Register service commands
app.command()(service.create)
app.command()(service.destroy)
app.command()(service.start)
app.command()(service.stop)
app.command()(service.restart)
app.command()(service.upgrade)
app.command()(service.default)
app.command("ls")(service.ls)

# Register admin console commands
app.command()(admin.init)
app.command()(admin.admin)

# Register database commands
app.command()(database.psql)
app.command()(database.dump)
app.command()(database.backup)
app.command()(database.restore)
app.command()(database.backups)
app.command("delete-backup")(database.delete_backup)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""Service management commands.

Commands:
    create   - Declare a new service
    destroy  - Remove a service and its data
    start    - Start a service (creating one when none exists)
    stop     - Stop a service
    restart  - Recreate a service's container
    upgrade  - Change a service's image or exposed port
    default  - Set the default service
    ls       - List services
"""

import typer

from wocker_pgsql.cli.context import CLIContext, get_cli_context

from .shared import with_error_handling
from .workflows import (
    run_admin_refresh,
    run_create,
    run_destroy,
    run_set_default,
    run_start,
    run_stop,
    run_upgrade,
    services_table,
)


def _refresh_admin(cli: CLIContext) -> None:
    """Rebuild the admin console so it lists the running services."""
    run_admin_refresh(cli)


@with_error_handling
def create(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Service name"),
    user: str | None = typer.Option(None, "--user", "-u", help="Database user"),
    password: str | None = typer.Option(
        None, "--password", "-p", help="Database password"
    ),
    host: str | None = typer.Option(
        None, "--host", "-h", help="External host (no container is managed)"
    ),
    port: str | None = typer.Option(None, "--port", help="External port"),
    image_name: str | None = typer.Option(None, "--image", "-i", help="Image name"),
    image_version: str | None = typer.Option(
        None, "--image-version", "-I", help="Image version"
    ),
    storage: str | None = typer.Option(
        None, "--storage", help="Storage mode: volume or filesystem"
    ),
    volume: str | None = typer.Option(
        None, "--volume", help="Custom volume for volume storage"
    ),
    container_port: int | None = typer.Option(
        None, "--container-port", help="Host port to publish the database on"
    ),
) -> None:
    """➕ Declare a new PostgreSQL service.

    Missing values are asked for interactively.

    Examples:
        wocker-pgsql create main --user app --storage volume
        wocker-pgsql create remote --host db.example.com --port 5433
    """
    run_create(
        get_cli_context(ctx),
        name=name,
        user=user,
        password=password,
        host=host,
        port=port,
        image_name=image_name,
        image_version=image_version,
        storage=storage,
        volume=volume,
        container_port=container_port,
    )


@with_error_handling
def destroy(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Service name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Allow deleting the default service"
    ),
) -> None:
    """🗑️  Delete a service together with its container and data."""
    cli = get_cli_context(ctx)
    run_destroy(cli, name, yes=yes, force=force)
    _refresh_admin(cli)


@with_error_handling
def start(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Service name (default service)"),
    restart: bool = typer.Option(
        False, "--restart", "-r", help="Recreate the container first"
    ),
) -> None:
    """🚀 Start a service.

    Without a name the default service is started. When no default exists
    a new service is created interactively first.
    """
    cli = get_cli_context(ctx)
    run_start(cli, name, restart=restart)
    _refresh_admin(cli)


@with_error_handling
def stop(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Service name (default service)"),
) -> None:
    """⏹️  Stop a service and remove its container."""
    cli = get_cli_context(ctx)
    run_stop(cli, name)
    _refresh_admin(cli)


@with_error_handling
def restart(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Service name (default service)"),
) -> None:
    """🔄 Recreate a service's container from its current declaration."""
    cli = get_cli_context(ctx)
    run_start(cli, name, restart=True)
    _refresh_admin(cli)


@with_error_handling
def upgrade(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Service name (default service)"),
    image_name: str | None = typer.Option(None, "--image", "-i", help="Image name"),
    image_version: str | None = typer.Option(
        None, "--image-version", "-I", help="Image version"
    ),
    container_port: int | None = typer.Option(
        None, "--container-port", help="Host port to publish the database on"
    ),
) -> None:
    """⬆️  Change a service's image or exposed port.

    Run ``start --restart`` afterwards to apply the change.
    """
    run_upgrade(
        get_cli_context(ctx),
        name,
        image_name=image_name,
        image_version=image_version,
        container_port=container_port,
    )


@with_error_handling
def default(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Service name"),
) -> None:
    """⭐ Set the default service."""
    run_set_default(get_cli_context(ctx), name)


@with_error_handling
def ls(ctx: typer.Context) -> None:
    """📋 List declared services."""
    cli = get_cli_context(ctx)
    cli.console.print(services_table(cli))

"""Admin console commands."""

import typer

from wocker_pgsql.cli.context import get_cli_context

from .shared import with_error_handling
from .workflows import run_admin_init, run_admin_refresh


@with_error_handling
def init(
    ctx: typer.Context,
    enabled: bool | None = typer.Option(
        None, "--enable/--disable", help="Enable or disable the admin console"
    ),
    email: str | None = typer.Option(None, "--email", "-e", help="Login email"),
    password: str | None = typer.Option(
        None, "--password", "-p", help="Login password"
    ),
    skip_password: bool | None = typer.Option(
        None,
        "--skip-password/--no-skip-password",
        "-s",
        help="Open the console without a login",
    ),
) -> None:
    """⚙️  Configure the pgAdmin console and start it."""
    cli = get_cli_context(ctx)
    run_admin_init(
        cli,
        enabled=enabled,
        email=email,
        password=password,
        skip_password=skip_password,
    )
    run_admin_refresh(cli)


@with_error_handling
def admin(ctx: typer.Context) -> None:
    """🖥️  Rebuild the pgAdmin console from the running services."""
    cli = get_cli_context(ctx)
    status = run_admin_refresh(cli)
    if status.started:
        cli.console.ok(f"Admin lists {len(status.servers)} server(s)")

"""Shared service workflows for CLI commands.

Each ``run_*`` function takes the CLIContext, resolves services through
the registry and drives the async infrastructure with ``run_sync``.
Values missing from the command line are asked for interactively.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger
from rich.table import Table

from wocker_pgsql.cli.context import CLIContext
from wocker_pgsql.cli.shared.secrets import get_password
from wocker_pgsql.core.errors import OperationAbortedError, PreconditionError
from wocker_pgsql.core.service import (
    Service,
    StorageMode,
    check_service_name,
    resolve_volume,
    service_name_error,
)
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS
from wocker_pgsql.infra.docker import ExecSpec, run_sync
from wocker_pgsql.infra.postgres import (
    AdminStatus,
    default_backup_filename,
    list_databases,
    password_env,
)

PASSWORD_ENV_VAR = "WOCKER_PGSQL_PASSWORD"


# =============================================================================
# Registry
# =============================================================================


def run_create(
    ctx: CLIContext,
    *,
    name: str | None = None,
    user: str | None = None,
    password: str | None = None,
    host: str | None = None,
    port: str | None = None,
    image_name: str | None = None,
    image_version: str | None = None,
    storage: str | None = None,
    volume: str | None = None,
    container_port: int | None = None,
) -> Service:
    """Declare a new service and persist it.

    A missing or already taken name, a missing user or password, and (for
    local services) the storage mode and exposed port are prompted for.

    Raises:
        ServiceValidationError: If an explicit name is not a valid service name
    """
    registry = ctx.registry
    console = ctx.console

    def validate_name(value: str) -> str | None:
        error = service_name_error(value)
        if error:
            return error
        if registry.has_service(value):
            return f'Service "{value}" already exists'
        return None

    if name:
        check_service_name(name)
    if not name or registry.has_service(name):
        name = console.prompt_text(
            "Service name", default=name or "default", validate=validate_name
        )

    if not user:
        user = console.prompt_text(
            "Database user", default=DEFAULT_CONSTANTS.FALLBACK_USER
        )

    if not password:
        password = get_password(console, "Database password", PASSWORD_ENV_VAR)

    if not host:
        storage_modes = [mode.value for mode in StorageMode]
        if storage not in storage_modes:
            if ctx.settings.supports_volume_storage():
                storage = console.prompt_select("Storage", storage_modes)
            else:
                storage = StorageMode.FILESYSTEM.value

        if container_port is None and console.prompt_confirm(
            "Do you need to expose container port?"
        ):
            container_port = int(
                console.prompt_text(
                    "Container port",
                    default=str(DEFAULT_CONSTANTS.POSTGRES_PORT),
                    validate=_validate_port,
                )
            )

    service = Service(
        name=name,
        user=user,
        password=password,
        host=host,
        port=port,
        image_name=image_name or ctx.settings.default_image_name,
        image_version=image_version or ctx.settings.default_image_version,
        storage=storage or StorageMode.FILESYSTEM.value,
        volume=volume,
        container_port=container_port,
    )
    registry.add_service(service)
    registry.save()

    console.ok(f'Service "{service.name}" created')
    return service


def _validate_port(value: str) -> str | None:
    if not value.isdigit() or not 0 < int(value) < 65536:
        return "Port must be a number between 1 and 65535"
    return None


def run_upgrade(
    ctx: CLIContext,
    name: str | None,
    *,
    image_name: str | None = None,
    image_version: str | None = None,
    container_port: int | None = None,
) -> bool:
    """Change a service's image or exposed port.

    The running container is left alone; ``start --restart`` applies the
    change.

    Returns:
        True if anything changed and was persisted
    """
    registry = ctx.registry
    service = registry.get_service_or_default(name)
    changes: dict[str, object] = {}

    if image_name:
        changes["image_name"] = image_name
    if image_version:
        changes["image_version"] = image_version
    if container_port:
        changes["container_port"] = container_port

    if not changes:
        ctx.console.info("Nothing to upgrade")
        return False

    registry.set_service(service.model_copy(update=changes))
    registry.save()
    ctx.console.ok(f'Service "{service.name}" upgraded')
    return True


def run_set_default(ctx: CLIContext, name: str) -> None:
    registry = ctx.registry
    registry.set_default(name)
    registry.save()
    ctx.console.ok(f'Default service is "{name}"')


def run_destroy(
    ctx: CLIContext, name: str | None, *, yes: bool = False, force: bool = False
) -> Service:
    """Remove a service, its container and the data it owns.

    Raises:
        PreconditionError: If the service is the default and force is not set
        OperationAbortedError: If the confirmation is declined
    """
    registry = ctx.registry
    service = registry.get_service_or_default(name)

    if not force and service.name == registry.default:
        raise PreconditionError(
            "Can't delete default service.",
            "Pass --force to delete it anyway.",
        )

    if not yes and not ctx.console.confirm_action(
        f'Delete "{service.name}" service',
        warning="All data stored by this service will be removed.",
    ):
        raise OperationAbortedError()

    if not service.is_external:
        try:
            run_sync(ctx.reconciler.remove_storage(service))
        except Exception as e:
            logger.warning(f"Cleanup of {service.name} failed: {e}")
            ctx.console.warn(f"Cleanup of {service.name} failed: {e}")

    registry.unset_service(service.name)
    registry.save()
    ctx.console.ok(f'Service "{service.name}" deleted')
    return service


def services_table(ctx: CLIContext) -> Table:
    """Render the registry as a table."""
    registry = ctx.registry
    table = Table(title="PostgreSQL services")
    table.add_column("Name", style="cyan")
    table.add_column("Image")
    table.add_column("Host/Container")
    table.add_column("Expose port")
    table.add_column("Volume")

    for service in registry.services:
        marker = " (default)" if service.name == registry.default else ""
        volume = ""
        if service.storage == StorageMode.VOLUME.value:
            volume = resolve_volume(service)
        table.add_row(
            f"{service.name}{marker}",
            service.image,
            service.host or service.container_name,
            str(service.container_port or ""),
            volume,
        )
    return table


# =============================================================================
# Lifecycle
# =============================================================================


def run_start(
    ctx: CLIContext, name: str | None = None, *, restart: bool = False
) -> Service:
    """Start a service, creating one interactively when nothing is declared."""
    registry = ctx.registry
    if not name and not registry.default:
        run_create(ctx)

    service = registry.get_service_or_default(name)
    run_sync(ctx.reconciler.ensure_running(service, restart=restart))
    return service


def run_stop(ctx: CLIContext, name: str | None = None) -> Service:
    service = ctx.registry.get_service_or_default(name)
    run_sync(ctx.reconciler.stop(service))
    ctx.console.ok(f"Stopped {service.name}")
    return service


def run_admin_init(
    ctx: CLIContext,
    *,
    enabled: bool | None = None,
    email: str | None = None,
    password: str | None = None,
    skip_password: bool | None = None,
) -> None:
    """Configure the admin console, prompting for missing values."""
    registry = ctx.registry
    admin = registry.admin
    console = ctx.console

    if enabled is None:
        enabled = console.prompt_confirm("Enable admin?", default=admin.enabled)
    admin.enabled = enabled

    if admin.enabled:
        admin.email = email or console.prompt_text(
            "Email", default=admin.email or DEFAULT_CONSTANTS.ADMIN_DEFAULT_EMAIL
        )
        admin.password = password or console.prompt_text(
            "Password",
            default=admin.password or DEFAULT_CONSTANTS.ADMIN_DEFAULT_PASSWORD,
        )
        if skip_password is None:
            skip_password = console.prompt_confirm(
                "Skip password", default=bool(admin.skip_password)
            )
        admin.skip_password = skip_password

    registry.save()
    console.ok("Admin settings saved")


def run_admin_refresh(ctx: CLIContext) -> AdminStatus:
    status = run_sync(ctx.admin.refresh(ctx.registry))
    if not status.started and status.reason:
        logger.debug(f"Admin not started: {status.reason}")
    return status


# =============================================================================
# Databases
# =============================================================================


def _select_database(ctx: CLIContext, service: Service, database: str | None) -> str:
    if database:
        return database
    databases = run_sync(list_databases(ctx.controller, service))
    return ctx.console.prompt_select("Database", databases)


def run_psql(ctx: CLIContext, name: str | None = None) -> int:
    """Open an interactive psql session; returns the client's exit code."""
    service = ctx.registry.get_service_or_default(name)
    spec = ExecSpec(cmd=["psql", *service.auth_args()], env=password_env(service))

    async def session() -> int:
        async with ctx.backups.exec_target(service) as container:
            return await ctx.controller.exec_interactive(container, spec)

    return run_sync(session())


def run_dump(
    ctx: CLIContext, name: str | None = None, database: str | None = None
) -> int:
    """Write a dump of one database to standard output."""
    service = ctx.registry.get_service_or_default(name)
    database = _select_database(ctx, service, database)
    spec = ExecSpec(
        cmd=["pg_dump", *service.auth_args(), "-d", database],
        env=password_env(service),
    )

    async def dump() -> int:
        async with ctx.backups.exec_target(service) as container:
            return await ctx.controller.exec_stream(
                container,
                spec,
                stdout=sys.stdout.buffer,
                stderr=ctx.backups.stderr,
            )

    return run_sync(dump())


# =============================================================================
# Backups
# =============================================================================


def run_backup(
    ctx: CLIContext,
    name: str | None = None,
    database: str | None = None,
    filename: str | None = None,
) -> Path:
    service = ctx.registry.get_service_or_default(name)
    database = _select_database(ctx, service, database)

    if not filename:
        filename = ctx.console.prompt_text(
            "File name",
            default=default_backup_filename().removesuffix(
                DEFAULT_CONSTANTS.BACKUP_SUFFIX
            ),
        )
    if not filename.endswith(DEFAULT_CONSTANTS.BACKUP_SUFFIX):
        filename += DEFAULT_CONSTANTS.BACKUP_SUFFIX

    return run_sync(ctx.backups.backup(service, database, filename))


def _select_backup(
    ctx: CLIContext, service: Service, database: str | None, filename: str | None
) -> tuple[str, str]:
    backups = ctx.backups
    if not database:
        database = ctx.console.prompt_select(
            "Database", backups.list_backup_databases(service)
        )
    if not filename:
        filename = ctx.console.prompt_select(
            "File name", backups.list_backup_files(service, database)
        )
    return database, filename


def run_restore(
    ctx: CLIContext,
    name: str | None = None,
    database: str | None = None,
    filename: str | None = None,
) -> None:
    service = ctx.registry.get_service_or_default(name)
    database, filename = _select_backup(ctx, service, database, filename)
    run_sync(ctx.backups.restore(service, database, filename))


def run_delete_backup(
    ctx: CLIContext,
    name: str | None = None,
    database: str | None = None,
    filename: str | None = None,
    *,
    yes: bool = False,
) -> Path:
    """Delete a dump file after confirmation.

    Returns:
        Path of the deleted file
    """
    service = ctx.registry.get_service_or_default(name)
    database, filename = _select_backup(ctx, service, database, filename)

    if not yes and not ctx.console.confirm_action(f'Delete backup "{filename}"'):
        raise OperationAbortedError()

    path = ctx.backups.delete_backup(service, database, filename)
    ctx.console.ok(f'Backup "{filename}" deleted')
    return path


def backups_table(ctx: CLIContext, name: str | None = None) -> Table:
    """List stored dumps per database."""
    service = ctx.registry.get_service_or_default(name)
    table = Table(title=f"Backups of {service.name}")
    table.add_column("Database", style="cyan")
    table.add_column("File")

    for database in ctx.backups.list_backup_databases(service):
        for filename in ctx.backups.list_backup_files(service, database):
            table.add_row(database, filename)
    return table


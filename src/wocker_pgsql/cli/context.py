"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass

import click
import typer

from wocker_pgsql.cli.shared.console import CLIConsole, console
from wocker_pgsql.config import PgsqlSettings, load_settings
from wocker_pgsql.core.registry import Registry
from wocker_pgsql.core.store import JsonRegistryStore
from wocker_pgsql.infra.docker import ContainerController, get_container_controller
from wocker_pgsql.infra.postgres import AdminFederation, BackupPipe, ServiceReconciler


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    settings: PgsqlSettings
    store: JsonRegistryStore
    controller: ContainerController
    reconciler: ServiceReconciler
    admin: AdminFederation
    backups: BackupPipe

    @property
    def registry(self) -> Registry:
        return self.store.registry


def build_cli_context(
    settings: PgsqlSettings | None = None,
    *,
    cli_console: CLIConsole | None = None,
    controller: ContainerController | None = None,
) -> CLIContext:
    """Build a fresh CLIContext."""
    settings = settings or load_settings()
    cli_console = cli_console or console
    controller = controller or get_container_controller()

    return CLIContext(
        console=cli_console,
        settings=settings,
        store=JsonRegistryStore(settings.paths.registry_file),
        controller=controller,
        reconciler=ServiceReconciler(controller, settings, cli_console),
        admin=AdminFederation(controller, settings, cli_console),
        backups=BackupPipe(controller, settings, cli_console),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()

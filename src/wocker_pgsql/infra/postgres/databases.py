"""Database discovery for a service."""

from __future__ import annotations

import asyncio

from wocker_pgsql.core.errors import ContainerNotRunningError, ExternalProcessError
from wocker_pgsql.core.service import Service
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS
from wocker_pgsql.infra.docker.controller import ContainerController, ExecSpec

from .connection import ExternalConnection

LIST_DATABASES_SQL = (
    "SELECT datname FROM pg_database WHERE NOT datistemplate ORDER BY datname"
)


def password_env(service: Service) -> dict[str, str]:
    """Environment for psql/pg_dump authentication."""
    return {"PGPASSWORD": service.password} if service.password else {}


async def list_databases(
    controller: ContainerController, service: Service
) -> list[str]:
    """List the non-template databases of a service.

    Local services are queried with ``psql`` inside their container;
    external services over a direct connection.

    Raises:
        ContainerNotRunningError: If a local service's container is not running
        ExternalProcessError: If psql fails
    """
    if service.is_external:
        rows = await asyncio.to_thread(
            ExternalConnection(service).execute, LIST_DATABASES_SQL
        )
        return [row["datname"] for row in rows]

    info = await controller.get_container(service.container_name)
    if info is None or not info.running:
        raise ContainerNotRunningError(service.name)

    result = await controller.exec_capture(
        service.container_name,
        ExecSpec(
            cmd=[
                "psql",
                *service.auth_args(),
                "-d",
                DEFAULT_CONSTANTS.MAINTENANCE_DB,
                "-At",
                "-c",
                LIST_DATABASES_SQL,
            ],
            env=password_env(service),
        ),
    )
    if not result.success:
        raise ExternalProcessError(
            "Listing databases", result.returncode, result.stderr.strip() or None
        )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]

"""Streaming backup and restore through a container's standard I/O.

Dumps are plain SQL files stored per service and per database:
``<plugin-data>/dump/<service>/<database>/<file>``.
"""

from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from wocker_pgsql.config.settings import PgsqlSettings
from wocker_pgsql.core.errors import (
    ContainerNotRunningError,
    ExternalProcessError,
    NotFoundError,
    ServiceValidationError,
)
from wocker_pgsql.core.service import Service
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS
from wocker_pgsql.infra.docker.controller import (
    ContainerController,
    ContainerSpec,
    ExecSpec,
)
from wocker_pgsql.utils.console_like import ConsoleLike, coalesce_console

from .databases import password_env


def default_backup_filename(now: datetime | None = None) -> str:
    """Timestamped file name used when none is given."""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H-%M")
    return f"{stamp}{DEFAULT_CONSTANTS.BACKUP_SUFFIX}"


def _check_name(kind: str, value: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise ServiceValidationError(f"Invalid {kind} name: {value!r}")
    return value


class BackupPipe:
    """Streams pg_dump output to files and files into psql.

    Local services reuse their running container. External services get a
    transient host-network container built from the service image, which
    is always removed afterwards.

    Attributes:
        controller: Container runtime
        settings: Plugin settings
        console: Operator output
    """

    def __init__(
        self,
        controller: ContainerController,
        settings: PgsqlSettings,
        console: ConsoleLike | None = None,
        *,
        stderr: BinaryIO | None = None,
    ) -> None:
        self.controller = controller
        self.settings = settings
        self.paths = settings.paths
        self._console = coalesce_console(console)
        self._stderr = stderr

    @property
    def stderr(self) -> BinaryIO:
        """Operator error channel for tool diagnostics."""
        return self._stderr if self._stderr is not None else sys.stderr.buffer

    # =========================================================================
    # Files
    # =========================================================================

    def backup_path(self, service: Service, database: str, filename: str) -> Path:
        return self.paths.service_dump_dir(
            service.name, _check_name("database", database)
        ) / _check_name("file", filename)

    def list_backup_databases(self, service: Service) -> list[str]:
        """List databases that have at least a dump directory."""
        root = self.paths.service_dump_dir(service.name)
        if not root.is_dir():
            return []
        return sorted(path.name for path in root.iterdir() if path.is_dir())

    def list_backup_files(self, service: Service, database: str) -> list[str]:
        root = self.paths.service_dump_dir(
            service.name, _check_name("database", database)
        )
        if not root.is_dir():
            return []
        return sorted(path.name for path in root.iterdir() if path.is_file())

    def delete_backup(self, service: Service, database: str, filename: str) -> Path:
        """Delete one dump file.

        Raises:
            NotFoundError: If the file does not exist
        """
        path = self.backup_path(service, database, filename)
        if not path.is_file():
            raise NotFoundError(
                f'Backup "{filename}" not found for {service.name}/{database}'
            )
        path.unlink()
        logger.info(f"Deleted backup {path}")
        return path

    # =========================================================================
    # Containers
    # =========================================================================

    async def _dispose(self, name: str) -> None:
        """Stop and remove a transient container; failures are only logged."""
        try:
            await self.controller.stop_container(name)
        except Exception as e:
            logger.warning(f"Failed to stop {name}: {e}")
        try:
            await self.controller.remove_container(name)
        except Exception as e:
            logger.warning(f"Failed to remove {name}: {e}")

    @asynccontextmanager
    async def exec_target(self, service: Service) -> AsyncIterator[str]:
        """Yield the name of a container that can run the PostgreSQL tools.

        Raises:
            ContainerNotRunningError: If a local service is not running
        """
        if not service.is_external:
            info = await self.controller.get_container(service.container_name)
            if info is None or not info.running:
                raise ContainerNotRunningError(service.name)
            yield service.container_name
            return

        name = service.container_name
        # A previous run killed mid-stream may have left one behind
        await self.controller.remove_container(name)
        await self.controller.create_container(
            ContainerSpec(
                name=name,
                image=service.image,
                network_mode="host",
                tty=True,
                command=["sleep", "infinity"],
            )
        )
        try:
            await self.controller.start_container(name)
            yield name
        finally:
            await self._dispose(name)

    # =========================================================================
    # Streaming
    # =========================================================================

    async def backup(self, service: Service, database: str, filename: str) -> Path:
        """Dump a database into a local file.

        stdout of pg_dump goes to the file, stderr to the operator.

        Returns:
            Path of the written dump

        Raises:
            ContainerNotRunningError: If a local service is not running
            ExternalProcessError: If pg_dump exits non-zero; the partial
                                  file is removed
        """
        path = self.backup_path(service, database, filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        spec = ExecSpec(
            cmd=[
                "pg_dump",
                *service.auth_args(),
                "--if-exists",
                "--no-comments",
                "-c",
                "-d",
                database,
            ],
            env=password_env(service),
        )

        async with self.exec_target(service) as container:
            try:
                with path.open("wb") as file:
                    exit_code = await self.controller.exec_stream(
                        container, spec, stdout=file, stderr=self.stderr
                    )
            except BaseException:
                path.unlink(missing_ok=True)
                raise

        if exit_code != 0:
            path.unlink(missing_ok=True)
            raise ExternalProcessError("Backup", exit_code)

        self._console.ok("Backup created")
        logger.info(f"Backup of {service.name}/{database} written to {path}")
        return path

    async def restore(self, service: Service, database: str, filename: str) -> None:
        """Replay a dump file into a database.

        psql runs with ``ON_ERROR_STOP`` so the first SQL error aborts. The
        stream ending is not enough: the exit code decides success.

        Raises:
            NotFoundError: If the dump file does not exist
            ContainerNotRunningError: If a local service is not running
            ExternalProcessError: If psql exits non-zero
        """
        path = self.backup_path(service, database, filename)
        if not path.is_file():
            raise NotFoundError(
                f'Backup "{filename}" not found for {service.name}/{database}'
            )

        spec = ExecSpec(
            cmd=[
                "psql",
                "--set",
                "ON_ERROR_STOP=on",
                *service.auth_args(),
                "-d",
                database,
            ],
            env=password_env(service),
        )

        async with self.exec_target(service) as container:
            with path.open("rb") as file:
                exit_code = await self.controller.exec_stream(
                    container, spec, stdin=file, stdout=None, stderr=self.stderr
                )

        if exit_code != 0:
            raise ExternalProcessError("Restore", exit_code)

        self._console.ok("Restored")

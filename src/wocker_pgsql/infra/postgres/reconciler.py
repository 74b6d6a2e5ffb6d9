"""Container lifecycle reconciliation for PostgreSQL services.

Makes the container runtime match one service's declared state. Every
operation is idempotent and keeps no state between calls: the registry
snapshot plus the live runtime are the only inputs.
"""

from __future__ import annotations

import shutil

from loguru import logger

from wocker_pgsql.config.settings import PgsqlSettings
from wocker_pgsql.core.errors import PreconditionError
from wocker_pgsql.core.service import (
    Service,
    StorageMode,
    owns_volume,
    resolve_storage,
    resolve_volume,
)
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS
from wocker_pgsql.infra.docker.controller import ContainerController, ContainerSpec
from wocker_pgsql.utils.console_like import ConsoleLike, coalesce_console


class ServiceReconciler:
    """Ensures PostgreSQL service containers exist and run as declared.

    External services (those with a ``host``) are never touched.

    Attributes:
        controller: Container runtime
        settings: Plugin settings (data paths, network, core version)
        console: Operator output
    """

    def __init__(
        self,
        controller: ContainerController,
        settings: PgsqlSettings,
        console: ConsoleLike | None = None,
    ) -> None:
        self.controller = controller
        self.settings = settings
        self.paths = settings.paths
        self._console = coalesce_console(console)
        self._constants = DEFAULT_CONSTANTS

    def _require_volume_support(self) -> None:
        if not self.settings.supports_volume_storage():
            raise PreconditionError(
                "Please update wocker for using volume storage",
                "Volume storage needs wocker"
                f" {self._constants.VOLUME_STORAGE_MIN_VERSION} or newer"
                f" (found {self.settings.core_version}).",
            )

    async def _resolve_volumes(self, service: Service) -> list[str]:
        """Build the data mount for a local service.

        Raises:
            ServiceValidationError: If the storage mode is unknown
            PreconditionError: If volume storage is not supported
        """
        mount = self._constants.DATA_MOUNT_PATH
        storage = resolve_storage(service)

        if storage is StorageMode.VOLUME:
            self._require_volume_support()
            volume = resolve_volume(service)
            if not await self.controller.has_volume(volume):
                logger.debug(f"Creating volume {volume}")
                await self.controller.create_volume(volume)
            return [f"{volume}:{mount}"]

        data_dir = self.paths.service_data_dir(service.name)
        return [f"{data_dir}:{mount}"]

    async def build_spec(self, service: Service) -> ContainerSpec:
        """Build the container spec for a local service."""
        c = self._constants
        if service.user or service.password:
            user, password = service.user or "", service.password or ""
        else:
            user, password = c.FALLBACK_USER, c.FALLBACK_PASSWORD

        return ContainerSpec(
            name=service.container_name,
            image=service.image,
            restart=c.RESTART_POLICY,
            network=self.settings.network,
            volumes=await self._resolve_volumes(service),
            env={"POSTGRES_USER": user, "POSTGRES_PASSWORD": password},
            ports=(
                [f"{service.container_port}:{c.POSTGRES_PORT}"]
                if service.container_port
                else []
            ),
        )

    async def ensure_running(self, service: Service, restart: bool = False) -> None:
        """Make sure the service's container exists and is running.

        Args:
            service: Service to reconcile
            restart: Remove any existing container first so it is recreated
                     from the current declaration (image, port, volumes)
        """
        if service.is_external:
            logger.debug(f"Service {service.name} is external, nothing to start")
            return

        name = service.container_name

        if restart:
            logger.debug(f"Removing {name} before restart")
            await self.controller.remove_container(name)

        info = await self.controller.get_container(name)

        if info is None:
            spec = await self.build_spec(service)
            if self.settings.network:
                await self.controller.ensure_network(self.settings.network)
            logger.info(f"Creating container {name} from {spec.image}")
            info = await self.controller.create_container(spec)

        info = await self.controller.get_container(name) or info
        if not info.running:
            await self.controller.start_container(name)

        self._console.info(f"Started {service.name} at {name}")

    async def stop(self, service: Service) -> None:
        """Remove the service's container; missing containers are fine."""
        await self.controller.remove_container(service.container_name)

    async def remove_storage(self, service: Service) -> None:
        """Remove the container and the data it owns.

        Named volumes are removed only when they are the service's own
        derived volume; custom volumes may be shared and are left alone.
        Filesystem storage deletes the per-service data directory.
        """
        if service.is_external:
            return

        await self.controller.remove_container(service.container_name)

        storage = resolve_storage(service)
        if storage is StorageMode.VOLUME:
            volume = resolve_volume(service)
            if not owns_volume(service):
                self._console.info(f'Deletion of custom volume "{volume}" skipped.')
                return

            self._require_volume_support()
            if await self.controller.has_volume(volume):
                await self.controller.remove_volume(volume)
                logger.info(f"Removed volume {volume}")
            return

        data_dir = self.paths.service_data_dir(service.name)
        if data_dir.exists():
            shutil.rmtree(data_dir)
            logger.info(f"Removed data directory {data_dir}")

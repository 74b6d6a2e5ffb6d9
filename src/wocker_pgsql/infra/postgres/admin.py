"""Admin console federation.

Keeps a single pgAdmin container's list of known servers consistent with
the services that are currently reachable: external services and local
services whose container is running.

pgAdmin reads its server list only when the container is created, so
every refresh removes the console and recreates it from a freshly
generated ``servers.json`` and pgpass files.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from wocker_pgsql.config.settings import PgsqlSettings
from wocker_pgsql.core.registry import AdminConfig, Registry
from wocker_pgsql.core.service import Service
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS
from wocker_pgsql.infra.docker.controller import ContainerController, ContainerSpec
from wocker_pgsql.utils.console_like import ConsoleLike, coalesce_console


@dataclass
class FederatedServer:
    """A service the admin console should list."""

    name: str
    host: str
    port: int | str
    user: str | None = None
    password: str | None = None

    def pgpass_line(self) -> str:
        """Credential line in ``host:port:database:user:password`` format."""
        db = DEFAULT_CONSTANTS.MAINTENANCE_DB
        return f"{self.host}:{self.port}:{db}:{self.user or ''}:{self.password or ''}"

    def descriptor(self) -> dict[str, Any]:
        """Server entry for pgAdmin's ``servers.json``."""
        c = DEFAULT_CONSTANTS
        return {
            "Group": c.ADMIN_SERVER_GROUP,
            "Name": self.name,
            "Host": self.host,
            "Port": int(self.port) if str(self.port).isdigit() else self.port,
            "MaintenanceDB": c.MAINTENANCE_DB,
            "Username": self.user or "",
            "PassFile": f"{c.ADMIN_PASSFILE_DIR}/{self.name}.pgpass",
            "SSLMode": "prefer",
        }


@dataclass
class AdminStatus:
    """Outcome of an admin refresh."""

    started: bool
    servers: list[str] = field(default_factory=list)
    reason: str | None = None


def build_servers_document(servers: list[FederatedServer]) -> dict[str, Any]:
    """Build ``servers.json`` with entries keyed by stable string index."""
    entries = {str(index): server.descriptor() for index, server in enumerate(servers)}
    return {"Servers": entries}


class AdminFederation:
    """Regenerates and restarts the shared admin console.

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
    ) -> None:
        self.controller = controller
        self.settings = settings
        self.paths = settings.paths
        self._console = coalesce_console(console)
        self._constants = DEFAULT_CONSTANTS

    @property
    def container_name(self) -> str:
        return self._constants.ADMIN_CONTAINER_NAME

    async def collect_servers(self, services: list[Service]) -> list[FederatedServer]:
        """Select the services the console can reach.

        External services are listed as declared without a liveness check.
        Local services are listed only while their container is running.
        """
        servers: list[FederatedServer] = []

        for service in services:
            if service.is_external:
                host = str(service.host)
                port: int | str = service.port or self._constants.POSTGRES_PORT
            else:
                info = await self.controller.get_container(service.container_name)
                if info is None or not info.running:
                    logger.debug(f"Skipping {service.name}: container not running")
                    continue
                host = service.container_name
                port = self._constants.POSTGRES_PORT

            servers.append(
                FederatedServer(
                    name=service.name,
                    host=host,
                    port=port,
                    user=service.user,
                    password=service.password,
                )
            )

        return servers

    def write_server_files(self, servers: list[FederatedServer]) -> None:
        """Write ``servers.json`` and one pgpass file per server."""
        self.paths.plugin_dir.mkdir(parents=True, exist_ok=True)
        self.paths.servers_json.write_text(
            json.dumps(build_servers_document(servers), indent=4), encoding="utf-8"
        )

        # Stale files from services that are gone must not be mounted
        if self.paths.passwords_dir.exists():
            shutil.rmtree(self.paths.passwords_dir)
        self.paths.passwords_dir.mkdir(parents=True)

        for server in servers:
            passfile = self.paths.passfile(server.name)
            passfile.write_text(server.pgpass_line() + "\n", encoding="utf-8")
            passfile.chmod(0o600)

    def build_spec(self, admin: AdminConfig) -> ContainerSpec:
        """Build the admin console container spec."""
        c = self._constants
        script = "; ".join(
            [
                f"mkdir -p {c.ADMIN_PASSFILE_DIR}",
                f"cp {c.ADMIN_PASSFILE_MOUNT}/*.pgpass {c.ADMIN_PASSFILE_DIR}/",
                f"chmod -R 600 {c.ADMIN_PASSFILE_DIR}/",
                f"chown -R root:root {c.ADMIN_PASSFILE_DIR}",
                f"exec {c.ADMIN_ENTRYPOINT}",
            ]
        )

        env = {
            "VIRTUAL_HOST": admin.host or self.container_name,
            "PGADMIN_DEFAULT_EMAIL": admin.email or "",
            "PGADMIN_DEFAULT_PASSWORD": admin.password or "",
        }
        if admin.skip_password:
            env["PGADMIN_CONFIG_SERVER_MODE"] = "False"
            env["PGADMIN_CONFIG_MASTER_PASSWORD_REQUIRED"] = "False"

        return ContainerSpec(
            name=self.container_name,
            image=self.settings.admin_image,
            user=c.ADMIN_USER,
            restart=c.RESTART_POLICY,
            network=self.settings.network,
            entrypoint=["/bin/sh", "-c", script],
            volumes=[
                f"{c.ADMIN_VOLUME}:{c.ADMIN_DATA_PATH}",
                f"{self.paths.servers_json}:{c.ADMIN_SERVERS_MOUNT}",
                f"{self.paths.passwords_dir}:{c.ADMIN_PASSFILE_MOUNT}:ro",
            ],
            env=env,
        )

    async def _register_proxy(self) -> None:
        """Start the reverse proxy so the console's virtual host resolves.

        Best effort: the console works without the proxy.
        """
        proxy = self.settings.proxy_container
        if not proxy:
            return
        try:
            info = await self.controller.get_container(proxy)
            if info is not None and not info.running:
                await self.controller.start_container(proxy)
        except Exception as e:
            logger.warning(f"Proxy registration failed: {e}")

    async def refresh(self, registry: Registry) -> AdminStatus:
        """Recreate the admin console from the registry and live runtime state.

        The existing console is always removed before deciding whether a new
        one is needed, so disabling the admin also tears down a stale console.

        Args:
            registry: Current registry snapshot

        Returns:
            AdminStatus describing what was done
        """
        admin = registry.admin

        if not admin.has_credentials:
            self._console.info("Can't start admin, credentials missing")
            return AdminStatus(started=False, reason="credentials missing")

        servers = await self.collect_servers(registry.services)

        await self.controller.remove_container(self.container_name)

        if not admin.enabled:
            return AdminStatus(started=False, reason="admin disabled")
        if not servers:
            return AdminStatus(started=False, reason="no running services")

        self.write_server_files(servers)

        info = await self.controller.get_container(self.container_name)
        if info is None:
            if self.settings.network:
                await self.controller.ensure_network(self.settings.network)
            info = await self.controller.create_container(self.build_spec(admin))

        if not info.running:
            await self.controller.start_container(self.container_name)
            await self._register_proxy()

        self._console.info(f"Admin started at {self.container_name}")
        if admin.skip_password:
            self._console.info("Password skipped")
        else:
            self._console.info(f"Login: {admin.email}")
            self._console.info("Password: ****")

        return AdminStatus(started=True, servers=[server.name for server in servers])

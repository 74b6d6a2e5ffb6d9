"""PostgreSQL service constants and data paths.

This module centralizes the naming conventions, image references, mount
points and on-disk locations shared by the registry, the reconciler, the
admin console and the backup pipe.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PgsqlConstants:
    """Constants for PostgreSQL containers and the admin console.

    All attributes are class-level and immutable.
    """

    # Container and volume naming
    CONTAINER_PREFIX: str = "pgsql-"
    CONTAINER_SUFFIX: str = ".ws"
    VOLUME_PREFIX: str = "wocker-pgsql-"

    # PostgreSQL image and container layout
    DEFAULT_IMAGE_NAME: str = "postgres"
    DEFAULT_IMAGE_VERSION: str = "latest"
    DATA_MOUNT_PATH: str = "/var/lib/postgresql/data"
    POSTGRES_PORT: int = 5432
    MAINTENANCE_DB: str = "postgres"
    RESTART_POLICY: str = "always"

    # Fallback credentials when a service declares neither user nor password
    FALLBACK_USER: str = "root"
    FALLBACK_PASSWORD: str = "root"

    # Volume storage needs a workspace core at least this recent
    VOLUME_STORAGE_MIN_VERSION: str = "1.0.19"

    # Admin console
    ADMIN_CONTAINER_NAME: str = "dbadmin-pgsql.workspace"
    ADMIN_IMAGE: str = "dpage/pgadmin4:latest"
    ADMIN_VOLUME: str = "wocker-pgadmin"
    ADMIN_USER: str = "root:root"
    ADMIN_DEFAULT_EMAIL: str = "root@pgsql.ws"
    ADMIN_DEFAULT_PASSWORD: str = "toor"
    ADMIN_DATA_PATH: str = "/var/lib/pgadmin"
    ADMIN_PASSFILE_DIR: str = "/var/lib/pgadmin/storage/passwords"
    ADMIN_PASSFILE_MOUNT: str = "/pgpass"
    ADMIN_SERVERS_MOUNT: str = "/pgadmin4/servers.json"
    ADMIN_ENTRYPOINT: str = "/entrypoint.sh"
    ADMIN_SERVER_GROUP: str = "Servers"

    # Plugin data layout (relative to the workspace data directory)
    PLUGIN_DIR: str = "plugins/pgsql"
    DB_DIR: str = "db/pgsql"
    REGISTRY_FILE: str = "config.json"
    SERVERS_FILE: str = "servers.json"
    PASSWORDS_DIR: str = "passwords"
    DUMP_DIR: str = "dump"
    BACKUP_SUFFIX: str = ".sql"


class PgsqlPaths:
    """Path resolver for plugin data, per-service data and dumps.

    All paths are derived from the workspace data directory.
    """

    def __init__(self, data_dir: Path) -> None:
        """Initialize data paths.

        Args:
            data_dir: Workspace data directory (e.g. ``~/.workspace``)
        """
        self._data_dir = Path(data_dir)
        self._constants = DEFAULT_CONSTANTS

        self.plugin_dir = self._data_dir / self._constants.PLUGIN_DIR
        self.db_dir = self._data_dir / self._constants.DB_DIR

    @property
    def data_dir(self) -> Path:
        """Get the workspace data directory."""
        return self._data_dir

    @property
    def registry_file(self) -> Path:
        """Get path to the persisted service registry."""
        return self.plugin_dir / self._constants.REGISTRY_FILE

    @property
    def servers_json(self) -> Path:
        """Get path to the generated admin server list."""
        return self.plugin_dir / self._constants.SERVERS_FILE

    @property
    def passwords_dir(self) -> Path:
        """Get path to the generated per-service pgpass files."""
        return self.plugin_dir / self._constants.PASSWORDS_DIR

    @property
    def dump_dir(self) -> Path:
        """Get path to the root of all dumps."""
        return self.plugin_dir / self._constants.DUMP_DIR

    def service_data_dir(self, service_name: str) -> Path:
        """Get the host directory bound into a filesystem-storage service."""
        return self.db_dir / service_name

    def service_dump_dir(self, service_name: str, database: str | None = None) -> Path:
        """Get the dump directory of a service, or of one of its databases."""
        path = self.dump_dir / service_name
        return path / database if database else path

    def passfile(self, service_name: str) -> Path:
        """Get the pgpass file generated for a service."""
        return self.passwords_dir / f"{service_name}.pgpass"


def is_version_gte(version: str, minimum: str) -> bool:
    """Compare dotted version strings numerically.

    Non-numeric suffixes (``1.0.19-beta``) are ignored per component.

    Example:
        >>> is_version_gte("1.0.20", "1.0.19")
        True
    """

    def _parts(value: str) -> tuple[int, ...]:
        parts: list[int] = []
        for chunk in value.strip().lstrip("v").split("."):
            digits = ""
            for char in chunk:
                if not char.isdigit():
                    break
                digits += char
            parts.append(int(digits or 0))
        return tuple(parts)

    current, required = _parts(version), _parts(minimum)
    width = max(len(current), len(required))
    current += (0,) * (width - len(current))
    required += (0,) * (width - len(required))
    return current >= required


DEFAULT_CONSTANTS = PgsqlConstants()

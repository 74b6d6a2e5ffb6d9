"""Runtime settings for the PostgreSQL plugin."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS, PgsqlPaths, is_version_gte


class PgsqlSettings(BaseModel):
    """Settings shared by every command.

    Attributes:
        data_dir: Workspace data directory holding plugin and database data
        core_version: Version of the workspace core, when known. Unknown
            versions are treated as supporting every feature.
        network: Docker network services and the admin console share
        proxy_container: Reverse proxy container registered with the admin
        admin_image: pgAdmin image reference
        default_image_name: Image used for new services
        default_image_version: Tag used for new services
        log_level: Minimum level written to stderr
    """

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".workspace")
    core_version: str | None = None
    network: str | None = "workspace"
    proxy_container: str | None = "proxy.workspace"
    admin_image: str = DEFAULT_CONSTANTS.ADMIN_IMAGE
    default_image_name: str = DEFAULT_CONSTANTS.DEFAULT_IMAGE_NAME
    default_image_version: str = DEFAULT_CONSTANTS.DEFAULT_IMAGE_VERSION
    log_level: str = "WARNING"

    @property
    def paths(self) -> PgsqlPaths:
        return PgsqlPaths(self.data_dir.expanduser())

    def supports_volume_storage(self) -> bool:
        """Check whether the workspace core can manage named volumes."""
        if not self.core_version:
            return True
        return is_version_gte(
            self.core_version, DEFAULT_CONSTANTS.VOLUME_STORAGE_MIN_VERSION
        )

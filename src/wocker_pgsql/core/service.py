"""Service entity: one named PostgreSQL instance tracked by the registry."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wocker_pgsql.core.errors import ServiceValidationError
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS


# Docker container-name grammar; also keeps names usable as one path segment.
SERVICE_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


def service_name_error(name: str) -> str | None:
    """Explain why ``name`` cannot name a service, or return None."""
    if not SERVICE_NAME_PATTERN.fullmatch(name):
        return (
            f'Invalid service name "{name}": use letters, digits, "_", "." or "-"'
            " and start with a letter or digit"
        )
    return None


def check_service_name(name: str) -> str:
    """Validate a service name.

    Raises:
        ServiceValidationError: If the name is not a plain container-safe name
    """
    error = service_name_error(name)
    if error:
        raise ServiceValidationError(error)
    return name


class StorageMode(StrEnum):
    """Where a local service keeps its data directory."""

    VOLUME = "volume"
    FILESYSTEM = "filesystem"


def parse_image_reference(reference: str) -> tuple[str, str | None]:
    """Split an image reference into name and tag.

    The tag separator is the last ``:`` after the last ``/`` so registry
    ports (``localhost:5000/postgres``) are kept in the name. Untagged and
    digest references have no tag.

    Example:
        >>> parse_image_reference("localhost:5000/postgres:16")
        ('localhost:5000/postgres', '16')
    """
    if "@" in reference:
        return reference, None

    slash = reference.rfind("/")
    colon = reference.rfind(":")
    if colon > slash:
        return reference[:colon], reference[colon + 1 :] or None
    return reference, None


class Service(BaseModel):
    """A PostgreSQL service, either container-backed or external.

    Attributes:
        name: Unique registry name
        user: Database user (POSTGRES_USER on first creation)
        password: Database password (POSTGRES_PASSWORD on first creation)
        host: External host; when set the service is never containerized
        port: External port
        image_name: Image repository
        image_version: Image tag
        storage: Raw storage mode, validated by ``resolve_storage``
        volume: Volume override for volume storage
        container_port: Host port publishing container port 5432
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    user: str | None = None
    password: str | None = None
    host: str | None = None
    port: int | str | None = None
    image_name: str = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_IMAGE_NAME, alias="imageName"
    )
    image_version: str | None = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_IMAGE_VERSION, alias="imageVersion"
    )
    storage: str = StorageMode.FILESYSTEM.value
    volume: str | None = None
    container_port: int | None = Field(default=None, alias="containerPort")

    @field_validator("name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        error = service_name_error(value)
        if error:
            raise ValueError(error)
        return value

    @model_validator(mode="before")
    @classmethod
    def _split_image(cls, data: Any) -> Any:
        """Accept the persisted single ``image`` reference."""
        if isinstance(data, dict) and data.get("image"):
            data = dict(data)
            name, version = parse_image_reference(data.pop("image"))
            data.setdefault("imageName", name)
            data.setdefault("imageVersion", version)
        return data

    @property
    def is_external(self) -> bool:
        return bool(self.host)

    @property
    def container_name(self) -> str:
        c = DEFAULT_CONSTANTS
        return f"{c.CONTAINER_PREFIX}{self.name}{c.CONTAINER_SUFFIX}"

    @property
    def default_volume(self) -> str:
        return f"{DEFAULT_CONSTANTS.VOLUME_PREFIX}{self.name}"

    @property
    def image(self) -> str:
        if not self.image_version:
            return self.image_name
        return f"{self.image_name}:{self.image_version}"

    def auth_args(self) -> list[str]:
        """Build the connection arguments for psql/pg_dump."""
        args: list[str] = []
        if self.user:
            args.extend(["-U", self.user])
        if self.is_external:
            args.extend(["--host", str(self.host)])
            if self.port:
                args.extend(["--port", str(self.port)])
        return args

    def to_object(self) -> dict[str, Any]:
        """Serialize to the persisted registry entry shape.

        Unset optional fields are omitted.
        """
        data: dict[str, Any] = {
            "name": self.name,
            "user": self.user,
            "password": self.password,
            "host": self.host,
            "port": self.port,
            "image": self.image,
            "storage": self.storage,
            "volume": self.volume,
            "containerPort": self.container_port,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_object(cls, data: dict[str, Any]) -> Service:
        return cls.model_validate(data)


def resolve_storage(service: Service) -> StorageMode:
    """Resolve the storage mode of a service.

    Raises:
        ServiceValidationError: If the stored value is not a known mode
    """
    try:
        return StorageMode(service.storage)
    except ValueError:
        raise ServiceValidationError(
            f'Unknown storage type "{service.storage}"',
            f"Service {service.name} must use one of: "
            + ", ".join(mode.value for mode in StorageMode),
        ) from None


def resolve_volume(service: Service) -> str:
    """Return the volume a volume-storage service mounts."""
    return service.volume or service.default_volume


def owns_volume(service: Service) -> bool:
    """Check whether the service's volume is the one derived from its name.

    Custom volumes may be shared and are never removed automatically.
    """
    return resolve_volume(service) == service.default_volume

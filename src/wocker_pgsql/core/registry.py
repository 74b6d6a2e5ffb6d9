"""Service registry: the persisted collection of services.

The registry owns every Service, the default-service pointer and the admin
console settings. Persistence is injected as a ``RegistryPersistence``
strategy so callers decide where (and whether) a registry is written.
"""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from wocker_pgsql.core.errors import (
    NoDefaultServiceError,
    ServiceNotFoundError,
    ServiceValidationError,
)
from wocker_pgsql.core.service import Service


class AdminConfig(BaseModel):
    """Settings for the shared admin console."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True
    host: str | None = None
    email: str | None = None
    password: str | None = None
    skip_password: bool | None = Field(default=None, alias="skipPassword")

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password)

    def to_object(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RegistryPersistence(Protocol):
    """Strategy that writes a registry somewhere durable."""

    def persist(self, registry: Registry) -> None: ...


class Registry:
    """In-memory registry of services.

    Invariants:
        - service names are unique
        - ``default`` is unset or names an existing service
    """

    def __init__(
        self,
        persistence: RegistryPersistence | None = None,
        *,
        default: str | None = None,
        admin: AdminConfig | None = None,
        services: list[Service] | None = None,
    ) -> None:
        self._persistence = persistence
        self.admin = admin or AdminConfig()
        self.services: list[Service] = []
        for service in services or []:
            if self.has_service(service.name):
                raise ServiceValidationError(
                    f'Service "{service.name}" is declared more than once'
                )
            self.services.append(service)
        self.default = default if default and self.has_service(default) else None

    # =========================================================================
    # Lookup
    # =========================================================================

    def has_service(self, name: str) -> bool:
        return self.get_service(name) is not None

    def get_service(self, name: str) -> Service | None:
        for service in self.services:
            if service.name == name:
                return service
        return None

    def get_default_service(self) -> Service | None:
        if not self.default:
            return None
        return self.get_service(self.default)

    def get_service_or_default(self, name: str | None = None) -> Service:
        """Resolve a service by name, or fall back to the default.

        Raises:
            ServiceNotFoundError: If a name was given and is unknown
            NoDefaultServiceError: If no name was given and no default resolves
        """
        if name:
            service = self.get_service(name)
            if service is None:
                raise ServiceNotFoundError(name)
            return service

        service = self.get_default_service()
        if service is None:
            raise NoDefaultServiceError()
        return service

    def service_names(self) -> list[str]:
        return [service.name for service in self.services]

    # =========================================================================
    # Mutation
    # =========================================================================

    def set_service(self, service: Service) -> None:
        """Insert or replace a service, keeping its position on replace.

        The first service stored into a registry without a default becomes
        the default.
        """
        for index, existing in enumerate(self.services):
            if existing.name == service.name:
                self.services[index] = service
                break
        else:
            self.services.append(service)

        if not self.default:
            self.default = service.name

    def add_service(self, service: Service) -> None:
        """Insert a new service.

        Raises:
            ServiceValidationError: If the name is already taken
        """
        if self.has_service(service.name):
            raise ServiceValidationError(f'Service "{service.name}" already exists')
        self.set_service(service)

    def unset_service(self, name: str) -> None:
        """Remove a service; clears the default if it pointed there."""
        self.services = [s for s in self.services if s.name != name]
        if self.default == name:
            self.default = None

    def set_default(self, name: str) -> None:
        if not self.has_service(name):
            raise ServiceNotFoundError(name)
        self.default = name

    def save(self) -> None:
        """Persist through the injected strategy."""
        if self._persistence is None:
            raise RuntimeError("Registry has no persistence configured")
        self._persistence.persist(self)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.default:
            data["default"] = self.default
        data["admin"] = self.admin.to_object()
        if self.services:
            data["services"] = [service.to_object() for service in self.services]
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        persistence: RegistryPersistence | None = None,
    ) -> Registry:
        return cls(
            persistence,
            default=data.get("default"),
            admin=AdminConfig.model_validate(data.get("admin") or {}),
            services=[Service.from_object(item) for item in data.get("services") or []],
        )

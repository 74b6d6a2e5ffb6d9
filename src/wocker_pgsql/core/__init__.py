"""Service entity, registry and registry persistence."""

from .errors import (
    ContainerNotRunningError,
    ContainerRuntimeError,
    ExternalProcessError,
    NoDefaultServiceError,
    NotFoundError,
    OperationAbortedError,
    PgsqlError,
    PreconditionError,
    ServiceNotFoundError,
    ServiceValidationError,
)
from .registry import AdminConfig, Registry, RegistryPersistence
from .service import (
    Service,
    StorageMode,
    check_service_name,
    owns_volume,
    parse_image_reference,
    resolve_storage,
    resolve_volume,
)
from .store import JsonRegistryStore

__all__ = [
    "AdminConfig",
    "ContainerNotRunningError",
    "ContainerRuntimeError",
    "ExternalProcessError",
    "JsonRegistryStore",
    "NoDefaultServiceError",
    "NotFoundError",
    "OperationAbortedError",
    "PgsqlError",
    "PreconditionError",
    "Registry",
    "RegistryPersistence",
    "Service",
    "ServiceNotFoundError",
    "ServiceValidationError",
    "StorageMode",
    "check_service_name",
    "owns_volume",
    "parse_image_reference",
    "resolve_storage",
    "resolve_volume",
]

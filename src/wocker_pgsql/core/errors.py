"""Error taxonomy for registry, container and streaming operations.

Every error carries a human-readable ``message`` and optional ``details``
so the CLI can render them consistently before exiting non-zero.
"""

from __future__ import annotations


class PgsqlError(Exception):
    """Base class for all labeled failures."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(PgsqlError):
    """Raised when a requested entity does not exist."""


class ServiceNotFoundError(NotFoundError):
    """Raised when a named service is absent from the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Service "{name}" not found')


class NoDefaultServiceError(NotFoundError):
    """Raised when no name was given and the registry has no usable default."""

    def __init__(self) -> None:
        super().__init__(
            "No default service",
            "Create a service or pass a service name explicitly.",
        )


class ServiceValidationError(PgsqlError):
    """Raised for invalid input or configuration values."""


class PreconditionError(PgsqlError):
    """Raised when an operation is refused because a guard is not met."""


class ContainerNotRunningError(PgsqlError):
    """Raised when an exec-based operation targets a missing or stopped container."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f'Service "{service_name}" isn\'t started')


class ContainerRuntimeError(PgsqlError):
    """Raised when a container runtime call fails."""


class ExternalProcessError(PgsqlError):
    """Raised when a tool executed inside a container exits non-zero."""

    def __init__(self, operation: str, exit_code: int, details: str | None = None):
        self.operation = operation
        self.exit_code = exit_code
        super().__init__(f"{operation} failed with exit code {exit_code}", details)


class OperationAbortedError(PgsqlError):
    """Raised when the operator declines a confirmation prompt."""

    def __init__(self, message: str = "Aborted"):
        super().__init__(message)

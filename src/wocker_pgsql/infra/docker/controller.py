"""Abstract container runtime interface.

Defines the contract for container operations that the reconciler, the
admin federation and the backup pipe depend on. Implementations may drive
the docker CLI, a Docker SDK, or an in-memory fake in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass
class ContainerInfo:
    """Observed state of a container."""

    name: str
    running: bool
    status: str = ""


@dataclass
class ContainerSpec:
    """Desired configuration of a container at creation time.

    Attributes:
        name: Container name
        image: Image reference
        env: Environment variables
        volumes: Mounts as ``source:target[:mode]``
        ports: Published ports as ``host:container``
        restart: Restart policy (e.g. "always")
        network: Network to attach to
        network_mode: Network mode (e.g. "host"); exclusive with ``network``
        user: User to run as
        entrypoint: Entrypoint override; the first element is the executable
        command: Command arguments
        tty: Allocate a pseudo-TTY
    """

    name: str
    image: str
    env: dict[str, str] = field(default_factory=dict)
    volumes: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    restart: str | None = None
    network: str | None = None
    network_mode: str | None = None
    user: str | None = None
    entrypoint: list[str] | None = None
    command: list[str] | None = None
    tty: bool = False


@dataclass
class ExecSpec:
    """A process to execute inside a running container."""

    cmd: list[str]
    env: dict[str, str] = field(default_factory=dict)


# =============================================================================
# Abstract Controller
# =============================================================================


class ContainerController(ABC):
    """Abstract base class for container runtime operations.

    All methods are async so blocking backends can run in worker threads.
    Use ``run_sync()`` to call from synchronous code.

    Example:
        from wocker_pgsql.infra.docker import DockerCliController, run_sync

        controller = DockerCliController()
        info = run_sync(controller.get_container("pgsql-default.ws"))
    """

    # =========================================================================
    # Containers
    # =========================================================================

    @abstractmethod
    async def get_container(self, name: str) -> ContainerInfo | None:
        """Inspect a container.

        Args:
            name: Container name

        Returns:
            ContainerInfo, or None if no such container exists
        """
        ...

    @abstractmethod
    async def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        """Create (but do not start) a container.

        Args:
            spec: Desired container configuration

        Returns:
            ContainerInfo of the created container
        """
        ...

    @abstractmethod
    async def start_container(self, name: str) -> None:
        """Start an existing container."""
        ...

    @abstractmethod
    async def stop_container(self, name: str) -> None:
        """Stop a running container."""
        ...

    @abstractmethod
    async def remove_container(self, name: str) -> None:
        """Forcibly remove a container.

        Removing a container that does not exist is not an error.
        """
        ...

    # =========================================================================
    # Volumes and Networks
    # =========================================================================

    @abstractmethod
    async def has_volume(self, name: str) -> bool:
        """Check if a named volume exists."""
        ...

    @abstractmethod
    async def create_volume(self, name: str) -> None:
        """Create a named volume."""
        ...

    @abstractmethod
    async def remove_volume(self, name: str) -> None:
        """Remove a named volume."""
        ...

    @abstractmethod
    async def ensure_network(self, name: str) -> None:
        """Create a network unless it already exists."""
        ...

    # =========================================================================
    # Exec
    # =========================================================================

    @abstractmethod
    async def exec_capture(self, name: str, spec: ExecSpec) -> CommandResult:
        """Run a process in a container and capture its text output.

        Args:
            name: Container name
            spec: Process to execute

        Returns:
            CommandResult with stdout, stderr and exit code
        """
        ...

    @abstractmethod
    async def exec_stream(
        self,
        name: str,
        spec: ExecSpec,
        *,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> int:
        """Run a process in a container, streaming binary I/O.

        The process's output streams are kept apart: stdout bytes only
        reach ``stdout`` and stderr bytes only reach ``stderr``. A ``None``
        sink discards that stream. Returns once both output streams have
        ended and the process has exited.

        Args:
            name: Container name
            spec: Process to execute
            stdin: Source piped into the process, or None for no input
            stdout: Sink for standard output
            stderr: Sink for standard error

        Returns:
            The process exit code
        """
        ...

    @abstractmethod
    async def exec_interactive(self, name: str, spec: ExecSpec) -> int:
        """Run a process attached to the operator's terminal.

        Returns:
            The process exit code
        """
        ...

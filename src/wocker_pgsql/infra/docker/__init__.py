"""Container runtime abstraction layer.

This module provides a clean abstraction over container operations,
backed by the docker CLI.

Example:
    from wocker_pgsql.infra.docker import DockerCliController, run_sync

    controller = DockerCliController()
    info = run_sync(controller.get_container("pgsql-default.ws"))
"""

from .cli_controller import DockerCliController
from .controller import (
    CommandResult,
    ContainerController,
    ContainerInfo,
    ContainerSpec,
    ExecSpec,
)
from .helpers import get_container_controller
from .runner import CommandRunner
from .utils import run_sync

__all__ = [
    # Controller classes
    "ContainerController",
    "DockerCliController",
    "CommandRunner",
    # Data classes
    "CommandResult",
    "ContainerInfo",
    "ContainerSpec",
    "ExecSpec",
    # Utilities
    "get_container_controller",
    "run_sync",
]

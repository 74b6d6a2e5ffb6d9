from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from wocker_pgsql.infra.docker.controller import ContainerController


@lru_cache(maxsize=1)
def get_container_controller() -> ContainerController:
    """Get the process-wide container controller.

    Returns:
        A DockerCliController instance
    """
    from wocker_pgsql.infra.docker.cli_controller import DockerCliController

    return DockerCliController()

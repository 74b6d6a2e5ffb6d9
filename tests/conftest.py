"""Shared fixtures: an in-memory container runtime and isolated settings."""

import os
from io import StringIO
from pathlib import Path
from typing import BinaryIO
from unittest.mock import Mock

import pytest
from rich.console import Console

# Keep a developer's own configuration out of the tests
os.environ["WOCKER_PGSQL_CONFIG"] = "/nonexistent/wocker-pgsql.yaml"

from wocker_pgsql.cli.context import CLIContext, build_cli_context  # noqa: E402
from wocker_pgsql.cli.shared.console import CLIConsole  # noqa: E402
from wocker_pgsql.config import PgsqlSettings  # noqa: E402
from wocker_pgsql.core.errors import ContainerRuntimeError  # noqa: E402
from wocker_pgsql.core.service import Service  # noqa: E402
from wocker_pgsql.core.store import JsonRegistryStore  # noqa: E402
from wocker_pgsql.infra.docker.controller import (  # noqa: E402
    CommandResult,
    ContainerController,
    ContainerInfo,
    ContainerSpec,
    ExecSpec,
)


class FakeContainerController(ContainerController):
    """In-memory container runtime.

    Containers, volumes and networks are plain collections. Exec calls are
    recorded and answer with configurable exit codes and output.
    """

    def __init__(self) -> None:
        self.containers: dict[str, ContainerInfo] = {}
        self.specs: dict[str, ContainerSpec] = {}
        self.volumes: set[str] = set()
        self.networks: set[str] = set()
        self.created: list[str] = []
        self.removed: list[str] = []
        self.execs: list[tuple[str, ExecSpec]] = []
        self.capture_results: dict[str, CommandResult] = {}
        self.stream_stdout = b""
        self.stream_stderr = b""
        self.stream_exit_code = 0
        self.streamed_input: bytes | None = None
        self.interactive_exit_code = 0

    def add_container(self, name: str, *, running: bool = True) -> None:
        status = "running" if running else "exited"
        self.containers[name] = ContainerInfo(name=name, running=running, status=status)

    async def get_container(self, name: str) -> ContainerInfo | None:
        info = self.containers.get(name)
        if info is None:
            return None
        return ContainerInfo(name=info.name, running=info.running, status=info.status)

    async def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        if spec.name in self.containers:
            raise ContainerRuntimeError(f"Failed to create container {spec.name}")
        self.specs[spec.name] = spec
        self.created.append(spec.name)
        self.containers[spec.name] = ContainerInfo(
            name=spec.name, running=False, status="created"
        )
        return ContainerInfo(name=spec.name, running=False, status="created")

    async def start_container(self, name: str) -> None:
        if name not in self.containers:
            raise ContainerRuntimeError(f"Failed to start {name}")
        self.containers[name].running = True
        self.containers[name].status = "running"

    async def stop_container(self, name: str) -> None:
        if name not in self.containers:
            raise ContainerRuntimeError(f"Failed to stop {name}")
        self.containers[name].running = False
        self.containers[name].status = "exited"

    async def remove_container(self, name: str) -> None:
        if self.containers.pop(name, None) is not None:
            self.removed.append(name)

    async def has_volume(self, name: str) -> bool:
        return name in self.volumes

    async def create_volume(self, name: str) -> None:
        self.volumes.add(name)

    async def remove_volume(self, name: str) -> None:
        self.volumes.discard(name)

    async def ensure_network(self, name: str) -> None:
        self.networks.add(name)

    async def exec_capture(self, name: str, spec: ExecSpec) -> CommandResult:
        self.execs.append((name, spec))
        return self.capture_results.get(spec.cmd[0], CommandResult(success=True))

    async def exec_stream(
        self,
        name: str,
        spec: ExecSpec,
        *,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> int:
        self.execs.append((name, spec))
        if stdin is not None:
            self.streamed_input = stdin.read()
        if stdout is not None:
            stdout.write(self.stream_stdout)
        if stderr is not None:
            stderr.write(self.stream_stderr)
        return self.stream_exit_code

    async def exec_interactive(self, name: str, spec: ExecSpec) -> int:
        self.execs.append((name, spec))
        return self.interactive_exit_code


@pytest.fixture
def fake_controller() -> FakeContainerController:
    return FakeContainerController()


@pytest.fixture
def settings(tmp_path: Path) -> PgsqlSettings:
    """Settings rooted in a temporary workspace data directory."""
    return PgsqlSettings(data_dir=tmp_path / "workspace")


@pytest.fixture
def store(settings: PgsqlSettings) -> JsonRegistryStore:
    return JsonRegistryStore(settings.paths.registry_file)


@pytest.fixture
def mock_console() -> Mock:
    """Console double; prompts must be configured by each test."""
    console = Mock(spec=CLIConsole)
    console.confirm_action.return_value = True
    console.prompt_confirm.return_value = False
    return console


@pytest.fixture
def cli_context(
    settings: PgsqlSettings,
    fake_controller: FakeContainerController,
    mock_console: Mock,
) -> CLIContext:
    return build_cli_context(
        settings, cli_console=mock_console, controller=fake_controller
    )


@pytest.fixture
def recording_console() -> CLIConsole:
    """A real CLIConsole that renders into a buffer."""
    return CLIConsole(Console(file=StringIO(), width=200, color_system=None))


def make_service(name: str = "default", **values: object) -> Service:
    """Build a local service with test credentials."""
    values.setdefault("user", "app")
    values.setdefault("password", "secret")
    return Service(name=name, **values)


@pytest.fixture
def service_factory():
    return make_service

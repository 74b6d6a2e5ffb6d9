"""Docker CLI implementation of ContainerController.

Uses subprocess calls to ``docker`` for all operations.
"""

from __future__ import annotations

import asyncio
import json
from typing import BinaryIO

from loguru import logger

from wocker_pgsql.core.errors import ContainerRuntimeError

from .controller import (
    CommandResult,
    ContainerController,
    ContainerInfo,
    ContainerSpec,
    ExecSpec,
)
from .runner import CommandRunner

_NOT_FOUND_MARKERS = ("no such container", "no such object", "not found")


def _is_not_found(result: CommandResult) -> bool:
    stderr = result.stderr.lower()
    return any(marker in stderr for marker in _NOT_FOUND_MARKERS)


def _env_flags(env: dict[str, str]) -> list[str]:
    """Forward environment variables by name only.

    Values travel through the docker client's own environment, keeping
    passwords off the command line.
    """
    flags: list[str] = []
    for key in env:
        flags.extend(["-e", key])
    return flags


class DockerCliController(ContainerController):
    """Container controller using docker CLI subprocess calls.

    All methods are async but internally use asyncio.to_thread()
    to run blocking subprocess calls without blocking the event loop.
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or CommandRunner()

    async def _run_docker(
        self, args: list[str], *, env: dict[str, str] | None = None
    ) -> CommandResult:
        """Run a docker command asynchronously.

        Args:
            args: Command arguments (without 'docker' prefix)
            env: Extra environment forwarded to the docker client

        Returns:
            CommandResult with execution results
        """
        logger.debug(f"docker {' '.join(args)}")
        return await asyncio.to_thread(self._runner.run, ["docker", *args], env=env)

    @staticmethod
    def _check(result: CommandResult, action: str) -> CommandResult:
        if not result.success:
            raise ContainerRuntimeError(f"Failed to {action}", result.stderr.strip())
        return result

    # =========================================================================
    # Containers
    # =========================================================================

    async def get_container(self, name: str) -> ContainerInfo | None:
        """Inspect a container's state."""
        result = await self._run_docker(
            ["container", "inspect", "--format", "{{json .State}}", name]
        )
        if not result.success:
            if _is_not_found(result):
                return None
            self._check(result, f"inspect container {name}")

        state = json.loads(result.stdout.strip() or "{}")
        return ContainerInfo(
            name=name,
            running=bool(state.get("Running")),
            status=str(state.get("Status", "")),
        )

    async def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        """Create a container from a spec."""
        args = ["create", "--name", spec.name]
        if spec.restart:
            args.extend(["--restart", spec.restart])
        if spec.network_mode:
            args.extend(["--network", spec.network_mode])
        elif spec.network:
            args.extend(["--network", spec.network])
        if spec.user:
            args.extend(["--user", spec.user])
        if spec.tty:
            args.append("--tty")
        args.extend(_env_flags(spec.env))
        for volume in spec.volumes:
            args.extend(["--volume", volume])
        for port in spec.ports:
            args.extend(["--publish", port])

        entrypoint_args: list[str] = []
        if spec.entrypoint:
            args.extend(["--entrypoint", spec.entrypoint[0]])
            entrypoint_args = spec.entrypoint[1:]

        args.append(spec.image)
        args.extend(entrypoint_args)
        args.extend(spec.command or [])

        self._check(
            await self._run_docker(args, env=spec.env),
            f"create container {spec.name}",
        )
        return ContainerInfo(name=spec.name, running=False, status="created")

    async def start_container(self, name: str) -> None:
        self._check(await self._run_docker(["start", name]), f"start {name}")

    async def stop_container(self, name: str) -> None:
        self._check(await self._run_docker(["stop", name]), f"stop {name}")

    async def remove_container(self, name: str) -> None:
        """Forcibly remove a container, ignoring missing ones."""
        result = await self._run_docker(["rm", "--force", name])
        if not result.success and not _is_not_found(result):
            self._check(result, f"remove container {name}")

    # =========================================================================
    # Volumes and Networks
    # =========================================================================

    async def has_volume(self, name: str) -> bool:
        result = await self._run_docker(["volume", "inspect", name])
        return result.success

    async def create_volume(self, name: str) -> None:
        self._check(
            await self._run_docker(["volume", "create", name]),
            f"create volume {name}",
        )

    async def remove_volume(self, name: str) -> None:
        self._check(
            await self._run_docker(["volume", "rm", name]),
            f"remove volume {name}",
        )

    async def ensure_network(self, name: str) -> None:
        result = await self._run_docker(["network", "inspect", name])
        if result.success:
            return
        self._check(
            await self._run_docker(["network", "create", name]),
            f"create network {name}",
        )

    # =========================================================================
    # Exec
    # =========================================================================

    @staticmethod
    def _exec_args(name: str, spec: ExecSpec, flags: list[str]) -> list[str]:
        return ["exec", *flags, *_env_flags(spec.env), name, *spec.cmd]

    async def exec_capture(self, name: str, spec: ExecSpec) -> CommandResult:
        return await self._run_docker(
            self._exec_args(name, spec, []),
            env=spec.env,
        )

    async def exec_stream(
        self,
        name: str,
        spec: ExecSpec,
        *,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> int:
        """Run a process with stdout and stderr demultiplexed to separate sinks.

        Without a TTY the docker client keeps the container's output
        channels apart, so each sink only ever sees its own stream.
        """
        flags = ["--interactive"] if stdin is not None else []
        cmd = ["docker", *self._exec_args(name, spec, flags)]
        logger.debug(" ".join(cmd))
        return await asyncio.to_thread(
            self._runner.run_piped,
            cmd,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            env=spec.env,
        )

    async def exec_interactive(self, name: str, spec: ExecSpec) -> int:
        cmd = ["docker", *self._exec_args(name, spec, ["--interactive", "--tty"])]
        logger.debug(" ".join(cmd))
        return await asyncio.to_thread(
            self._runner.run_interactive, cmd, env=spec.env
        )

"""Command runner for executing docker CLI commands.

This module provides the subprocess layer used by ``DockerCliController``:
captured text commands, binary streaming with separated output channels,
and terminal-attached commands.
"""

from __future__ import annotations

import os
import subprocess
import threading
from collections.abc import Mapping, Sequence
from typing import IO, BinaryIO

from loguru import logger

from .controller import CommandResult

CHUNK_SIZE = 64 * 1024


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Extra environment variables are merged over the current environment so
    secrets can be forwarded by name (``docker exec -e PGPASSWORD``) instead
    of appearing on the command line.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    @staticmethod
    def _env(extra: Mapping[str, str] | None) -> dict[str, str] | None:
        if not extra:
            return None
        return {**os.environ, **extra}

    def run(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Execute a command and return its captured text output.

        Args:
            cmd: Command and arguments as a sequence
            env: Extra environment variables for the child process

        Returns:
            CommandResult with success status, output, and return code
        """
        result = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            env=self._env(env),
        )
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_piped(
        self,
        cmd: Sequence[str],
        *,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Execute a command streaming binary data through its pipes.

        stdout and stderr are read on separate threads and copied chunk by
        chunk to their own sinks, so neither channel can block the other
        and no bytes are interleaved. A ``None`` sink drains and discards
        the channel. ``stdin`` is copied into the process and closed at EOF;
        a process that exits before consuming all input is not an error
        here, its exit code tells the caller what happened.

        Args:
            cmd: Command and arguments
            stdin: Source for the process's standard input
            stdout: Sink for standard output
            stderr: Sink for standard error
            env: Extra environment variables for the child process

        Returns:
            The process exit code
        """
        process = subprocess.Popen(
            list(cmd),
            stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=self._env(env),
        )
        errors: list[Exception] = []

        def _pump(source: IO[bytes], sink: BinaryIO | None) -> None:
            try:
                read = source.read1  # type: ignore[attr-defined]
                while chunk := read(self.chunk_size):
                    if sink is not None:
                        sink.write(chunk)
                if sink is not None:
                    sink.flush()
            except Exception as e:
                errors.append(e)
            finally:
                source.close()

        def _feed(source: BinaryIO, sink: IO[bytes]) -> None:
            try:
                while chunk := source.read(self.chunk_size):
                    sink.write(chunk)
            except BrokenPipeError:
                logger.debug("Process closed its input before the end of the stream")
            except Exception as e:
                errors.append(e)
            finally:
                try:
                    sink.close()
                except BrokenPipeError:
                    pass

        assert process.stdout is not None and process.stderr is not None
        threads = [
            threading.Thread(target=_pump, args=(process.stdout, stdout), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, stderr), daemon=True),
        ]
        if stdin is not None:
            assert process.stdin is not None
            threads.append(
                threading.Thread(target=_feed, args=(stdin, process.stdin), daemon=True)
            )

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        returncode = process.wait()
        if errors:
            raise errors[0]
        return returncode

    def run_interactive(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Execute a command attached to the current terminal."""
        return subprocess.run(list(cmd), env=self._env(env)).returncode

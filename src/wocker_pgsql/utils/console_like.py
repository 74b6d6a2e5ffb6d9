"""Operator output seam shared by infrastructure classes."""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from rich.console import ConsoleRenderable


class ConsoleLike(Protocol):
    """What the reconciler, admin federation and backup pipe print through."""

    def print(self, msg: ConsoleRenderable | str | None = None) -> None: ...

    def info(self, msg: str) -> None: ...

    def ok(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...


class LoggerConsole:
    """Routes operator messages to loguru when no CLI console is attached."""

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        if msg is not None:
            logger.info(str(msg))

    def info(self, msg: str) -> None:
        logger.info(msg)

    def ok(self, msg: str) -> None:
        logger.success(msg)

    def warn(self, msg: str) -> None:
        logger.warning(msg)

    def error(self, msg: str) -> None:
        logger.error(msg)


def coalesce_console(console: ConsoleLike | None) -> ConsoleLike:
    return console if console is not None else LoggerConsole()

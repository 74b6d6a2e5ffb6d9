"""Error handling shared by every command."""

from collections.abc import Callable
from functools import wraps

import typer
from loguru import logger

from wocker_pgsql.cli.shared.console import console
from wocker_pgsql.core.errors import PgsqlError


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Render plugin errors on the console and exit non-zero.

    Errors outside the ``PgsqlError`` hierarchy are bugs and propagate
    with their traceback. Ctrl-C exits with the conventional 130.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except PgsqlError as e:
            logger.debug(f"{func.__name__} failed: {type(e).__name__}: {e.message}")
            console.handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper

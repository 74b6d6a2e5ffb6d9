"""Logging setup for the CLI."""

import sys

from loguru import logger


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    """Route loguru output to stderr at the requested level.

    Args:
        level: Minimum level name (e.g. "INFO")
        verbose: Force DEBUG regardless of ``level``
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}",
    )

"""Command implementations registered on the main CLI application."""

from . import admin, database, service

__all__ = ["admin", "database", "service"]

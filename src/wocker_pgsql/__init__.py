"""Local PostgreSQL service manager for the wocker workspace."""

__version__ = "0.4.0"

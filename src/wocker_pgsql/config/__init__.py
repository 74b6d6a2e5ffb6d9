"""Plugin settings, settings loading and logging setup."""

from .loader import load_settings, substitute_env_vars
from .logging_setup import configure_logging
from .settings import PgsqlSettings

__all__ = ["PgsqlSettings", "configure_logging", "load_settings", "substitute_env_vars"]

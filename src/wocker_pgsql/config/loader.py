"""Settings loading with YAML files and environment overrides."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from wocker_pgsql.config.settings import PgsqlSettings

CONFIG_ENV_VAR = "WOCKER_PGSQL_CONFIG"
ENV_PREFIX = "WOCKER_PGSQL_"
DEFAULT_CONFIG_PATH = Path("~/.config/wocker-pgsql/config.yaml")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(
                    f"Required environment variable {var_name}: {error_msg}"
                )
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def _env_overrides() -> dict[str, str]:
    """Collect ``WOCKER_PGSQL_<FIELD>`` overrides for known settings fields."""
    overrides: dict[str, str] = {}
    for field_name in PgsqlSettings.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    return overrides


def resolve_config_path(file_path: Path | None = None) -> Path:
    if file_path is not None:
        return file_path
    return Path(os.environ.get(CONFIG_ENV_VAR, str(DEFAULT_CONFIG_PATH))).expanduser()


def load_settings(file_path: Path | None = None) -> PgsqlSettings:
    """
    Load plugin settings.

    Values are layered: field defaults, then the optional YAML file (its
    top-level ``config:`` section, with ``${VAR}`` placeholders substituted),
    then ``WOCKER_PGSQL_<FIELD>`` environment variables.

    Args:
        file_path: YAML file to read (default: $WOCKER_PGSQL_CONFIG or
                   ~/.config/wocker-pgsql/config.yaml). A missing file is fine.

    Returns:
        Validated PgsqlSettings

    Raises:
        ValueError: If the YAML is malformed, lacks a ``config`` key, refers to
                    missing environment variables, or fails validation
    """
    path = resolve_config_path(file_path)
    values: dict[str, Any] = {}

    if path.exists():
        logger.debug(f"Loading settings from {path}")
        content = substitute_env_vars(path.read_text(encoding="utf-8"))
        try:
            loaded = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML: {e}") from e

        if not isinstance(loaded, dict) or "config" not in loaded:
            raise ValueError("Invalid YAML structure: missing 'config' key")
        values.update(loaded["config"] or {})
    else:
        logger.debug(f"No settings file at {path}, using defaults")

    overrides = _env_overrides()
    if overrides:
        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
        values.update(overrides)

    try:
        return PgsqlSettings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

"""Versioned migrations for the persisted registry document.

Older plugin releases stored admin settings as flat ``admin*`` keys and
image references as separate ``imageName``/``imageVersion`` fields, and had
no ``storage`` field at all. ``migrate`` lifts any such document to the
current layout in explicit, ordered steps.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from wocker_pgsql.core.errors import ServiceValidationError

CURRENT_SCHEMA_VERSION = 2

_LEGACY_ADMIN_KEYS = {
    "adminHost": "host",
    "adminEmail": "email",
    "adminPassword": "password",
    "adminSkipPassword": "skipPassword",
}


def _v0_to_v1(data: dict[str, Any]) -> dict[str, Any]:
    """Fold flat admin keys into the nested ``admin`` object."""
    admin = dict(data.get("admin") or {})
    for legacy_key, key in _LEGACY_ADMIN_KEYS.items():
        if legacy_key in data:
            value = data.pop(legacy_key)
            if admin.get(key) is None:
                admin[key] = value
    if admin:
        admin.setdefault("enabled", True)
        data["admin"] = admin
    return data


def _v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    """Fold split image fields into ``image`` and default ``storage``."""
    services = []
    for raw in data.get("services") or []:
        service = dict(raw)
        image_name = service.pop("imageName", None)
        image_version = service.pop("imageVersion", None)
        if not service.get("image") and (image_name or image_version):
            name = image_name or "postgres"
            service["image"] = f"{name}:{image_version}" if image_version else name
        service.setdefault("storage", "filesystem")
        services.append(service)
    if services:
        data["services"] = services
    return data


MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Bring a raw registry document up to ``CURRENT_SCHEMA_VERSION``.

    Args:
        data: Raw document as read from disk. A missing ``version`` means 0.

    Returns:
        A new document at the current version

    Raises:
        ServiceValidationError: If the document is newer than this release
    """
    data = dict(data)
    version = int(data.pop("version", 0) or 0)

    if version > CURRENT_SCHEMA_VERSION:
        raise ServiceValidationError(
            f"Unsupported registry version {version}",
            f"This release reads registry versions up to {CURRENT_SCHEMA_VERSION}.",
        )

    while version < CURRENT_SCHEMA_VERSION:
        logger.debug(f"Migrating registry from version {version} to {version + 1}")
        data = MIGRATIONS[version](data)
        version += 1

    data["version"] = version
    return data

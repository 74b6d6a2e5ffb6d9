"""JSON file persistence for the service registry."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from wocker_pgsql.core.errors import ServiceValidationError
from wocker_pgsql.core.registry import Registry
from wocker_pgsql.core.schema import CURRENT_SCHEMA_VERSION, migrate


class JsonRegistryStore:
    """Loads the registry lazily and writes it back as a whole.

    The registry is read from disk on first access and cached for the rest
    of the process. ``persist`` rewrites the complete document; concurrent
    writers are not coordinated.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._registry: Registry | None = None

    @property
    def registry(self) -> Registry:
        if self._registry is None:
            self._registry = self.load()
        return self._registry

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"No registry at {self.path}, starting empty")
            return {}
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ServiceValidationError(
                f"Registry file {self.path} is not valid JSON", str(e)
            ) from e
        if not isinstance(loaded, dict):
            raise ServiceValidationError(
                f"Registry file {self.path} must contain a JSON object"
            )
        return loaded

    def load(self) -> Registry:
        """Read, migrate and validate the registry document.

        Raises:
            ServiceValidationError: If the document cannot be parsed or validated
        """
        data = migrate(self._read())

        default = data.get("default")
        names = {item.get("name") for item in data.get("services") or []}
        if default and default not in names:
            logger.warning(f"Default service '{default}' no longer exists, clearing it")
            data.pop("default")

        try:
            return Registry.from_dict(data, persistence=self)
        except ValidationError as e:
            raise ServiceValidationError(
                f"Invalid registry file {self.path}", str(e)
            ) from e

    def persist(self, registry: Registry) -> None:
        """Write the registry document.

        The document goes to a temporary file next to the registry which then
        replaces it, so an interrupted write leaves the previous file intact.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"version": CURRENT_SCHEMA_VERSION, **registry.to_dict()}
        content = json.dumps(document, indent=4) + "\n"

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Registry saved to {self.path}")

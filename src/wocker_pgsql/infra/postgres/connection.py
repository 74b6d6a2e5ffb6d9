"""Direct connections to external PostgreSQL services.

Local services are reached through ``docker exec``; external services are
reachable from the workstation and are queried with psycopg2.
"""

from __future__ import annotations

from typing import Any

import psycopg2
import psycopg2.extras

from wocker_pgsql.core.errors import ContainerRuntimeError
from wocker_pgsql.core.service import Service
from wocker_pgsql.infra.constants import DEFAULT_CONSTANTS


class ExternalConnection:
    """Short-lived psycopg2 connection to an external service."""

    def __init__(self, service: Service, connect_timeout: int = 5) -> None:
        self._service = service
        self._connect_timeout = connect_timeout

    def get_dsn(self, database: str | None = None) -> dict[str, Any]:
        """Get connection parameters for psycopg2.connect().

        Args:
            database: Override database name

        Returns:
            Dict of connection parameters
        """
        s = self._service
        return {
            "host": s.host,
            "port": int(s.port or DEFAULT_CONSTANTS.POSTGRES_PORT),
            "dbname": database or DEFAULT_CONSTANTS.MAINTENANCE_DB,
            "user": s.user or "",
            "password": s.password or "",
            "connect_timeout": self._connect_timeout,
        }

    def execute(
        self,
        sql: str,
        params: tuple[Any, ...] | None = None,
        database: str | None = None,
    ) -> list[dict[str, Any]]:
        """Execute SQL and return results as list of dicts.

        Raises:
            ContainerRuntimeError: If the service cannot be reached
        """
        try:
            conn = psycopg2.connect(**self.get_dsn(database))
        except psycopg2.OperationalError as e:
            raise ContainerRuntimeError(
                f"Can't connect to {self._service.host}", str(e).strip()
            ) from e

        try:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(sql, params)
                if cur.description:
                    return [dict(row) for row in cur.fetchall()]
                return []
        finally:
            conn.close()

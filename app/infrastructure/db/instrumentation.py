"""
===============================================================================
CRC CARD — infrastructure/db/instrumentation.py
===============================================================================

Clases:
  - TimedConnection (Proxy)
  - InstrumentedConnectionPool (Facade/Proxy)

Responsabilidades:
  - Medir duración de conn.execute(...) sin tocar repositorios.
  - Loguear slow queries (solo el tipo de statement, nunca el SQL).
  - Limpiar la conexión al adquirirla (rollback de transacciones abortadas).

Colaboradores:
  - crosscutting.logger / crosscutting.metrics
  - psycopg_pool.ConnectionPool (pool real)
===============================================================================
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from ...crosscutting.logger import logger
from ...crosscutting.metrics import observe_db_query_duration
from .errors import DatabaseConnectionError


def _statement_kind(sql: Any) -> str:
    """Primer keyword del statement (SELECT/INSERT/...), baja cardinalidad."""
    text = str(sql).lstrip()
    if not text:
        return "UNKNOWN"
    return text.split(None, 1)[0].upper()


class TimedConnection:
    """
    Proxy de conexión: intercepta execute para medir tiempo.

    Delega todo lo demás al conn real con __getattr__.
    """

    def __init__(self, inner_conn, *, slow_query_seconds: float) -> None:
        self._conn = inner_conn
        self._slow = slow_query_seconds

    def execute(self, sql, *args, **kwargs):
        start = time.perf_counter()
        try:
            return self._conn.execute(sql, *args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start
            kind = _statement_kind(sql)
            observe_db_query_duration(kind, elapsed)
            if elapsed >= self._slow:
                logger.warning(
                    "DB query lenta",
                    extra={"kind": kind, "seconds": round(elapsed, 4)},
                )

    def __getattr__(self, item: str):
        return getattr(self._conn, item)


class InstrumentedConnectionPool:
    """
    Facade del pool real.

    Los repositorios siguen haciendo `with pool.connection() as conn:` pero
    reciben un TimedConnection.
    """

    def __init__(self, inner_pool, *, slow_query_seconds: float = 0.25) -> None:
        self._pool = inner_pool
        self._slow_seconds = slow_query_seconds

    @contextmanager
    def connection(self, *args, **kwargs) -> Iterator[TimedConnection]:
        with self._pool.connection(*args, **kwargs) as conn:
            try:
                # Estado limpio si el uso previo dejó una transacción abortada.
                conn.rollback()
            except Exception as exc:
                raise DatabaseConnectionError(
                    "No se pudo adquirir/validar conexión DB."
                ) from exc
            yield TimedConnection(conn, slow_query_seconds=self._slow_seconds)

    def close(self) -> None:
        self._pool.close()

    # Delegación del resto del API del pool.
    def __getattr__(self, item: str):
        return getattr(self._pool, item)

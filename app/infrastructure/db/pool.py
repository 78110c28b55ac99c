"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL (singleton)

Responsabilidades:
  - Inicializar, exponer y cerrar el pool de conexiones.
  - Configurar cada conexión nueva: statement_timeout + zona horaria UTC.
  - Devolver un pool instrumentado (observabilidad sin tocar repos).

Colaboradores:
  - psycopg_pool.ConnectionPool
  - infrastructure/db/instrumentation.InstrumentedConnectionPool
  - api/main.py (lifespan) y worker/worker.py

Principios:
  - Fail-fast (doble init, uso sin init)
  - Encapsulación (pool global único)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError
from .instrumentation import InstrumentedConnectionPool

_pool: Optional[InstrumentedConnectionPool] = None
_pool_lock = threading.Lock()


def _connection_configurer(statement_timeout_ms: int) -> Callable:
    """Callback `configure` del pool (se ejecuta al crear cada conexión)."""

    def _configure(conn) -> None:
        # Timestamps de documentos/actividad se comparan en UTC.
        conn.execute("SET TIME ZONE 'UTC'")
        # Guardrail contra queries colgadas.
        if statement_timeout_ms > 0:
            conn.execute(f"SET statement_timeout = {int(statement_timeout_ms)}")
        conn.commit()

    return _configure


def init_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    *,
    statement_timeout_ms: int = 30000,
    slow_query_seconds: float = 0.25,
) -> InstrumentedConnectionPool:
    """Inicializa el pool (una vez por proceso) y lo devuelve instrumentado."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("El pool ya fue inicializado.")

        # Lazy import: módulos importables sin driver instalado (tests unitarios).
        from psycopg_pool import ConnectionPool

        logger.info(
            "Inicializando pool DB",
            extra={
                "min_size": min_size,
                "max_size": max_size,
                "statement_timeout_ms": statement_timeout_ms,
            },
        )

        real_pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_connection_configurer(statement_timeout_ms),
            open=True,
        )
        _pool = InstrumentedConnectionPool(
            real_pool, slow_query_seconds=slow_query_seconds
        )

        logger.info("Pool DB inicializado")
        return _pool


def get_pool() -> InstrumentedConnectionPool:
    """Retorna el pool instrumentado singleton."""
    if _pool is None:
        raise PoolNotInitializedError(
            "Pool no inicializado. Llamar init_pool() primero."
        )
    return _pool


def close_pool() -> None:
    """Cierra el pool (idempotente)."""
    global _pool

    with _pool_lock:
        if _pool is None:
            return
        logger.info("Cerrando pool DB")
        try:
            _pool.close()
        finally:
            _pool = None
        logger.info("Pool DB cerrado")


def reset_pool() -> None:
    """Reset para tests: descarta el singleton aunque close() falle."""
    global _pool

    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        try:
            pool.close()
        except Exception:
            logger.warning("Fallo al cerrar pool durante reset", exc_info=True)

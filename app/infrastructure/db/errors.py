"""
===============================================================================
CRC CARD — infrastructure/db/errors.py
===============================================================================

Componente:
  Errores tipados del Pool/Conectividad

Responsabilidades:
  - Evitar RuntimeError genéricos en el ciclo de vida del pool.
  - Los repositorios los envuelven en crosscutting.exceptions.DatabaseError.
===============================================================================
"""


class DatabasePoolError(Exception):
    """Base de errores de pool de base de datos."""


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado dos veces en el mismo proceso."""


class PoolNotInitializedError(DatabasePoolError):
    """get_pool() llamado antes de init_pool()."""


class DatabaseConnectionError(DatabasePoolError):
    """No se pudo adquirir o limpiar una conexión del pool."""

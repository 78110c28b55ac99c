"""
============================================================
TARJETA CRC
============================================================
Class: app.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.
- Mantener una API estable para la capa de aplicación (use cases).

Collaborators:
- Repositorios Postgres (SQL crudo parametrizado)
- Repositorios InMemory (testing / fallback)
============================================================
"""

# ---------------------------
# In-memory implementations
# Usados para tests unitarios rápidos o entornos volátiles.
# No persisten datos tras reiniciar la app.
# ---------------------------
from .in_memory import (
    InMemoryActivityRepository,
    InMemoryDocumentRepository,
    InMemoryUserRepository,
)

# ---------------------------
# Postgres implementations
# Implementaciones de producción con persistencia real.
# ---------------------------
from .postgres import (
    PostgresActivityRepository,
    PostgresDocumentRepository,
    PostgresUserRepository,
)

__all__ = [
    # Postgres
    "PostgresActivityRepository",
    "PostgresDocumentRepository",
    "PostgresUserRepository",
    # In-memory
    "InMemoryActivityRepository",
    "InMemoryDocumentRepository",
    "InMemoryUserRepository",
]

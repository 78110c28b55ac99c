"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Mantener estable el "surface area" del dominio.
    - Evitar imports profundos y acoplamientos innecesarios.

Colaboradores:
    - domain.entities: Entidades (Document, DocumentActivity, ...)
    - domain.workspaces: catálogo de workspaces
    - domain.repositories: Puertos de persistencia
    - domain.services: Puertos de servicios externos
    - domain.value_objects: Objetos de valor (stats, sort, filtros)

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
    - Las políticas (capabilities, workspace_policy, lifecycle, visibility)
      dependen de identity.users: se importan por módulo, no desde aquí.
===============================================================================
"""

from .entities import ActivityAction, Document, DocumentActivity, DocumentStatus
from .repositories import ActivityRepository, DocumentRepository, UserRepository
from .services import ActivityRecorder, FileStoragePort
from .value_objects import (
    ActivityQuery,
    DocumentSort,
    DocumentStats,
    UserStats,
    format_file_size,
)
from .workspaces import WORKSPACE_DEFINITIONS, WorkspaceType

__all__ = [
    # Entities
    "Document",
    "DocumentActivity",
    "DocumentStatus",
    "ActivityAction",
    "WorkspaceType",
    "WORKSPACE_DEFINITIONS",
    # Repository Interfaces (Ports)
    "DocumentRepository",
    "UserRepository",
    "ActivityRepository",
    # Service Interfaces (Ports)
    "FileStoragePort",
    "ActivityRecorder",
    # Value Objects
    "ActivityQuery",
    "DocumentSort",
    "DocumentStats",
    "UserStats",
    "format_file_size",
]

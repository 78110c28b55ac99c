"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Document, DocumentActivity)

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Brindar helpers mínimos (métodos) para mantener invariantes simples.
    - Mantener tipos claros para casos de uso y repositorios.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - domain.lifecycle: decide transiciones de DocumentStatus.
    - application/usecases: construyen/consumen estas entidades.
    - interfaces/api: serializan/retornan DTOs basados en estas entidades.

Principios:
    - Sin dependencias a DB/Redis/FastAPI.
    - Datos + comportamiento mínimo (no "anemia total", pero sin lógica pesada).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from .workspaces import WorkspaceType


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentStatus(str, Enum):
    """Estados del ciclo de vida de un documento."""

    DRAFT = "draft"
    STORED = "stored"
    ARCHIVED = "archived"


@dataclass
class Document:
    """
    Documento del sistema (metadata + estado).

    Importante:
      - El contenido (bytes) vive fuera: storage (storage_key).
      - stored_at / archived_at reflejan el estado actual (ver lifecycle).
    """

    id: UUID
    title: str
    workspace: WorkspaceType
    created_by: UUID
    status: DocumentStatus = DocumentStatus.DRAFT
    description: Optional[str] = None

    # Organización
    tags: List[str] = field(default_factory=list)
    facets: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Metadatos de archivo
    file_name: str = ""
    file_size: int = 0
    mime_type: str = ""
    file_hash: str = ""
    storage_key: Optional[str] = None

    # Auditoría
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    stored_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    @property
    def is_archived(self) -> bool:
        return self.status == DocumentStatus.ARCHIVED

    def is_created_by(self, user_id: UUID) -> bool:
        return self.created_by == user_id


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


class ActivityAction(str, Enum):
    """Acciones registradas en el log de actividad."""

    CREATED = "created"
    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    VIEWED = "viewed"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    ARCHIVED = "archived"
    DELETED = "deleted"


@dataclass
class DocumentActivity:
    """
    Registro append-only de actividad sobre documentos.

    Nota:
      - document_id queda en None si el documento fue eliminado.
      - workspace se desnormaliza para poder filtrar sin JOIN.
    """

    id: UUID
    user_id: Optional[UUID]
    action: ActivityAction
    document_id: Optional[UUID] = None
    workspace: Optional[WorkspaceType] = None
    details: Dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

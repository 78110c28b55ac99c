"""
===============================================================================
TARJETA CRC — schemas/admin.py
===============================================================================

Módulo:
    Schemas HTTP para Admin / Actividad

Responsabilidades:
    - DTOs de response para el log de actividad y el dashboard administrativo.
    - Mantener contratos estables para observabilidad.

Colaboradores:
    - domain.entities.DocumentActivity
    - schemas.documents.DocumentStatsRes
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .documents import DocumentStatsRes


class ActivityRes(BaseModel):
    """Registro de actividad serializable."""

    id: UUID
    document_id: UUID | None = None
    user_id: UUID | None = None
    action: str
    workspace: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime


class ActivitiesRes(BaseModel):
    """Listado paginado simple (offset-based)."""

    activities: list[ActivityRes]
    limit: int
    offset: int
    next_offset: int | None = None


class UserStatsRes(BaseModel):
    total: int
    active: int
    by_role: dict[str, int] = Field(default_factory=dict)
    by_workspace: dict[str, int] = Field(default_factory=dict)


class AdminDashboardRes(BaseModel):
    users: UserStatsRes
    documents: DocumentStatsRes
    workspaces: dict[str, DocumentStatsRes] = Field(default_factory=dict)
    recent_activity: list[ActivityRes] = Field(default_factory=list)
    system_health: str

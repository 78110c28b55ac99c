"""
===============================================================================
TARJETA CRC — schemas/workspaces.py
===============================================================================

Módulo:
    Schemas HTTP para Workspaces

Responsabilidades:
    - DTOs de response para el catálogo de workspaces, su acceso, sus
      facetas y sus estadísticas.
    - Mantener contratos estables y fáciles de versionar.

Colaboradores:
    - domain.workspaces.WorkspaceType
    - schemas.admin.ActivityRes (actividad reciente)
===============================================================================
"""

from __future__ import annotations

from app.domain.workspaces import WorkspaceType
from pydantic import BaseModel, Field

from .admin import ActivityRes


class WorkspaceAccessRes(BaseModel):
    """Resultado del resolver de acceso."""

    workspace: WorkspaceType
    has_access: bool
    permissions: list[str] = Field(default_factory=list)
    reason: str | None = None


class WorkspaceRes(BaseModel):
    id: WorkspaceType
    name: str
    description: str
    access: WorkspaceAccessRes


class WorkspacesListRes(BaseModel):
    workspaces: list[WorkspaceRes]


class FacetDefinitionRes(BaseModel):
    key: str
    label: str
    # R: None => texto libre (sin valores enumerados).
    allowed: list[str] | None = None


class WorkspaceFacetsRes(BaseModel):
    workspace: WorkspaceType
    facets: list[FacetDefinitionRes]


class WorkspaceStatsRes(BaseModel):
    workspace: WorkspaceType
    total_documents: int
    by_status: dict[str, int] = Field(default_factory=dict)
    total_size: int
    total_size_formatted: str
    user_count: int
    recent_activity: list[ActivityRes] = Field(default_factory=list)

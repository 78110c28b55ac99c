"""
===============================================================================
WORKSPACE USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Workspace Use Case Results

Business Goal:
    Modelos de resultado para el catálogo de workspaces, sus estadísticas y
    el acceso del principal.

Why (Context / Intención):
    - Los workspaces son un catálogo estático (no hay alta/baja): los
      resultados combinan definición + acceso resuelto + agregados.
    - Los errores reutilizan DocumentError (resource="Workspace") para que la
      capa HTTP tenga un único mapeo de códigos.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    workspace_results models (module)

Responsibilities:
    - WorkspaceOverview: definición + WorkspaceAccess del principal.
    - WorkspaceStats: documentos por estado, tamaño, usuarios, actividad.

Collaborators:
    - domain.workspaces.WorkspaceDefinition
    - domain.workspace_policy.WorkspaceAccess
    - documents.document_results.DocumentError
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Final, List

from ....domain.entities import DocumentActivity
from ....domain.workspace_policy import WorkspaceAccess
from ....domain.workspaces import WorkspaceDefinition, WorkspaceType
from ..documents.document_results import DocumentError, forbidden

RESOURCE_WORKSPACE: Final[str] = "Workspace"


def workspace_forbidden(reason: str | None) -> DocumentError:
    return forbidden(reason, resource=RESOURCE_WORKSPACE)


@dataclass(frozen=True)
class WorkspaceOverview:
    workspace: WorkspaceType
    definition: WorkspaceDefinition
    access: WorkspaceAccess


@dataclass
class WorkspaceListResult:
    """Siempre devolvemos lista para simplificar consumo en UI/API."""

    workspaces: List[WorkspaceOverview] = field(default_factory=list)
    error: DocumentError | None = None


@dataclass(frozen=True)
class WorkspaceStats:
    workspace: WorkspaceType
    total_documents: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    total_size: int = 0
    user_count: int = 0
    recent_activity: List[DocumentActivity] = field(default_factory=list)


@dataclass
class WorkspaceStatsResult:
    stats: WorkspaceStats | None = None
    error: DocumentError | None = None

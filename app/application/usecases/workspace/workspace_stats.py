"""
===============================================================================
USE CASE: Workspace Stats
===============================================================================

Name:
    Get Workspace Stats Use Case

Business Goal:
    Resumen de un workspace: documentos por estado, tamaño total, cantidad de
    usuarios asignados y últimas actividades.

Why (Context / Intención):
    - Requiere el permiso `view_stats` en el workspace o ser del propio
      workspace (un secretario ve las estadísticas de su área).
    - Las lecturas son independientes entre sí (sólo lectura).

Collaborators:
    - DocumentRepository.document_stats
    - UserRepository.user_stats
    - ActivityRepository.list_activities
===============================================================================
"""

from __future__ import annotations

from typing import Final

from ....crosscutting.metrics import record_permission_denied
from ....domain.repositories import (
    ActivityRepository,
    DocumentRepository,
    UserRepository,
)
from ....domain.value_objects import ActivityQuery
from ....domain.visibility import FieldEquals
from ....domain.workspace_policy import Principal, check_workspace_access
from ....domain.workspaces import WorkspaceType
from .workspace_results import WorkspaceStats, WorkspaceStatsResult, workspace_forbidden

RECENT_ACTIVITY_LIMIT: Final[int] = 5


class GetWorkspaceStatsUseCase:
    def __init__(
        self,
        documents: DocumentRepository,
        users: UserRepository,
        activities: ActivityRepository,
    ) -> None:
        self._documents = documents
        self._users = users
        self._activities = activities

    def execute(
        self, *, principal: Principal, workspace: WorkspaceType
    ) -> WorkspaceStatsResult:
        # ---------------------------------------------------------------------
        # 1) Autorización: view_stats o workspace propio.
        # ---------------------------------------------------------------------
        access = check_workspace_access(principal, workspace)
        if not access.allows("view_stats") and principal.workspace != workspace:
            record_permission_denied("workspace_stats")
            return WorkspaceStatsResult(
                error=workspace_forbidden(
                    access.reason or "Insufficient permissions to view workspace stats"
                )
            )

        # ---------------------------------------------------------------------
        # 2) Agregados.
        # ---------------------------------------------------------------------
        document_stats = self._documents.document_stats(
            FieldEquals("workspace", workspace)
        )
        user_stats = self._users.user_stats()
        recent = self._activities.list_activities(
            ActivityQuery(workspace=workspace), limit=RECENT_ACTIVITY_LIMIT
        )

        return WorkspaceStatsResult(
            stats=WorkspaceStats(
                workspace=workspace,
                total_documents=document_stats.total,
                by_status=dict(document_stats.by_status),
                total_size=document_stats.total_size,
                user_count=user_stats.by_workspace.get(workspace.value, 0),
                recent_activity=recent,
            )
        )

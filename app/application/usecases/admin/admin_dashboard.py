"""
===============================================================================
USE CASE: Admin Dashboard
===============================================================================

Name:
    Get Admin Dashboard Use Case

Business Goal:
    Vista consolidada para administradores: usuarios, documentos, estado por
    workspace, actividad reciente y un indicador de salud del sistema.

Why (Context / Intención):
    - Lecturas independientes y de sólo lectura; no hay transacción.
    - system_health se deriva del ratio de usuarios activos:
        > 0.9 excellent, > 0.7 good, > 0.5 fair, resto poor.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    GetAdminDashboardUseCase

Responsibilities:
    - Verificar rol administrador.
    - Agregar UserStats, DocumentStats global y por workspace, actividad.

Collaborators:
    - UserRepository.user_stats
    - DocumentRepository.document_stats
    - ActivityRepository.list_activities
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Final, List

from ....crosscutting.metrics import record_permission_denied
from ....domain.entities import DocumentActivity
from ....domain.repositories import (
    ActivityRepository,
    DocumentRepository,
    UserRepository,
)
from ....domain.value_objects import ActivityQuery, DocumentStats, UserStats
from ....domain.visibility import FieldEquals, MatchAll
from ....domain.workspace_policy import Principal
from ....domain.workspaces import ALL_WORKSPACES
from ....identity.users import UserRole, parse_role
from ..documents.document_results import DocumentError, forbidden

RECENT_ACTIVITY_LIMIT: Final[int] = 10


def system_health(user_stats: UserStats) -> str:
    """Salud según ratio de usuarios activos (sin usuarios => poor)."""
    if user_stats.total <= 0:
        return "poor"
    ratio = user_stats.active / user_stats.total
    if ratio > 0.9:
        return "excellent"
    if ratio > 0.7:
        return "good"
    if ratio > 0.5:
        return "fair"
    return "poor"


@dataclass(frozen=True)
class AdminDashboard:
    users: UserStats
    documents: DocumentStats
    workspaces: Dict[str, DocumentStats] = field(default_factory=dict)
    recent_activity: List[DocumentActivity] = field(default_factory=list)
    system_health: str = "poor"


@dataclass
class AdminDashboardResult:
    dashboard: AdminDashboard | None = None
    error: DocumentError | None = None


class GetAdminDashboardUseCase:
    def __init__(
        self,
        documents: DocumentRepository,
        users: UserRepository,
        activities: ActivityRepository,
    ) -> None:
        self._documents = documents
        self._users = users
        self._activities = activities

    def execute(self, *, principal: Principal) -> AdminDashboardResult:
        if parse_role(principal.role) != UserRole.ADMINISTRADOR:
            record_permission_denied("admin_dashboard")
            return AdminDashboardResult(
                error=forbidden("Only administrators can view the dashboard", resource="Admin")
            )

        user_stats = self._users.user_stats()
        per_workspace = {
            workspace.value: self._documents.document_stats(
                FieldEquals("workspace", workspace)
            )
            for workspace in ALL_WORKSPACES
        }

        return AdminDashboardResult(
            dashboard=AdminDashboard(
                users=user_stats,
                documents=self._documents.document_stats(MatchAll()),
                workspaces=per_workspace,
                recent_activity=self._activities.list_activities(
                    ActivityQuery(), limit=RECENT_ACTIVITY_LIMIT
                ),
                system_health=system_health(user_stats),
            )
        )

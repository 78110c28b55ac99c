"""
===============================================================================
USE CASE: List Activities (log de actividad de documentos)
===============================================================================

Name:
    List Activities Use Case

Business Goal:
    Consultar el log append-only de actividad con filtros por documento,
    usuario, acción, workspace y rango de fechas.

Why (Context / Intención):
    - Administrador y roles con auditoría (presidencia) ven toda la actividad.
    - El resto sólo ve su propia actividad: el filtro user_id se fuerza al
      principal, sin importar lo que pida el cliente.

Collaborators:
    - ActivityRepository.list_activities
    - domain.workspace_policy.can_perform_admin_action("view_audit")
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final, List

from ....crosscutting.pagination import clamp_limit
from ....domain.entities import DocumentActivity
from ....domain.repositories import ActivityRepository
from ....domain.value_objects import ActivityQuery
from ....domain.workspace_policy import Principal, can_perform_admin_action
from ..documents.document_results import DocumentError

DEFAULT_LIMIT: Final[int] = 50
MAX_LIMIT: Final[int] = 200


@dataclass
class ActivityListResult:
    activities: List[DocumentActivity] = field(default_factory=list)
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    error: DocumentError | None = None


class ListActivitiesUseCase:
    def __init__(self, activities: ActivityRepository) -> None:
        self._activities = activities

    def execute(
        self,
        *,
        principal: Principal,
        query: ActivityQuery | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> ActivityListResult:
        query = query or ActivityQuery()
        if not can_perform_admin_action(principal, "view_audit"):
            query = replace(query, user_id=principal.id)

        page_size = clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT)
        start = max(0, offset)
        return ActivityListResult(
            activities=self._activities.list_activities(
                query, limit=page_size, offset=start
            ),
            limit=page_size,
            offset=start,
        )

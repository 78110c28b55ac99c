"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/admin.py
===============================================================================

Name:
    Admin / Activity Router

Responsibilities:
    - Consulta del log de actividad (GET /activity).
    - Dashboard administrativo (GET /admin/dashboard).
    - Validaciones de borde (rangos de fechas, acción conocida).

Collaborators:
    - application.usecases.admin (ListActivities / GetAdminDashboard)
    - identity.auth_users.require_principal
    - schemas.admin

Notas:
    - El alcance del log (todo vs. solo actividad propia) lo decide el caso
      de uso según el Principal; el router no filtra.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.application.usecases import GetAdminDashboardUseCase, ListActivitiesUseCase
from app.container import get_admin_dashboard_use_case, get_list_activities_use_case
from app.crosscutting.error_responses import validation_error
from app.domain.entities import ActivityAction, DocumentActivity
from app.domain.value_objects import ActivityQuery
from app.domain.workspace_policy import Principal
from app.domain.workspaces import parse_workspace
from app.identity.auth_users import require_principal
from fastapi import APIRouter, Depends, Query

from ..dependencies import as_utc
from ..error_mapping import raise_document_error
from ..schemas.admin import (
    ActivitiesRes,
    ActivityRes,
    AdminDashboardRes,
    UserStatsRes,
)
from .documents import to_stats_res

router = APIRouter()


def to_activity_res(activity: DocumentActivity) -> ActivityRes:
    return ActivityRes(
        id=activity.id,
        document_id=activity.document_id,
        user_id=activity.user_id,
        action=activity.action.value,
        workspace=activity.workspace.value if activity.workspace else None,
        details=dict(activity.details or {}),
        ip_address=activity.ip_address,
        user_agent=activity.user_agent,
        created_at=activity.created_at,
    )


@router.get("/activity", response_model=ActivitiesRes, tags=["activity"])
def list_activity(
    document_id: UUID | None = Query(None),
    user_id: UUID | None = Query(None),
    action: str | None = Query(None),
    workspace: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    use_case: ListActivitiesUseCase = Depends(get_list_activities_use_case),
    principal: Principal = Depends(require_principal),
):
    date_from = as_utc(date_from)
    date_to = as_utc(date_to)
    if date_from and date_to and date_from > date_to:
        raise validation_error("date_from must be before date_to")

    action_value = None
    if action:
        try:
            action_value = ActivityAction(action.strip().lower())
        except ValueError:
            raise validation_error(f"Unknown activity action: {action}")

    workspace_value = None
    if workspace:
        workspace_value = parse_workspace(workspace)
        if workspace_value is None:
            raise validation_error(f"Unknown workspace: {workspace}")

    result = use_case.execute(
        principal=principal,
        query=ActivityQuery(
            document_id=document_id,
            user_id=user_id,
            action=action_value,
            workspace=workspace_value,
            date_from=date_from,
            date_to=date_to,
        ),
        limit=limit,
        offset=offset,
    )
    if result.error is not None:
        raise_document_error(result.error)

    next_offset = (
        result.offset + result.limit
        if len(result.activities) == result.limit
        else None
    )
    return ActivitiesRes(
        activities=[to_activity_res(a) for a in result.activities],
        limit=result.limit,
        offset=result.offset,
        next_offset=next_offset,
    )


@router.get("/admin/dashboard", response_model=AdminDashboardRes, tags=["admin"])
def admin_dashboard(
    use_case: GetAdminDashboardUseCase = Depends(get_admin_dashboard_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(principal=principal)
    if result.error is not None:
        raise_document_error(result.error)
    assert result.dashboard is not None

    dashboard = result.dashboard
    return AdminDashboardRes(
        users=UserStatsRes(
            total=dashboard.users.total,
            active=dashboard.users.active,
            by_role=dict(dashboard.users.by_role),
            by_workspace=dict(dashboard.users.by_workspace),
        ),
        documents=to_stats_res(dashboard.documents),
        workspaces={
            name: to_stats_res(stats) for name, stats in dashboard.workspaces.items()
        },
        recent_activity=[to_activity_res(a) for a in dashboard.recent_activity],
        system_health=dashboard.system_health,
    )

"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/workspaces.py
===============================================================================

Name:
    Workspaces Router

Responsibilities:
    - Catálogo de workspaces con el acceso resuelto para el caller.
    - Esquema de facetas por workspace.
    - Estadísticas y listado de documentos scoped a un workspace.
    - Resolver de acceso para el caller (GET /workspaces/{ws}/access).

Collaborators:
    - application.usecases.workspace
    - domain.workspace_policy.check_workspace_access
    - domain.facets.facet_schema
    - schemas.workspaces
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.application.usecases import (
    GetWorkspaceStatsUseCase,
    ListWorkspaceDocumentsUseCase,
    ListWorkspacesUseCase,
)
from app.application.usecases.documents.list_documents import DEFAULT_LIMIT, MAX_LIMIT
from app.container import (
    get_list_workspace_documents_use_case,
    get_list_workspaces_use_case,
    get_workspace_stats_use_case,
)
from app.crosscutting.pagination import clamp_limit, resolve_offset
from app.domain.facets import facet_schema
from app.domain.value_objects import format_file_size
from app.domain.workspace_policy import (
    Principal,
    WorkspaceAccess,
    check_workspace_access,
)
from app.domain.workspaces import WorkspaceType
from app.identity.auth_users import require_principal
from fastapi import APIRouter, Depends, Query

from ..dependencies import (
    build_document_filters,
    parse_document_sort,
    parse_workspace_param,
)
from ..error_mapping import raise_document_error
from ..schemas.documents import DocumentsListRes
from ..schemas.workspaces import (
    FacetDefinitionRes,
    WorkspaceAccessRes,
    WorkspaceFacetsRes,
    WorkspaceRes,
    WorkspacesListRes,
    WorkspaceStatsRes,
)
from .admin import to_activity_res
from .documents import to_documents_list_res

router = APIRouter()


def to_access_res(workspace: WorkspaceType, access: WorkspaceAccess) -> WorkspaceAccessRes:
    return WorkspaceAccessRes(
        workspace=workspace,
        has_access=access.has_access,
        permissions=list(access.permissions),
        reason=access.reason,
    )


@router.get("/workspaces", response_model=WorkspacesListRes, tags=["workspaces"])
def list_workspaces(
    only_accessible: bool = False,
    use_case: ListWorkspacesUseCase = Depends(get_list_workspaces_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(principal=principal, only_accessible=only_accessible)
    if result.error is not None:
        raise_document_error(result.error)

    return WorkspacesListRes(
        workspaces=[
            WorkspaceRes(
                id=item.workspace,
                name=item.definition.name,
                description=item.definition.description,
                access=to_access_res(item.workspace, item.access),
            )
            for item in result.workspaces
        ]
    )


@router.get(
    "/workspaces/{workspace}/facets",
    response_model=WorkspaceFacetsRes,
    tags=["workspaces"],
)
def workspace_facets(
    workspace: str,
    principal: Principal = Depends(require_principal),
):
    ws = parse_workspace_param(workspace)
    return WorkspaceFacetsRes(
        workspace=ws,
        facets=[
            FacetDefinitionRes(
                key=definition.key,
                label=definition.label,
                allowed=list(definition.allowed) if definition.allowed else None,
            )
            for definition in facet_schema(ws)
        ],
    )


@router.get(
    "/workspaces/{workspace}/access",
    response_model=WorkspaceAccessRes,
    tags=["workspaces"],
)
def workspace_access(
    workspace: str,
    principal: Principal = Depends(require_principal),
):
    ws = parse_workspace_param(workspace)
    return to_access_res(ws, check_workspace_access(principal, ws))


@router.get(
    "/workspaces/{workspace}/stats",
    response_model=WorkspaceStatsRes,
    tags=["workspaces"],
)
def workspace_stats(
    workspace: str,
    use_case: GetWorkspaceStatsUseCase = Depends(get_workspace_stats_use_case),
    principal: Principal = Depends(require_principal),
):
    ws = parse_workspace_param(workspace)
    result = use_case.execute(principal=principal, workspace=ws)
    if result.error is not None:
        raise_document_error(result.error)
    assert result.stats is not None

    stats = result.stats
    return WorkspaceStatsRes(
        workspace=stats.workspace,
        total_documents=stats.total_documents,
        by_status=dict(stats.by_status),
        total_size=stats.total_size,
        total_size_formatted=format_file_size(stats.total_size),
        user_count=stats.user_count,
        recent_activity=[to_activity_res(a) for a in stats.recent_activity],
    )


@router.get(
    "/workspaces/{workspace}/documents",
    response_model=DocumentsListRes,
    tags=["workspaces"],
)
def workspace_documents(
    workspace: str,
    status: list[str] | None = Query(None),
    created_by: UUID | None = None,
    mime_type: str | None = None,
    tags: list[str] | None = Query(None),
    facets: str | None = Query(None, description="Objeto JSON clave/valor"),
    search: str | None = Query(None, max_length=200),
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    cursor: str | None = None,
    use_case: ListWorkspaceDocumentsUseCase = Depends(
        get_list_workspace_documents_use_case
    ),
    principal: Principal = Depends(require_principal),
):
    ws = parse_workspace_param(workspace)
    filters = build_document_filters(
        status=status,
        created_by=created_by,
        mime_type=mime_type,
        tags=tags,
        facets=facets,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    result = use_case.execute(
        principal=principal,
        workspace=ws,
        filters=filters,
        sort=parse_document_sort(sort_by, sort_order),
        limit=limit,
        offset=offset,
        cursor=cursor,
    )
    if result.error is not None:
        raise_document_error(result.error)

    return to_documents_list_res(
        result,
        limit=clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT),
        offset=resolve_offset(cursor=cursor, offset=offset),
    )

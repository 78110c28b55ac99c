"""
===============================================================================
USE CASE: List Workspace Documents (listado acotado a un workspace)
===============================================================================

Responsibilities:
    - Rechazar (FORBIDDEN) si el principal no tiene acceso al workspace.
    - Validar los filtros de facetas contra el esquema del workspace.
    - Delegar en ListDocumentsUseCase con el workspace fijado (policy B).

Collaborators:
    - domain.workspace_policy.check_workspace_access
    - domain.facets.validate_facets
    - documents.ListDocumentsUseCase
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace

from ....crosscutting.metrics import record_permission_denied
from ....domain.facets import normalize_facets, validate_facets
from ....domain.value_objects import DocumentSort
from ....domain.visibility import DocumentFilters
from ....domain.workspace_policy import Principal, check_workspace_access
from ....domain.workspaces import WorkspaceType
from ..documents.document_results import ListDocumentsResult, validation_error
from ..documents.list_documents import ListDocumentsUseCase
from .workspace_results import workspace_forbidden


class ListWorkspaceDocumentsUseCase:
    def __init__(self, list_documents: ListDocumentsUseCase) -> None:
        self._list_documents = list_documents

    def execute(
        self,
        *,
        principal: Principal,
        workspace: WorkspaceType,
        filters: DocumentFilters | None = None,
        sort: DocumentSort | None = None,
        limit: int | None = None,
        offset: int | None = None,
        cursor: str | None = None,
    ) -> ListDocumentsResult:
        access = check_workspace_access(principal, workspace)
        if not access.has_access:
            record_permission_denied("workspace_documents")
            return ListDocumentsResult(error=workspace_forbidden(access.reason))

        filters = filters or DocumentFilters()
        facets = normalize_facets(filters.facets)
        facet_errors = validate_facets(workspace, facets)
        if facet_errors:
            return ListDocumentsResult(error=validation_error("; ".join(facet_errors)))

        return self._list_documents.execute(
            principal=principal,
            filters=replace(filters, workspace=workspace, facets=facets),
            sort=sort,
            limit=limit,
            offset=offset,
            cursor=cursor,
        )

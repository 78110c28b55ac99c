"""
===============================================================================
USE CASE: Document Stats (agregados sobre documentos visibles)
===============================================================================

Responsibilities:
    - Calcular totales, por estado, por workspace y tamaño total.
    - Roles privilegiados ven todo; el resto queda acotado por policy B.

Collaborators:
    - DocumentRepository.document_stats(predicate)
    - domain.visibility.build_visibility_predicate
===============================================================================
"""

from __future__ import annotations

from ....domain.repositories import DocumentRepository
from ....domain.visibility import DocumentFilters, build_visibility_predicate
from ....domain.workspace_policy import Principal
from ....domain.workspaces import WorkspaceType
from .document_results import DocumentStatsResult


class GetDocumentStatsUseCase:
    def __init__(self, repository: DocumentRepository) -> None:
        self._documents = repository

    def execute(
        self,
        *,
        principal: Principal,
        workspace: WorkspaceType | None = None,
    ) -> DocumentStatsResult:
        predicate = build_visibility_predicate(
            principal, DocumentFilters(workspace=workspace)
        )
        return DocumentStatsResult(stats=self._documents.document_stats(predicate))

"""
===============================================================================
USE CASE: Get Document (lectura con visibilidad estricta)
===============================================================================

Name:
    Get Document Use Case

Business Goal:
    Obtener un documento por ID sólo si el principal puede verlo.

Why (Context / Intención):
    - Un documento invisible responde NOT_FOUND (no FORBIDDEN): no se filtra
      la existencia de borradores ajenos.
    - La regla es la misma que usan los listados (policy B), evaluada en
      memoria con `matches`.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    GetDocumentUseCase

Responsibilities:
    - Cargar el documento.
    - Aplicar visibilidad (policy B).
    - Registrar actividad `viewed` (best-effort, opcional).

Collaborators:
    - DocumentRepository.get_document
    - domain.visibility.is_document_visible
    - app.activity.record_activity
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....activity import RequestMeta, record_activity
from ....domain.entities import ActivityAction
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder
from ....domain.visibility import is_document_visible
from ....domain.workspace_policy import Principal
from .document_results import GetDocumentResult, document_not_found


class GetDocumentUseCase:
    """
    Use Case (Application Service / Query):
        Recupera un documento visible para el principal.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        *,
        activity_recorder: ActivityRecorder | None = None,
    ) -> None:
        self._documents = repository
        self._activity = activity_recorder

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        record_view: bool = True,
        meta: RequestMeta | None = None,
    ) -> GetDocumentResult:
        # ---------------------------------------------------------------------
        # 1) Cargar + visibilidad (invisible == inexistente).
        # ---------------------------------------------------------------------
        document = self._documents.get_document(document_id)
        if document is None or not is_document_visible(principal, document):
            return GetDocumentResult(error=document_not_found())

        # ---------------------------------------------------------------------
        # 2) Actividad `viewed`.
        # ---------------------------------------------------------------------
        if record_view:
            record_activity(
                self._activity,
                user_id=principal.id,
                action=ActivityAction.VIEWED,
                document_id=document.id,
                workspace=document.workspace,
                meta=meta,
            )

        return GetDocumentResult(document=document)

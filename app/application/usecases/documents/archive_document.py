"""
===============================================================================
USE CASE: Archive Document (individual y masivo)
===============================================================================

Name:
    ArchiveDocumentUseCase / BulkArchiveDocumentsUseCase

Business Goal:
    Archivar documentos `stored`. El archivado pasa por las reglas propias
    (estado + rol) y después por el motor de ciclo de vida (gate + tabla +
    escritura condicional), de modo que nunca se saltea el gate.

Why (Context / Intención):
    - El masivo agrega fallas por ítem en lugar de abortar: cada documento se
      evalúa de forma independiente.
    - Sólo administrador o secretarios pueden archivar en bloque.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ArchiveDocumentUseCase

Responsibilities:
    - Validar existencia, estado `stored` y rol (can_archive_document).
    - Delegar la transición a DocumentLifecycleEngine (acción `archived`).

Collaborators:
    - DocumentRepository.get_document
    - domain.lifecycle.can_archive_document / can_bulk_archive
    - DocumentLifecycleEngine.change_status
===============================================================================
"""

from __future__ import annotations

from typing import Final, List, Sequence
from uuid import UUID

from ....activity import RequestMeta
from ....crosscutting.metrics import record_permission_denied
from ....domain.entities import ActivityAction, DocumentStatus
from ....domain.lifecycle import can_archive_document, can_bulk_archive
from ....domain.repositories import DocumentRepository
from ....domain.workspace_policy import Principal
from .document_lifecycle import DocumentLifecycleEngine
from .document_results import (
    MSG_DOCUMENT_NOT_FOUND,
    BulkArchiveResult,
    BulkItemError,
    ChangeDocumentStatusResult,
    conflict,
    document_not_found,
    forbidden,
    validation_error,
)

MAX_BULK_ITEMS: Final[int] = 50


def dedupe_ids(document_ids: Sequence[UUID]) -> List[UUID]:
    """Dedupe preservando orden."""
    return list(dict.fromkeys(document_ids))


def validate_bulk_ids(document_ids: Sequence[UUID]) -> str | None:
    if not document_ids:
        return "At least one document id is required"
    if len(document_ids) > MAX_BULK_ITEMS:
        return f"At most {MAX_BULK_ITEMS} documents per request"
    return None


class ArchiveDocumentUseCase:
    def __init__(
        self, documents: DocumentRepository, engine: DocumentLifecycleEngine
    ) -> None:
        self._documents = documents
        self._engine = engine

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        reason: str | None = None,
        meta: RequestMeta | None = None,
    ) -> ChangeDocumentStatusResult:
        # ---------------------------------------------------------------------
        # 1) Existencia.
        # ---------------------------------------------------------------------
        document = self._documents.get_document(document_id)
        if document is None:
            return ChangeDocumentStatusResult(error=document_not_found())

        # ---------------------------------------------------------------------
        # 2) Reglas de archivado (estado antes que rol).
        # ---------------------------------------------------------------------
        decision = can_archive_document(principal, document)
        if not decision.allowed:
            if document.status != DocumentStatus.STORED:
                return ChangeDocumentStatusResult(error=conflict(decision.reason))
            record_permission_denied("archive")
            return ChangeDocumentStatusResult(error=forbidden(decision.reason))

        # ---------------------------------------------------------------------
        # 3) Transición vía motor (gate + tabla + compare-and-set).
        # ---------------------------------------------------------------------
        return self._engine.change_status(
            principal=principal,
            document=document,
            new_status=DocumentStatus.ARCHIVED,
            reason=reason,
            activity_action=ActivityAction.ARCHIVED,
            meta=meta,
        )


class BulkArchiveDocumentsUseCase:
    """Archiva hasta MAX_BULK_ITEMS documentos, acumulando errores por ítem."""

    def __init__(self, archive: ArchiveDocumentUseCase) -> None:
        self._archive = archive

    def execute(
        self,
        *,
        principal: Principal,
        document_ids: Sequence[UUID],
        reason: str | None = None,
        meta: RequestMeta | None = None,
    ) -> BulkArchiveResult:
        if not can_bulk_archive(principal):
            record_permission_denied("bulk_archive")
            return BulkArchiveResult(
                error=forbidden("Only administrators and secretaries can bulk archive")
            )

        ids = dedupe_ids(document_ids)
        message = validate_bulk_ids(ids)
        if message is not None:
            return BulkArchiveResult(error=validation_error(message))

        result = BulkArchiveResult()
        for document_id in ids:
            outcome = self._archive.execute(
                principal=principal,
                document_id=document_id,
                reason=reason,
                meta=meta,
            )
            if outcome.error is None:
                result.archived += 1
                continue
            result.failed += 1
            result.errors.append(
                BulkItemError(
                    document_id=document_id,
                    error=outcome.error.message or MSG_DOCUMENT_NOT_FOUND,
                )
            )
        return result

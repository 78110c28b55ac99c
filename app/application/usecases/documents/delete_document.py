"""
===============================================================================
USE CASE: Delete Document (borrado físico: archivo + fila)
===============================================================================

Name:
    DeleteDocumentUseCase / BulkDeleteDocumentsUseCase

Business Goal:
    Eliminar definitivamente un documento: primero el archivo del storage,
    después la fila. No existe soft-delete.

Why (Context / Intención):
    - Archivo primero: si el storage falla, la fila se conserva y el usuario
      puede reintentar (SERVICE_UNAVAILABLE).
    - Un archivo inexistente en storage no bloquea el borrado (se loguea).
    - La actividad `deleted` sobrevive al documento: se registra sin
      document_id y con id/título en details.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DeleteDocumentUseCase

Responsibilities:
    - Validar existencia/visibilidad y permiso (can_delete_document).
    - Borrar archivo (tolerando not found) y fila.
    - Registrar actividad.

Collaborators:
    - DocumentRepository.get_document / delete_document
    - FileStoragePort.delete_file
    - domain.lifecycle.can_delete_document
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Sequence
from uuid import UUID

from ....activity import RequestMeta, record_activity
from ....crosscutting.metrics import record_permission_denied
from ....domain.entities import ActivityAction
from ....domain.lifecycle import can_delete_document
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder, FileStoragePort
from ....domain.visibility import is_document_visible
from ....domain.workspace_policy import Principal
from ....identity.users import UserRole, parse_role
from ....infrastructure.storage.errors import StorageError, StorageNotFoundError
from .archive_document import dedupe_ids, validate_bulk_ids
from .document_results import (
    BulkDeleteResult,
    BulkItemError,
    DeleteDocumentResult,
    document_not_found,
    forbidden,
    storage_unavailable,
    validation_error,
)

logger = logging.getLogger(__name__)


class DeleteDocumentUseCase:
    """
    Use Case (Application Service / Command):
        Borrado físico de un documento (archivo + fila).
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: FileStoragePort | None,
        *,
        activity_recorder: ActivityRecorder | None = None,
    ) -> None:
        self._documents = repository
        self._storage = storage
        self._activity = activity_recorder

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        meta: RequestMeta | None = None,
    ) -> DeleteDocumentResult:
        # ---------------------------------------------------------------------
        # 1) Existencia.
        # ---------------------------------------------------------------------
        document = self._documents.get_document(document_id)
        if document is None:
            return DeleteDocumentResult(error=document_not_found())

        # ---------------------------------------------------------------------
        # 2) Permiso de borrado sobre la fila cargada.
        #    Invisible y no borrable => NOT_FOUND (no revela existencia).
        # ---------------------------------------------------------------------
        decision = can_delete_document(principal, document)
        if not decision.allowed:
            if not is_document_visible(principal, document):
                return DeleteDocumentResult(error=document_not_found())
            record_permission_denied("delete")
            return DeleteDocumentResult(error=forbidden(decision.reason))

        # ---------------------------------------------------------------------
        # 3) Archivo primero (not found se tolera).
        # ---------------------------------------------------------------------
        if document.storage_key:
            if self._storage is None:
                return DeleteDocumentResult(error=storage_unavailable())
            try:
                self._storage.delete_file(document.storage_key)
            except StorageNotFoundError:
                logger.warning(
                    "Stored file already missing, deleting row anyway",
                    extra={"document_id": str(document.id)},
                )
            except StorageError as exc:
                logger.error(
                    "Storage delete failed, document kept",
                    extra={"document_id": str(document.id), "error": str(exc)},
                )
                return DeleteDocumentResult(error=storage_unavailable())

        # ---------------------------------------------------------------------
        # 4) Fila.
        # ---------------------------------------------------------------------
        if not self._documents.delete_document(document.id):
            # Race: otro request lo borró entre el get y el delete.
            return DeleteDocumentResult(error=document_not_found())

        record_activity(
            self._activity,
            user_id=principal.id,
            action=ActivityAction.DELETED,
            document_id=None,
            workspace=document.workspace,
            details={
                "documentId": str(document.id),
                "title": document.title,
                "fileName": document.file_name,
                "status": document.status.value,
            },
            meta=meta,
        )

        logger.info(
            "Document deleted",
            extra={"document_id": str(document.id), "user_id": str(principal.id)},
        )
        return DeleteDocumentResult(deleted=True)


class BulkDeleteDocumentsUseCase:
    """Borrado masivo (sólo administrador), acumulando errores por ítem."""

    def __init__(self, delete: DeleteDocumentUseCase) -> None:
        self._delete = delete

    def execute(
        self,
        *,
        principal: Principal,
        document_ids: Sequence[UUID],
        meta: RequestMeta | None = None,
    ) -> BulkDeleteResult:
        if parse_role(principal.role) != UserRole.ADMINISTRADOR:
            record_permission_denied("bulk_delete")
            return BulkDeleteResult(
                error=forbidden("Only administrators can bulk delete documents")
            )

        ids = dedupe_ids(document_ids)
        message = validate_bulk_ids(ids)
        if message is not None:
            return BulkDeleteResult(error=validation_error(message))

        result = BulkDeleteResult()
        for document_id in ids:
            outcome = self._delete.execute(
                principal=principal, document_id=document_id, meta=meta
            )
            if outcome.error is None:
                result.deleted += 1
                continue
            result.failed += 1
            result.errors.append(
                BulkItemError(document_id=document_id, error=outcome.error.message)
            )
        return result

"""
===============================================================================
USE CASE: Delete User
===============================================================================

Business Goal:
    Eliminar un usuario sin dejar documentos huérfanos.

Rules:
    - Sólo administrador (admin action `delete_user`).
    - Nadie se elimina a sí mismo; un administrador no elimina a otro.
    - Con documentos no archivados => CONFLICT (archivar o reasignar antes).
    - Los documentos archivados del usuario se purgan (archivo + fila) antes
      de borrar la fila del usuario (FK documents.created_by es RESTRICT).
    - La actividad del usuario sobrevive (user_id -> NULL).

Collaborators:
    - UserRepository.get_user_by_id / delete_user
    - DocumentRepository.document_stats / query_documents / delete_document
    - FileStoragePort.delete_file
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Final, List
from uuid import UUID

from ....crosscutting.metrics import record_permission_denied
from ....domain.entities import Document, DocumentStatus
from ....domain.repositories import DocumentRepository, UserRepository
from ....domain.services import FileStoragePort
from ....domain.visibility import AllOf, FieldEquals
from ....domain.workspace_policy import Principal, can_perform_admin_action
from ....identity.users import UserRole
from ....infrastructure.storage.errors import StorageError, StorageNotFoundError
from .user_results import (
    DeleteUserResult,
    UserError,
    UserErrorCode,
    user_forbidden,
    user_not_found,
    user_validation_error,
)

logger = logging.getLogger(__name__)

_PURGE_PAGE_SIZE: Final[int] = 200


class DeleteUserUseCase:
    def __init__(
        self,
        users: UserRepository,
        documents: DocumentRepository,
        storage: FileStoragePort | None,
    ) -> None:
        self._users = users
        self._documents = documents
        self._storage = storage

    def execute(self, *, principal: Principal, user_id: UUID) -> DeleteUserResult:
        # ---------------------------------------------------------------------
        # 1) Autorización y reglas sobre el objetivo.
        # ---------------------------------------------------------------------
        if not can_perform_admin_action(principal, "delete_user"):
            record_permission_denied("delete_user")
            return DeleteUserResult(error=user_forbidden("Only administrators can delete users"))

        target = self._users.get_user_by_id(user_id)
        if target is None:
            return DeleteUserResult(error=user_not_found())
        if target.id == principal.id:
            return DeleteUserResult(error=user_validation_error("You cannot delete yourself"))
        if target.role == UserRole.ADMINISTRADOR:
            record_permission_denied("delete_user")
            return DeleteUserResult(
                error=user_forbidden("Cannot delete another administrator")
            )

        # ---------------------------------------------------------------------
        # 2) Documentos vivos bloquean el borrado.
        # ---------------------------------------------------------------------
        owned = FieldEquals("created_by", target.id)
        stats = self._documents.document_stats(owned)
        active = sum(
            count
            for status, count in stats.by_status.items()
            if status != DocumentStatus.ARCHIVED.value
        )
        if active:
            return DeleteUserResult(
                error=UserError(
                    code=UserErrorCode.CONFLICT,
                    message=(
                        f"User has {active} active documents. "
                        "Archive or reassign documents first."
                    ),
                )
            )

        # ---------------------------------------------------------------------
        # 3) Purga de archivados (archivo primero, después fila).
        # ---------------------------------------------------------------------
        archived = self._archived_documents(target.id)
        for document in archived:
            error = self._purge(document)
            if error is not None:
                return DeleteUserResult(error=error)

        # ---------------------------------------------------------------------
        # 4) Usuario.
        # ---------------------------------------------------------------------
        if not self._users.delete_user(target.id):
            return DeleteUserResult(error=user_not_found())

        logger.info(
            "User deleted",
            extra={
                "user_id": str(target.id),
                "deleted_by": str(principal.id),
                "purged_documents": len(archived),
            },
        )
        return DeleteUserResult(deleted=True, purged_documents=len(archived))

    def _archived_documents(self, user_id: UUID) -> List[Document]:
        predicate = AllOf(
            (
                FieldEquals("created_by", user_id),
                FieldEquals("status", DocumentStatus.ARCHIVED),
            )
        )
        collected: List[Document] = []
        while True:
            page, total = self._documents.query_documents(
                predicate, limit=_PURGE_PAGE_SIZE, offset=len(collected)
            )
            collected.extend(page)
            if not page or len(collected) >= total:
                return collected

    def _purge(self, document: Document) -> UserError | None:
        if document.storage_key:
            if self._storage is None:
                return UserError(
                    code=UserErrorCode.SERVICE_UNAVAILABLE,
                    message="Storage unavailable",
                    resource="storage",
                )
            try:
                self._storage.delete_file(document.storage_key)
            except StorageNotFoundError:
                logger.warning(
                    "Stored file already missing, deleting row anyway",
                    extra={"document_id": str(document.id)},
                )
            except StorageError as exc:
                logger.error(
                    "Storage delete failed, user kept",
                    extra={"document_id": str(document.id), "error": str(exc)},
                )
                return UserError(
                    code=UserErrorCode.SERVICE_UNAVAILABLE,
                    message="Storage unavailable",
                    resource="storage",
                )
        self._documents.delete_document(document.id)
        return None

"""
===============================================================================
USE CASE: Download Document (URL presignada / contenido)
===============================================================================

Name:
    Download Document Use Case

Business Goal:
    Entregar el archivo de un documento visible para el principal, ya sea
    mediante una URL presignada (descarga directa desde el storage) o
    devolviendo los bytes a través de la API.

Why (Context / Intención):
    - La URL presignada evita que la API haga de proxy de archivos grandes.
    - El TTL se acota a un máximo configurable; `inline` controla la
      Content-Disposition (vista previa vs. descarga).
    - Sin capability documents.download no hay descarga, aunque el documento
      sea visible.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DownloadDocumentUseCase / FetchDocumentContentUseCase

Responsibilities:
    - Validar visibilidad (policy B) y capability documents.download.
    - Validar storage configurado y storage_key presente.
    - Generar URL presignada o descargar bytes.
    - Registrar actividad `downloaded`.

Collaborators:
    - DocumentRepository.get_document
    - FileStoragePort.generate_presigned_url / download_file
    - app.activity.record_activity
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Final
from uuid import UUID

from ....activity import RequestMeta, record_activity
from ....crosscutting.metrics import record_permission_denied
from ....domain.capabilities import derive_capabilities
from ....domain.entities import ActivityAction, Document
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder, FileStoragePort
from ....domain.visibility import is_document_visible
from ....domain.workspace_policy import Principal
from ....infrastructure.storage.errors import StorageError, StorageNotFoundError
from .document_results import (
    RESOURCE_DOCUMENT,
    DocumentContentResult,
    DocumentError,
    DocumentErrorCode,
    DownloadDocumentResult,
    document_not_found,
    forbidden,
    storage_unavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS: Final[int] = 3600
MAX_TTL_SECONDS: Final[int] = 86400
_MSG_NO_FILE: Final[str] = "Document has no stored file"


def _resolve_downloadable(
    documents: DocumentRepository,
    storage: FileStoragePort | None,
    principal: Principal,
    document_id: UUID,
) -> tuple[Document | None, DocumentError | None]:
    """Pasos comunes: visibilidad, capability, storage y storage_key."""
    document = documents.get_document(document_id)
    if document is None or not is_document_visible(principal, document):
        return None, document_not_found()

    capabilities = derive_capabilities(principal.role, principal.workspace)
    if not capabilities.documents.download:
        record_permission_denied("download")
        return None, forbidden("Insufficient permissions to download documents")

    if storage is None:
        return None, storage_unavailable()
    if not document.storage_key:
        return None, DocumentError(
            code=DocumentErrorCode.NOT_FOUND,
            message=_MSG_NO_FILE,
            resource=RESOURCE_DOCUMENT,
        )
    return document, None


class DownloadDocumentUseCase:
    """
    Use Case (Application Service / Query):
        Genera una URL presignada para descargar el archivo de un documento.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: FileStoragePort | None,
        *,
        activity_recorder: ActivityRecorder | None = None,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_ttl_seconds: int = MAX_TTL_SECONDS,
    ) -> None:
        self._documents = repository
        self._storage = storage
        self._activity = activity_recorder
        self._default_ttl = default_ttl_seconds
        self._max_ttl = max_ttl_seconds

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        expires_in: int | None = None,
        inline: bool = False,
        meta: RequestMeta | None = None,
    ) -> DownloadDocumentResult:
        # ---------------------------------------------------------------------
        # 1) Visibilidad + capability + storage.
        # ---------------------------------------------------------------------
        document, error = _resolve_downloadable(
            self._documents, self._storage, principal, document_id
        )
        if error is not None:
            return DownloadDocumentResult(error=error)
        assert document is not None and self._storage is not None

        # ---------------------------------------------------------------------
        # 2) TTL acotado + URL presignada.
        # ---------------------------------------------------------------------
        ttl = self._resolve_ttl(expires_in)
        try:
            url = self._storage.generate_presigned_url(
                document.storage_key,
                expires_in_seconds=ttl,
                filename=document.file_name,
                inline=inline,
            )
        except StorageError as exc:
            logger.error(
                "Presigned URL generation failed",
                extra={"document_id": str(document.id), "error": str(exc)},
            )
            return DownloadDocumentResult(error=storage_unavailable())

        # ---------------------------------------------------------------------
        # 3) Actividad.
        # ---------------------------------------------------------------------
        record_activity(
            self._activity,
            user_id=principal.id,
            action=ActivityAction.DOWNLOADED,
            document_id=document.id,
            workspace=document.workspace,
            details={"fileName": document.file_name, "inline": inline},
            meta=meta,
        )

        return DownloadDocumentResult(
            url=url,
            file_name=document.file_name,
            mime_type=document.mime_type,
            expires_in=ttl,
        )

    def _resolve_ttl(self, expires_in: int | None) -> int:
        if expires_in is None or expires_in <= 0:
            return min(self._default_ttl, self._max_ttl)
        return min(expires_in, self._max_ttl)


class FetchDocumentContentUseCase:
    """
    Use Case (Application Service / Query):
        Descarga los bytes del archivo para servirlos a través de la API.
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
        inline: bool = False,
        meta: RequestMeta | None = None,
    ) -> DocumentContentResult:
        document, error = _resolve_downloadable(
            self._documents, self._storage, principal, document_id
        )
        if error is not None:
            return DocumentContentResult(error=error)
        assert document is not None and self._storage is not None

        try:
            content = self._storage.download_file(document.storage_key)
        except StorageNotFoundError:
            logger.warning(
                "Stored file missing for document",
                extra={"document_id": str(document.id)},
            )
            return DocumentContentResult(
                error=DocumentError(
                    code=DocumentErrorCode.NOT_FOUND,
                    message=_MSG_NO_FILE,
                    resource=RESOURCE_DOCUMENT,
                )
            )
        except StorageError as exc:
            logger.error(
                "Storage download failed",
                extra={"document_id": str(document.id), "error": str(exc)},
            )
            return DocumentContentResult(error=storage_unavailable())

        record_activity(
            self._activity,
            user_id=principal.id,
            action=ActivityAction.DOWNLOADED,
            document_id=document.id,
            workspace=document.workspace,
            details={"fileName": document.file_name, "inline": inline},
            meta=meta,
        )

        return DocumentContentResult(
            content=content,
            file_name=document.file_name,
            mime_type=document.mime_type,
        )

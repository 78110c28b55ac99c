"""
===============================================================================
USE CASE: Upload Document (archivo + metadata, estado inicial draft)
===============================================================================

Name:
    Upload Document Use Case

Business Goal:
    Recibir un archivo con su metadata, validarlo, subir los bytes al storage
    y persistir el documento en estado `draft` dentro de un workspace.

Why (Context / Intención):
    - El archivo se sube ANTES de persistir la fila: la DB nunca apunta a una
      storage_key inexistente.
    - Si la persistencia falla, se intenta borrar el objeto subido para no
      dejar basura huérfana en el bucket.
    - La autorización (capability + acceso al workspace) se evalúa antes de
      cualquier escritura.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    UploadDocumentUseCase

Responsibilities:
    - Validar título, descripción, tags, facets, tamaño y MIME type.
    - Verificar documents.create y acceso de escritura al workspace.
    - Calcular hash SHA-256 y storage_key.
    - Subir bytes, persistir Document(draft) y registrar actividad `created`.

Collaborators:
    - domain.capabilities / domain.workspace_policy
    - domain.facets.validate_facets
    - FileStoragePort.upload_file / delete_file
    - DocumentRepository.save_document
    - app.activity.record_activity
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Final, List
from uuid import uuid4

from ....activity import RequestMeta, record_activity
from ....crosscutting.metrics import record_permission_denied
from ....domain.capabilities import derive_capabilities
from ....domain.entities import ActivityAction, Document, DocumentStatus
from ....domain.facets import normalize_facets, validate_facets
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder, FileStoragePort
from ....domain.workspace_policy import Principal, check_workspace_access
from ....domain.workspaces import WorkspaceType
from ....infrastructure.storage.errors import StorageError
from .document_results import (
    UploadDocumentResult,
    forbidden,
    storage_unavailable,
    validation_error,
)
from .document_rules import (
    build_storage_key,
    compute_file_hash,
    is_allowed_mime_type,
    normalize_mime_type,
    normalize_tags,
    truncate_file_name,
    validate_description,
    validate_tags,
    validate_title,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES: Final[int] = 50 * 1024 * 1024
_WRITE_TOKENS: Final[frozenset[str]] = frozenset({"write", "create"})


@dataclass(frozen=True)
class UploadDocumentInput:
    """
    DTO de entrada para upload.

    Notas:
      - content contiene el archivo completo en bytes.
      - facets se validan contra el esquema del workspace destino.
    """

    principal: Principal
    workspace: WorkspaceType
    title: str
    file_name: str
    mime_type: str
    content: bytes
    description: str | None = None
    tags: List[str] = field(default_factory=list)
    facets: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    meta: RequestMeta | None = None


class UploadDocumentUseCase:
    """
    Use Case (Application Service / Command):
        Sube el archivo y persiste el documento en estado draft.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: FileStoragePort | None,
        *,
        activity_recorder: ActivityRecorder | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._documents = repository
        self._storage = storage
        self._activity = activity_recorder
        self._max_upload_bytes = max_upload_bytes

    def execute(self, input_data: UploadDocumentInput) -> UploadDocumentResult:
        principal = input_data.principal

        # ---------------------------------------------------------------------
        # 1) Autorización: capability + acceso de escritura al workspace.
        # ---------------------------------------------------------------------
        capabilities = derive_capabilities(principal.role, principal.workspace)
        if not capabilities.documents.create:
            record_permission_denied("upload")
            return UploadDocumentResult(
                error=forbidden("Insufficient permissions to create documents")
            )

        access = check_workspace_access(principal, input_data.workspace)
        if not access.has_access:
            record_permission_denied("upload")
            return UploadDocumentResult(error=forbidden(access.reason))
        if not _WRITE_TOKENS.intersection(access.permissions):
            record_permission_denied("upload")
            return UploadDocumentResult(
                error=forbidden("No write access to this workspace")
            )

        # ---------------------------------------------------------------------
        # 2) Validación de input.
        # ---------------------------------------------------------------------
        tags = normalize_tags(input_data.tags)
        facets = normalize_facets(input_data.facets)
        mime_type = normalize_mime_type(input_data.mime_type)
        file_name = truncate_file_name(input_data.file_name)

        message = (
            validate_title(input_data.title)
            or validate_description(input_data.description)
            or validate_tags(tags)
            or self._validate_file(input_data.content, mime_type)
        )
        if message is None:
            facet_errors = validate_facets(input_data.workspace, facets)
            if facet_errors:
                message = "; ".join(facet_errors)
        if message is not None:
            return UploadDocumentResult(error=validation_error(message))

        if self._storage is None:
            return UploadDocumentResult(error=storage_unavailable())

        # ---------------------------------------------------------------------
        # 3) IDs + subida del archivo.
        # ---------------------------------------------------------------------
        document_id = uuid4()
        storage_key = build_storage_key(
            workspace=input_data.workspace,
            user_id=principal.id,
            document_id=document_id,
            file_name=file_name,
        )
        try:
            self._storage.upload_file(storage_key, input_data.content, mime_type)
        except StorageError as exc:
            logger.error(
                "Upload to storage failed",
                extra={"document_id": str(document_id), "error": str(exc)},
            )
            return UploadDocumentResult(error=storage_unavailable())

        # ---------------------------------------------------------------------
        # 4) Persistir Document(draft) con rollback del archivo si falla.
        # ---------------------------------------------------------------------
        now = datetime.now(timezone.utc)
        document = Document(
            id=document_id,
            title=input_data.title.strip(),
            description=input_data.description,
            workspace=input_data.workspace,
            status=DocumentStatus.DRAFT,
            created_by=principal.id,
            tags=tags,
            facets=facets,
            metadata=dict(input_data.metadata or {}),
            file_name=file_name,
            file_size=len(input_data.content),
            mime_type=mime_type,
            file_hash=compute_file_hash(input_data.content),
            storage_key=storage_key,
            created_at=now,
            updated_at=now,
        )
        try:
            self._documents.save_document(document)
        except Exception:
            self._cleanup_orphaned_file(storage_key)
            logger.exception(
                "Upload failed during DB persistence",
                extra={"document_id": str(document_id)},
            )
            raise

        # ---------------------------------------------------------------------
        # 5) Actividad.
        # ---------------------------------------------------------------------
        record_activity(
            self._activity,
            user_id=principal.id,
            action=ActivityAction.CREATED,
            document_id=document_id,
            workspace=input_data.workspace,
            details={
                "title": document.title,
                "fileName": document.file_name,
                "fileSize": document.file_size,
                "mimeType": mime_type,
            },
            meta=input_data.meta,
        )

        logger.info(
            "Document uploaded",
            extra={
                "document_id": str(document_id),
                "workspace": input_data.workspace.value,
                "file_size": document.file_size,
            },
        )
        return UploadDocumentResult(document=document)

    # =========================================================================
    # Helpers privados
    # =========================================================================

    def _validate_file(self, content: bytes, mime_type: str) -> str | None:
        if not content:
            return "File is empty"
        if len(content) > self._max_upload_bytes:
            return f"File exceeds maximum size of {self._max_upload_bytes} bytes"
        if not is_allowed_mime_type(mime_type):
            return f"File type '{mime_type or 'unknown'}' is not allowed"
        return None

    def _cleanup_orphaned_file(self, storage_key: str) -> None:
        """Best-effort: si el delete falla, solo se loguea."""
        if self._storage is None:
            return
        try:
            self._storage.delete_file(storage_key)
            logger.info(
                "Cleaned up orphaned file after DB error",
                extra={"storage_key": storage_key},
            )
        except StorageError:
            logger.warning(
                "Failed to clean up orphaned file after DB error",
                extra={"storage_key": storage_key},
            )

"""
===============================================================================
TARJETA CRC — schemas/documents.py
===============================================================================

Módulo:
    Schemas HTTP para Documentos (metadata, listados, ciclo de vida, bulk)

Responsabilidades:
    - DTOs de request/response para endpoints de documentos.
    - Validar inputs de edición/estado/bulk antes de llegar al caso de uso.
    - Mantener responses listas para UI (snake_case, fechas ISO).

Colaboradores:
    - domain.entities.DocumentStatus
    - application.usecases.documents.document_rules (límites)

Reglas:
    - Los límites de título/descripción/tags se validan también en el caso
      de uso; acá sólo se rechaza temprano lo obviamente inválido.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from app.application.usecases.documents.archive_document import MAX_BULK_ITEMS
from app.application.usecases.documents.document_rules import (
    DESCRIPTION_MAX_LENGTH,
    MAX_TAGS,
    TITLE_MAX_LENGTH,
)
from app.domain.entities import DocumentStatus
from app.domain.workspaces import WorkspaceType
from pydantic import BaseModel, Field, field_validator

# R: motivo libre de cambios de estado (se guarda en la actividad).
REASON_MAX_LENGTH = 500


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class UpdateDocumentMetadataReq(BaseModel):
    """PATCH parcial: None = sin cambios."""

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    tags: list[str] | None = Field(default=None, max_length=MAX_TAGS)
    facets: dict[str, str] | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class ChangeStatusReq(BaseModel):
    status: DocumentStatus
    reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)


class ArchiveReq(BaseModel):
    reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)


class BulkIdsReq(BaseModel):
    """Lote de IDs para operaciones masivas (1..50)."""

    document_ids: list[UUID] = Field(..., min_length=1, max_length=MAX_BULK_ITEMS)
    reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class DocumentRes(BaseModel):
    """Documento serializable (sin storage_key: detalle interno)."""

    id: UUID
    title: str
    description: str | None = None
    workspace: WorkspaceType
    status: DocumentStatus
    tags: list[str] = Field(default_factory=list)
    facets: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_by: UUID

    file_name: str
    file_size: int
    file_size_formatted: str
    mime_type: str
    file_hash: str

    created_at: datetime | None = None
    updated_at: datetime | None = None
    stored_at: datetime | None = None
    archived_at: datetime | None = None


class DocumentsListRes(BaseModel):
    """Response de listados (offset + cursor opaco)."""

    documents: list[DocumentRes]
    total: int
    limit: int
    offset: int
    has_more: bool
    next_cursor: str | None = None


class StatusChangeRes(BaseModel):
    document: DocumentRes
    previous_status: DocumentStatus


class DeleteDocumentRes(BaseModel):
    deleted: bool


class BulkItemErrorRes(BaseModel):
    document_id: UUID
    error: str


class BulkArchiveRes(BaseModel):
    archived: int
    failed: int
    errors: list[BulkItemErrorRes] = Field(default_factory=list)


class BulkDeleteRes(BaseModel):
    deleted: int
    failed: int
    errors: list[BulkItemErrorRes] = Field(default_factory=list)


class DownloadUrlRes(BaseModel):
    url: str
    file_name: str
    mime_type: str
    expires_in: int


class DocumentStatsRes(BaseModel):
    total: int
    total_size: int
    total_size_formatted: str
    by_status: dict[str, int] = Field(default_factory=dict)
    by_workspace: dict[str, int] = Field(default_factory=dict)

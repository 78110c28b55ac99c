"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/documents.py
===============================================================================

Name:
    Documents Router

Responsibilities:
    - Endpoints HTTP para documentos (upload/list/get/update/status/archive/
      delete/download/content/stats + operaciones bulk).
    - Validaciones de borde (MIME, límite de tamaño, campos JSON de form-data).
    - Mapeo de DocumentError -> RFC7807.
    - Convertir entidades de dominio -> DTOs de response.

Collaborators:
    - application.usecases.documents
    - identity.auth_users.require_principal (Principal explícito)
    - schemas.documents
    - container factories

Notas:
    - Las rutas estáticas (/documents/stats, /documents/bulk,
      /documents/archive/bulk) se declaran antes que /documents/{document_id}.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.activity import RequestMeta
from app.application.usecases import (
    ArchiveDocumentUseCase,
    BulkArchiveDocumentsUseCase,
    BulkDeleteDocumentsUseCase,
    ChangeDocumentStatusUseCase,
    DeleteDocumentUseCase,
    DownloadDocumentUseCase,
    FetchDocumentContentUseCase,
    GetDocumentStatsUseCase,
    GetDocumentUseCase,
    ListDocumentsUseCase,
    UpdateDocumentMetadataUseCase,
    UploadDocumentInput,
    UploadDocumentUseCase,
)
from app.application.usecases.documents import (
    BulkItemError,
    ChangeDocumentStatusResult,
    ListDocumentsResult,
)
from app.application.usecases.documents.list_documents import DEFAULT_LIMIT, MAX_LIMIT
from app.container import (
    get_archive_document_use_case,
    get_bulk_archive_documents_use_case,
    get_bulk_delete_documents_use_case,
    get_change_document_status_use_case,
    get_delete_document_use_case,
    get_document_stats_use_case,
    get_download_document_use_case,
    get_fetch_document_content_use_case,
    get_get_document_use_case,
    get_list_documents_use_case,
    get_update_document_metadata_use_case,
    get_upload_document_use_case,
)
from app.crosscutting.config import get_settings
from app.crosscutting.content_disposition import build_content_disposition
from app.crosscutting.error_responses import validation_error
from app.crosscutting.pagination import clamp_limit, resolve_offset
from app.domain.entities import Document
from app.domain.value_objects import DocumentStats, format_file_size
from app.domain.workspace_policy import Principal
from app.domain.workspaces import parse_workspace
from app.identity.auth_users import require_principal
from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from ..dependencies import (
    build_document_filters,
    parse_document_sort,
    parse_facets,
    parse_json_object,
    parse_tags,
    read_upload_bytes,
    request_meta,
    validate_mime_type,
)
from ..error_mapping import raise_document_error
from ..schemas.documents import (
    ArchiveReq,
    BulkArchiveRes,
    BulkDeleteRes,
    BulkIdsReq,
    BulkItemErrorRes,
    ChangeStatusReq,
    DeleteDocumentRes,
    DocumentRes,
    DocumentsListRes,
    DocumentStatsRes,
    DownloadUrlRes,
    StatusChangeRes,
    UpdateDocumentMetadataReq,
)

router = APIRouter()

_settings = get_settings()


# =============================================================================
# Mappers (dominio -> DTO)
# =============================================================================


def to_document_res(doc: Document) -> DocumentRes:
    return DocumentRes(
        id=doc.id,
        title=doc.title,
        description=doc.description,
        workspace=doc.workspace,
        status=doc.status,
        tags=list(doc.tags or []),
        facets=dict(doc.facets or {}),
        metadata=dict(doc.metadata or {}),
        created_by=doc.created_by,
        file_name=doc.file_name,
        file_size=doc.file_size,
        file_size_formatted=format_file_size(doc.file_size),
        mime_type=doc.mime_type,
        file_hash=doc.file_hash,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
        stored_at=doc.stored_at,
        archived_at=doc.archived_at,
    )


def to_documents_list_res(
    result: ListDocumentsResult, *, limit: int, offset: int
) -> DocumentsListRes:
    return DocumentsListRes(
        documents=[to_document_res(doc) for doc in result.documents],
        total=result.total,
        limit=limit,
        offset=offset,
        has_more=result.has_more,
        next_cursor=result.next_cursor,
    )


def to_stats_res(stats: DocumentStats) -> DocumentStatsRes:
    return DocumentStatsRes(**stats.to_dict())


def _to_item_errors(errors: list[BulkItemError]) -> list[BulkItemErrorRes]:
    return [BulkItemErrorRes(document_id=e.document_id, error=e.error) for e in errors]


def _to_status_change_res(result: ChangeDocumentStatusResult) -> StatusChangeRes:
    if result.error is not None:
        raise_document_error(result.error)
    assert result.document is not None and result.previous_status is not None
    return StatusChangeRes(
        document=to_document_res(result.document),
        previous_status=result.previous_status,
    )


# =============================================================================
# Alta
# =============================================================================


@router.post(
    "/documents/upload",
    response_model=DocumentRes,
    status_code=201,
    tags=["documents"],
)
async def upload_document(
    file: UploadFile = File(...),
    title: str | None = Form(None),
    workspace: str | None = Form(None),
    description: str | None = Form(None),
    tags: str | None = Form(None),
    facets: str | None = Form(None),
    metadata: str | None = Form(None),
    use_case: UploadDocumentUseCase = Depends(get_upload_document_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    mime_type = validate_mime_type(file.content_type)

    # R: workspace omitido => el workspace asignado al usuario.
    target_workspace = principal.workspace
    if workspace:
        parsed = parse_workspace(workspace)
        if parsed is None:
            raise validation_error(f"Unknown workspace: {workspace}")
        target_workspace = parsed

    content = await read_upload_bytes(file, max_bytes=_settings.max_upload_bytes)

    file_name = file.filename or "document"
    input_data = UploadDocumentInput(
        principal=principal,
        workspace=target_workspace,
        title=(title or "").strip() or file_name,
        file_name=file_name,
        mime_type=mime_type,
        content=content,
        description=description,
        tags=parse_tags(tags),
        facets=parse_facets(facets),
        metadata=parse_json_object(metadata, field="metadata"),
        meta=meta,
    )

    result = use_case.execute(input_data)
    if result.error is not None:
        raise_document_error(result.error)
    assert result.document is not None
    return to_document_res(result.document)


# =============================================================================
# Lectura
# =============================================================================


@router.get("/documents", response_model=DocumentsListRes, tags=["documents"])
def list_documents(
    workspace: str | None = None,
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
    use_case: ListDocumentsUseCase = Depends(get_list_documents_use_case),
    principal: Principal = Depends(require_principal),
):
    filters = build_document_filters(
        workspace=workspace,
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


@router.get("/documents/stats", response_model=DocumentStatsRes, tags=["documents"])
def document_stats(
    workspace: str | None = None,
    use_case: GetDocumentStatsUseCase = Depends(get_document_stats_use_case),
    principal: Principal = Depends(require_principal),
):
    target = None
    if workspace:
        target = parse_workspace(workspace)
        if target is None:
            raise validation_error(f"Unknown workspace: {workspace}")

    result = use_case.execute(principal=principal, workspace=target)
    if result.error is not None:
        raise_document_error(result.error)
    assert result.stats is not None
    return to_stats_res(result.stats)


# =============================================================================
# Bulk (antes de /documents/{document_id})
# =============================================================================


@router.put(
    "/documents/archive/bulk", response_model=BulkArchiveRes, tags=["documents"]
)
def bulk_archive_documents(
    req: BulkIdsReq,
    use_case: BulkArchiveDocumentsUseCase = Depends(get_bulk_archive_documents_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal,
        document_ids=req.document_ids,
        reason=req.reason,
        meta=meta,
    )
    if result.error is not None:
        raise_document_error(result.error)
    return BulkArchiveRes(
        archived=result.archived,
        failed=result.failed,
        errors=_to_item_errors(result.errors),
    )


@router.delete("/documents/bulk", response_model=BulkDeleteRes, tags=["documents"])
def bulk_delete_documents(
    req: BulkIdsReq,
    use_case: BulkDeleteDocumentsUseCase = Depends(get_bulk_delete_documents_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal, document_ids=req.document_ids, meta=meta
    )
    if result.error is not None:
        raise_document_error(result.error)
    return BulkDeleteRes(
        deleted=result.deleted,
        failed=result.failed,
        errors=_to_item_errors(result.errors),
    )


# =============================================================================
# Documento individual
# =============================================================================


@router.get(
    "/documents/{document_id}", response_model=DocumentRes, tags=["documents"]
)
def get_document(
    document_id: UUID,
    use_case: GetDocumentUseCase = Depends(get_get_document_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(principal=principal, document_id=document_id, meta=meta)
    if result.error is not None:
        raise_document_error(result.error)
    assert result.document is not None
    return to_document_res(result.document)


@router.patch(
    "/documents/{document_id}", response_model=DocumentRes, tags=["documents"]
)
def update_document(
    document_id: UUID,
    req: UpdateDocumentMetadataReq,
    use_case: UpdateDocumentMetadataUseCase = Depends(
        get_update_document_metadata_use_case
    ),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal,
        document_id=document_id,
        title=req.title,
        description=req.description,
        tags=req.tags,
        facets=req.facets,
        meta=meta,
    )
    if result.error is not None:
        raise_document_error(result.error)
    assert result.document is not None
    return to_document_res(result.document)


@router.put(
    "/documents/{document_id}/status",
    response_model=StatusChangeRes,
    tags=["documents"],
)
def change_document_status(
    document_id: UUID,
    req: ChangeStatusReq,
    use_case: ChangeDocumentStatusUseCase = Depends(
        get_change_document_status_use_case
    ),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal,
        document_id=document_id,
        new_status=req.status,
        reason=req.reason,
        meta=meta,
    )
    return _to_status_change_res(result)


@router.put(
    "/documents/{document_id}/archive",
    response_model=StatusChangeRes,
    tags=["documents"],
)
def archive_document(
    document_id: UUID,
    req: ArchiveReq | None = None,
    use_case: ArchiveDocumentUseCase = Depends(get_archive_document_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal,
        document_id=document_id,
        reason=req.reason if req else None,
        meta=meta,
    )
    return _to_status_change_res(result)


@router.delete(
    "/documents/{document_id}", response_model=DeleteDocumentRes, tags=["documents"]
)
def delete_document(
    document_id: UUID,
    use_case: DeleteDocumentUseCase = Depends(get_delete_document_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(principal=principal, document_id=document_id, meta=meta)
    if result.error is not None:
        raise_document_error(result.error)
    return DeleteDocumentRes(deleted=result.deleted)


# =============================================================================
# Descarga
# =============================================================================


@router.get(
    "/documents/{document_id}/download",
    response_model=DownloadUrlRes,
    tags=["documents"],
)
def download_document(
    document_id: UUID,
    expires_in: int | None = Query(None, ge=1),
    inline: bool = False,
    use_case: DownloadDocumentUseCase = Depends(get_download_document_use_case),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal,
        document_id=document_id,
        expires_in=expires_in,
        inline=inline,
        meta=meta,
    )
    if result.error is not None:
        raise_document_error(result.error)
    assert result.url is not None
    return DownloadUrlRes(
        url=result.url,
        file_name=result.file_name or "",
        mime_type=result.mime_type or "application/octet-stream",
        expires_in=result.expires_in,
    )


@router.get("/documents/{document_id}/content", tags=["documents"])
def document_content(
    document_id: UUID,
    inline: bool = False,
    use_case: FetchDocumentContentUseCase = Depends(
        get_fetch_document_content_use_case
    ),
    principal: Principal = Depends(require_principal),
    meta: RequestMeta = Depends(request_meta),
):
    result = use_case.execute(
        principal=principal, document_id=document_id, inline=inline, meta=meta
    )
    if result.error is not None:
        raise_document_error(result.error)

    return Response(
        content=result.content or b"",
        media_type=result.mime_type or "application/octet-stream",
        headers={
            "Content-Disposition": build_content_disposition(
                result.file_name, inline=inline
            )
        },
    )

"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias y helpers comunes)
===============================================================================

Responsabilidades:
  - Centralizar helpers que se repiten en routers:
      * parseo de campos JSON de form-data (tags/facets/metadata)
      * validación MIME (415 temprano)
      * lectura de UploadFile con límite (anti OOM)
      * RequestMeta (ip/user-agent) para el log de actividad
      * filtros y orden de listados (query params -> DocumentFilters/DocumentSort)
      * parseo de workspace en path params

Patrones aplicados:
  - DRY + Single Responsibility: helpers chicos, reutilizables.
  - Fail-fast: validar temprano y cortar requests peligrosas.

Colaboradores:
  - crosscutting.config.get_settings
  - crosscutting.error_responses (RFC7807 factories)
  - application.usecases.documents.document_rules (allowlist MIME)
  - domain.visibility.DocumentFilters / domain.value_objects.DocumentSort
===============================================================================
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from app.activity import RequestMeta
from app.application.usecases.documents.document_rules import (
    is_allowed_mime_type,
    normalize_mime_type,
)
from app.crosscutting.config import get_settings
from app.crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    payload_too_large,
    unsupported_media,
    validation_error,
)
from app.domain.entities import DocumentStatus
from app.domain.value_objects import DocumentSort
from app.domain.visibility import DocumentFilters
from app.domain.workspaces import WorkspaceType, parse_workspace
from fastapi import Request, UploadFile

# Settings globales (cacheados por lru_cache dentro de get_settings)
_settings = get_settings()

_UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1MB


# -----------------------------------------------------------------------------
# Form-data
# -----------------------------------------------------------------------------
def parse_json_object(raw: str | None, *, field: str) -> dict[str, Any]:
    """
    Parseo seguro de un objeto JSON enviado como campo de form-data.

    Reglas:
      - vacío => {}
      - JSON inválido => 422
      - JSON válido pero no objeto => 422
    """
    if not raw or not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        raise validation_error(f"{field} must be valid JSON.")
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise validation_error(f"{field} must be a JSON object.")
    return payload


def parse_facets(raw: str | None) -> dict[str, str]:
    payload = parse_json_object(raw, field="facets")
    for key, value in payload.items():
        if not isinstance(value, str):
            raise validation_error(f"Facet '{key}' must be a string.")
    return payload


def parse_tags(raw: str | None) -> list[str]:
    """
    Tags desde form-data: lista JSON (`["a","b"]`) o separados por coma.
    """
    if not raw or not raw.strip():
        return []
    value = raw.strip()
    if value.startswith("["):
        try:
            payload = json.loads(value)
        except json.JSONDecodeError:
            raise validation_error("tags must be a JSON array or a comma-separated list.")
        if not isinstance(payload, list) or not all(
            isinstance(tag, str) for tag in payload
        ):
            raise validation_error("tags must be a list of strings.")
        return payload
    return [tag for tag in value.split(",")]


def validate_mime_type(mime_type: str | None) -> str:
    """Valida y normaliza MIME type del upload (415)."""
    value = normalize_mime_type(mime_type)
    if not is_allowed_mime_type(value):
        raise unsupported_media(f"Unsupported file type: {value or 'unknown'}")
    return value


async def read_upload_bytes(file: UploadFile, *, max_bytes: int | None = None) -> bytes:
    """
    Lee un UploadFile en memoria respetando un límite duro.

    Nota:
      - Lectura por chunks: cortamos apenas se pasa el límite (413).
    """
    limit = max_bytes if max_bytes is not None else _settings.max_upload_bytes
    if limit <= 0:
        return await file.read()

    data = bytearray()
    while True:
        piece = await file.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        data.extend(piece)
        if len(data) > limit:
            raise payload_too_large(f"{limit} bytes")

    return bytes(data)


# -----------------------------------------------------------------------------
# Request meta (actividad)
# -----------------------------------------------------------------------------
def request_meta(request: Request) -> RequestMeta:
    """Dependency: ip + user-agent del cliente (primer hop de X-Forwarded-For)."""
    forwarded = request.headers.get("x-forwarded-for", "")
    ip_address = forwarded.split(",", 1)[0].strip() or None
    if ip_address is None and request.client is not None:
        ip_address = request.client.host
    return RequestMeta(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )


# -----------------------------------------------------------------------------
# Listados
# -----------------------------------------------------------------------------
def parse_workspace_param(value: str) -> WorkspaceType:
    """Workspace en path param; desconocido => 404."""
    workspace = parse_workspace(value)
    if workspace is None:
        raise AppHTTPException(
            404, ErrorCode.NOT_FOUND, f"Workspace '{value}' not found"
        )
    return workspace


def parse_document_sort(sort_by: str | None, sort_order: str | None) -> DocumentSort:
    try:
        return DocumentSort(
            field=(sort_by or "created_at").strip(),
            order=(sort_order or "desc").strip().lower(),  # type: ignore[arg-type]
        )
    except ValueError as exc:
        raise validation_error(str(exc))


def parse_statuses(values: list[str] | None) -> tuple[DocumentStatus, ...]:
    statuses: list[DocumentStatus] = []
    for raw in values or []:
        for part in raw.split(","):
            value = part.strip().lower()
            if not value:
                continue
            try:
                status = DocumentStatus(value)
            except ValueError:
                raise validation_error(
                    "status must be one of: draft, stored, archived."
                )
            if status not in statuses:
                statuses.append(status)
    return tuple(statuses)


def as_utc(value: datetime | None) -> datetime | None:
    """Fechas naive del query string se interpretan como UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def build_document_filters(
    *,
    workspace: str | None = None,
    status: list[str] | None = None,
    created_by: UUID | None = None,
    mime_type: str | None = None,
    tags: list[str] | None = None,
    facets: str | None = None,
    search: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> DocumentFilters:
    """Query params -> DocumentFilters (422 ante valores inválidos)."""
    workspace_value: WorkspaceType | None = None
    if workspace:
        workspace_value = parse_workspace(workspace)
        if workspace_value is None:
            raise validation_error(f"Unknown workspace: {workspace}")

    date_from = as_utc(date_from)
    date_to = as_utc(date_to)
    if date_from and date_to and date_from > date_to:
        raise validation_error("date_from must be before date_to.")

    clean_tags = tuple(
        tag.strip() for raw in (tags or []) for tag in raw.split(",") if tag.strip()
    )
    return DocumentFilters(
        workspace=workspace_value,
        statuses=parse_statuses(status),
        created_by=created_by,
        mime_type=normalize_mime_type(mime_type) or None,
        tags=clean_tags,
        facets=parse_facets(facets),
        search=(search or "").strip() or None,
        date_from=date_from,
        date_to=date_to,
    )

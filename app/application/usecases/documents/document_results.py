"""
===============================================================================
DOCUMENT USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    Document Use Case Results

Business Goal:
    Proveer tipos consistentes de resultados y errores para los casos de uso
    de documentos (alta, lectura, listado, descarga, ciclo de vida, borrado).

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de propagar excepciones.
    - Facilita:
        * mapeo uniforme a HTTP (status codes y payloads)
        * testeo de flujos por resultado (sin mocks de HTTP)
    - El campo `resource` en DocumentError permite que errores reutilizables
      indiquen qué recurso falló.

-------------------------------------------------------------------------------
CRC CARD (Module-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    document_results models (module)

Responsibilities:
    - Definir DocumentErrorCode como conjunto estable de categorías de error.
    - Definir DocumentError como contrato mínimo de error.
    - Definir DTOs de resultados por caso de uso.
    - Fábricas de errores frecuentes (not found / forbidden / ...).

Collaborators:
    - domain.entities: Document, DocumentStatus
    - domain.value_objects: DocumentStats
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, List
from uuid import UUID

from ....domain.entities import Document, DocumentStatus
from ....domain.value_objects import DocumentStats

RESOURCE_DOCUMENT: Final[str] = "Document"
MSG_DOCUMENT_NOT_FOUND: Final[str] = "Document not found"


class DocumentErrorCode(str, Enum):
    """
    Categorías de error para casos de uso de Documentos.

    Códigos:
      - VALIDATION_ERROR: input inválido/incompleto.
      - FORBIDDEN: actor no autorizado para la operación.
      - NOT_FOUND: recurso inexistente o no visible en el contexto.
      - CONFLICT: colisión de reglas de negocio (transición inválida, cambio concurrente).
      - SERVICE_UNAVAILABLE: dependencia externa caída o degradada (storage).
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


@dataclass(frozen=True)
class DocumentError:
    """
    Error de caso de uso.

    Campos:
      - code: DocumentErrorCode (categoría estable)
      - message: mensaje humano (UI/logs); para FORBIDDEN lleva la razón
      - resource: nombre del recurso afectado (opcional)
    """

    code: DocumentErrorCode
    message: str
    resource: str | None = None


# =============================================================================
# Fábricas de errores
# =============================================================================


def document_not_found() -> DocumentError:
    return DocumentError(
        code=DocumentErrorCode.NOT_FOUND,
        message=MSG_DOCUMENT_NOT_FOUND,
        resource=RESOURCE_DOCUMENT,
    )


def forbidden(reason: str | None, *, resource: str = RESOURCE_DOCUMENT) -> DocumentError:
    return DocumentError(
        code=DocumentErrorCode.FORBIDDEN,
        message=reason or "Forbidden",
        resource=resource,
    )


def validation_error(message: str) -> DocumentError:
    return DocumentError(code=DocumentErrorCode.VALIDATION_ERROR, message=message)


def conflict(message: str) -> DocumentError:
    return DocumentError(
        code=DocumentErrorCode.CONFLICT, message=message, resource=RESOURCE_DOCUMENT
    )


def storage_unavailable(message: str = "File storage unavailable") -> DocumentError:
    return DocumentError(
        code=DocumentErrorCode.SERVICE_UNAVAILABLE, message=message, resource="Storage"
    )


# =============================================================================
# Resultados
# =============================================================================


@dataclass
class UploadDocumentResult:
    document: Document | None = None
    error: DocumentError | None = None


@dataclass
class GetDocumentResult:
    """
    Contrato:
      - Éxito: document != None y error == None
      - Falla:  document == None y error != None
    """

    document: Document | None = None
    error: DocumentError | None = None


@dataclass
class ListDocumentsResult:
    documents: List[Document] = field(default_factory=list)
    total: int = 0
    has_more: bool = False
    next_cursor: str | None = None
    error: DocumentError | None = None


@dataclass
class DownloadDocumentResult:
    """
    URL presignada para descarga directa desde el storage.

    expires_in: TTL efectivo en segundos (ya acotado al máximo permitido).
    """

    url: str | None = None
    file_name: str | None = None
    mime_type: str | None = None
    expires_in: int = 0
    error: DocumentError | None = None


@dataclass
class DocumentContentResult:
    content: bytes | None = None
    file_name: str | None = None
    mime_type: str | None = None
    error: DocumentError | None = None


@dataclass
class UpdateDocumentMetadataResult:
    document: Document | None = None
    error: DocumentError | None = None


@dataclass
class ChangeDocumentStatusResult:
    document: Document | None = None
    previous_status: DocumentStatus | None = None
    error: DocumentError | None = None


@dataclass
class DeleteDocumentResult:
    deleted: bool = False
    error: DocumentError | None = None


@dataclass(frozen=True)
class BulkItemError:
    document_id: UUID
    error: str


@dataclass
class BulkArchiveResult:
    archived: int = 0
    failed: int = 0
    errors: List[BulkItemError] = field(default_factory=list)
    error: DocumentError | None = None


@dataclass
class BulkDeleteResult:
    deleted: int = 0
    failed: int = 0
    errors: List[BulkItemError] = field(default_factory=list)
    error: DocumentError | None = None


@dataclass
class DocumentStatsResult:
    stats: DocumentStats | None = None
    error: DocumentError | None = None

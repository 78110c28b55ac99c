"""
===============================================================================
DOCUMENT USE CASES PACKAGE (Public API / Exports)
===============================================================================

Name:
    Document Use Cases (package exports)

Business Goal:
    Exponer una API pública, clara y estable para la capa application respecto
    a casos de uso de Documentos y sus resultados/errores asociados.

-------------------------------------------------------------------------------
CRC CARD (Module-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    document usecases package (__init__.py)

Responsibilities:
    - Re-exportar los casos de uso de Document (alta, lectura, listado,
      descarga, metadata, ciclo de vida, borrado, estadísticas).
    - Re-exportar resultados y tipos de error.

Collaborators:
    - Módulos internos del paquete.
===============================================================================
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Use Cases
# -----------------------------------------------------------------------------
from .archive_document import ArchiveDocumentUseCase, BulkArchiveDocumentsUseCase
from .delete_document import BulkDeleteDocumentsUseCase, DeleteDocumentUseCase
from .document_lifecycle import ChangeDocumentStatusUseCase, DocumentLifecycleEngine

# -----------------------------------------------------------------------------
# Result models
# -----------------------------------------------------------------------------
from .document_results import (
    BulkArchiveResult,
    BulkDeleteResult,
    BulkItemError,
    ChangeDocumentStatusResult,
    DeleteDocumentResult,
    DocumentContentResult,
    DocumentError,
    DocumentErrorCode,
    DocumentStatsResult,
    DownloadDocumentResult,
    GetDocumentResult,
    ListDocumentsResult,
    UpdateDocumentMetadataResult,
    UploadDocumentResult,
)
from .document_stats import GetDocumentStatsUseCase
from .download_document import DownloadDocumentUseCase, FetchDocumentContentUseCase
from .get_document import GetDocumentUseCase
from .list_documents import ListDocumentsUseCase, VisibilityPolicy
from .update_document_metadata import UpdateDocumentMetadataUseCase
from .upload_document import UploadDocumentInput, UploadDocumentUseCase

__all__ = [
    # Use Cases
    "UploadDocumentUseCase",
    "UploadDocumentInput",
    "GetDocumentUseCase",
    "ListDocumentsUseCase",
    "VisibilityPolicy",
    "DownloadDocumentUseCase",
    "FetchDocumentContentUseCase",
    "UpdateDocumentMetadataUseCase",
    "DocumentLifecycleEngine",
    "ChangeDocumentStatusUseCase",
    "ArchiveDocumentUseCase",
    "BulkArchiveDocumentsUseCase",
    "DeleteDocumentUseCase",
    "BulkDeleteDocumentsUseCase",
    "GetDocumentStatsUseCase",
    # Results
    "UploadDocumentResult",
    "GetDocumentResult",
    "ListDocumentsResult",
    "DownloadDocumentResult",
    "DocumentContentResult",
    "UpdateDocumentMetadataResult",
    "ChangeDocumentStatusResult",
    "DeleteDocumentResult",
    "BulkArchiveResult",
    "BulkDeleteResult",
    "BulkItemError",
    "DocumentStatsResult",
    # Errors
    "DocumentError",
    "DocumentErrorCode",
]

"""
===============================================================================
USE CASE: Update Document Metadata (título, descripción, tags, facets)
===============================================================================

Name:
    Update Document Metadata Use Case

Business Goal:
    Editar la metadata de un documento visible, respetando:
      - permisos (creador, administrador o workspace propio con documents.update)
      - documentos archivados son de sólo lectura (CONFLICT)
      - mismas reglas de validación que el upload

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    UpdateDocumentMetadataUseCase

Responsibilities:
    - Validar visibilidad y permiso de edición.
    - Validar campos provistos (None = sin cambio).
    - Persistir y registrar actividad `updated` con los campos modificados.

Collaborators:
    - DocumentRepository.get_document / update_document_metadata
    - domain.capabilities.derive_capabilities
    - domain.facets.validate_facets
===============================================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List
from uuid import UUID

from ....activity import RequestMeta, record_activity
from ....crosscutting.metrics import record_permission_denied
from ....domain.capabilities import derive_capabilities
from ....domain.entities import ActivityAction, Document
from ....domain.facets import normalize_facets, validate_facets
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder
from ....domain.visibility import is_document_visible
from ....domain.workspace_policy import Principal
from ....identity.users import UserRole, parse_role
from .document_results import (
    UpdateDocumentMetadataResult,
    conflict,
    document_not_found,
    forbidden,
    validation_error,
)
from .document_rules import (
    normalize_tags,
    validate_description,
    validate_tags,
    validate_title,
)


def _can_edit(principal: Principal, document: Document) -> bool:
    if parse_role(principal.role) == UserRole.ADMINISTRADOR:
        return True
    if document.is_created_by(principal.id):
        return True
    capabilities = derive_capabilities(principal.role, principal.workspace)
    return capabilities.documents.update and principal.workspace == document.workspace


class UpdateDocumentMetadataUseCase:
    """
    Use Case (Application Service / Command):
        Actualiza metadata editable de un documento.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        *,
        activity_recorder: ActivityRecorder | None = None,
    ) -> None:
        self._documents = repository
        self._activity = activity_recorder

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        title: str | None = None,
        description: str | None = None,
        tags: List[str] | None = None,
        facets: Dict[str, str] | None = None,
        meta: RequestMeta | None = None,
    ) -> UpdateDocumentMetadataResult:
        # ---------------------------------------------------------------------
        # 1) Existencia + visibilidad.
        # ---------------------------------------------------------------------
        document = self._documents.get_document(document_id)
        if document is None or not is_document_visible(principal, document):
            return UpdateDocumentMetadataResult(error=document_not_found())

        # ---------------------------------------------------------------------
        # 2) Permiso + estado editable.
        # ---------------------------------------------------------------------
        if not _can_edit(principal, document):
            record_permission_denied("update_metadata")
            return UpdateDocumentMetadataResult(
                error=forbidden("Insufficient permissions to update this document")
            )
        if document.is_archived:
            return UpdateDocumentMetadataResult(
                error=conflict("Archived documents cannot be modified")
            )

        # ---------------------------------------------------------------------
        # 3) Validación de los campos provistos.
        # ---------------------------------------------------------------------
        clean_tags = normalize_tags(tags) if tags is not None else None
        clean_facets = normalize_facets(facets) if facets is not None else None

        message = None
        if title is not None:
            message = validate_title(title)
        if message is None and description is not None:
            message = validate_description(description)
        if message is None and clean_tags is not None:
            message = validate_tags(clean_tags)
        if message is None and clean_facets is not None:
            facet_errors = validate_facets(document.workspace, clean_facets)
            if facet_errors:
                message = "; ".join(facet_errors)
        if message is not None:
            return UpdateDocumentMetadataResult(error=validation_error(message))

        changes: Dict[str, object] = {}
        if title is not None:
            changes["title"] = title.strip()
        if description is not None:
            changes["description"] = description
        if clean_tags is not None:
            changes["tags"] = clean_tags
        if clean_facets is not None:
            changes["facets"] = clean_facets
        if not changes:
            return UpdateDocumentMetadataResult(document=document)

        # ---------------------------------------------------------------------
        # 4) Persistir.
        # ---------------------------------------------------------------------
        now = datetime.now(timezone.utc)
        updated = self._documents.update_document_metadata(
            document_id, updated_at=now, **changes
        )
        if not updated:
            return UpdateDocumentMetadataResult(error=document_not_found())

        record_activity(
            self._activity,
            user_id=principal.id,
            action=ActivityAction.UPDATED,
            document_id=document.id,
            workspace=document.workspace,
            details={"fields": sorted(changes)},
            meta=meta,
        )

        return UpdateDocumentMetadataResult(
            document=replace(document, updated_at=now, **changes)
        )

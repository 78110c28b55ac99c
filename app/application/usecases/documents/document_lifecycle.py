"""
===============================================================================
USE CASE: Document Lifecycle Engine (draft -> stored -> archived)
===============================================================================

Name:
    DocumentLifecycleEngine / ChangeDocumentStatusUseCase

Business Goal:
    Ejecutar cambios de estado de documentos de forma segura:
      - gate de permisos (rol x workspace x autoría) ANTES de la tabla
      - tabla de transiciones según la policy del despliegue
      - timestamps stored_at / archived_at coherentes con el estado
      - escritura condicional: sin lost updates ante cambios concurrentes
      - actividad registrada best-effort (nunca bloquea ni falla la operación)

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    DocumentLifecycleEngine

Responsibilities:
    - Orquestar gate -> tabla -> timestamps -> compare-and-set -> actividad.
    - Traducir cada rechazo a DocumentError (FORBIDDEN / VALIDATION / CONFLICT).
    - Emitir métricas de transición y de permisos denegados.

Collaborators:
    - domain.lifecycle: can_user_change_document_status, is_transition_allowed,
      status_timestamps, TransitionPolicy
    - DocumentRepository.transition_document_status (conditional write)
    - app.activity.record_activity (best-effort)
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Final
from uuid import UUID

from ....activity import RequestMeta, record_activity
from ....crosscutting.metrics import record_permission_denied, record_status_transition
from ....domain.entities import ActivityAction, Document, DocumentStatus
from ....domain.lifecycle import (
    TransitionPolicy,
    can_user_change_document_status,
    is_transition_allowed,
    status_timestamps,
)
from ....domain.repositories import DocumentRepository
from ....domain.services import ActivityRecorder
from ....domain.workspace_policy import Principal
from .document_results import (
    ChangeDocumentStatusResult,
    conflict,
    document_not_found,
    forbidden,
    validation_error,
)

logger = logging.getLogger(__name__)

MSG_CONCURRENT_CHANGE: Final[str] = "Document status changed concurrently"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentLifecycleEngine:
    """Motor de transiciones (stateless salvo dependencias)."""

    def __init__(
        self,
        documents: DocumentRepository,
        *,
        activity_recorder: ActivityRecorder | None = None,
        policy: TransitionPolicy = TransitionPolicy.CANONICAL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._documents = documents
        self._activity = activity_recorder
        self._policy = policy
        self._clock = clock

    @property
    def policy(self) -> TransitionPolicy:
        return self._policy

    def change_status(
        self,
        *,
        principal: Principal,
        document: Document,
        new_status: DocumentStatus,
        reason: str | None = None,
        activity_action: ActivityAction = ActivityAction.STATUS_CHANGED,
        meta: RequestMeta | None = None,
    ) -> ChangeDocumentStatusResult:
        current = document.status
        labels = (current.value, new_status.value)

        # ---------------------------------------------------------------------
        # 1) Gate de permisos (siempre primero).
        # ---------------------------------------------------------------------
        decision = can_user_change_document_status(principal, document, new_status)
        if not decision.allowed:
            record_status_transition(*labels, "forbidden")
            record_permission_denied("change_status")
            logger.info(
                "Status change denied",
                extra={
                    "document_id": str(document.id),
                    "user_id": str(principal.id),
                    "reason": decision.reason,
                },
            )
            return ChangeDocumentStatusResult(error=forbidden(decision.reason))

        # ---------------------------------------------------------------------
        # 2) Mismo estado: no es una transición.
        # ---------------------------------------------------------------------
        if current == new_status:
            record_status_transition(*labels, "rejected")
            return ChangeDocumentStatusResult(
                error=validation_error(f"Document is already in status '{current.value}'")
            )

        # ---------------------------------------------------------------------
        # 3) Tabla de transiciones de la policy vigente.
        # ---------------------------------------------------------------------
        if not is_transition_allowed(self._policy, current, new_status):
            record_status_transition(*labels, "rejected")
            return ChangeDocumentStatusResult(
                error=conflict(
                    f"Invalid status transition from '{current.value}' to '{new_status.value}'"
                )
            )

        # ---------------------------------------------------------------------
        # 4) Timestamps + escritura condicional (compare-and-set sobre status).
        # ---------------------------------------------------------------------
        now = self._clock()
        stamps = status_timestamps(
            new_status, now, current_stored_at=document.stored_at
        )
        applied = self._documents.transition_document_status(
            document.id,
            expected_status=current,
            new_status=new_status,
            stored_at=stamps.stored_at,
            archived_at=stamps.archived_at,
            updated_at=now,
        )
        if not applied:
            record_status_transition(*labels, "conflict")
            logger.warning(
                "Concurrent status change detected",
                extra={"document_id": str(document.id), "expected_status": current.value},
            )
            return ChangeDocumentStatusResult(error=conflict(MSG_CONCURRENT_CHANGE))

        record_status_transition(*labels, "applied")
        updated = replace(
            document,
            status=new_status,
            stored_at=stamps.stored_at,
            archived_at=stamps.archived_at,
            updated_at=now,
        )

        # ---------------------------------------------------------------------
        # 5) Actividad (best-effort).
        # ---------------------------------------------------------------------
        record_activity(
            self._activity,
            user_id=principal.id,
            action=activity_action,
            document_id=document.id,
            workspace=document.workspace,
            details={
                "previousStatus": current.value,
                "newStatus": new_status.value,
                "reason": reason,
                "timestamp": now.isoformat(),
            },
            meta=meta,
        )

        logger.info(
            "Document status changed",
            extra={
                "document_id": str(document.id),
                "from_status": current.value,
                "to_status": new_status.value,
            },
        )
        return ChangeDocumentStatusResult(document=updated, previous_status=current)


class ChangeDocumentStatusUseCase:
    """PUT /documents/{id}/status: carga el documento y delega en el motor."""

    def __init__(
        self, documents: DocumentRepository, engine: DocumentLifecycleEngine
    ) -> None:
        self._documents = documents
        self._engine = engine

    def execute(
        self,
        *,
        principal: Principal,
        document_id: UUID,
        new_status: DocumentStatus,
        reason: str | None = None,
        meta: RequestMeta | None = None,
    ) -> ChangeDocumentStatusResult:
        document = self._documents.get_document(document_id)
        if document is None:
            return ChangeDocumentStatusResult(error=document_not_found())

        return self._engine.change_status(
            principal=principal,
            document=document,
            new_status=new_status,
            reason=reason,
            meta=meta,
        )

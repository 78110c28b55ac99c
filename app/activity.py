"""
===============================================================================
TARJETA CRC — app/activity.py (Registro de actividad best-effort)
===============================================================================

Responsabilidades:
  - Construir registros DocumentActivity de forma consistente.
  - Serializar/deserializar el payload que viaja por la cola (strings/JSON).
  - Registrar actividad sin bloquear ni romper la operación principal:
    cualquier falla del sink se loguea y se cuenta, nunca se propaga.

Colaboradores:
  - domain.services.ActivityRecorder (puerto)
  - domain.repositories.ActivityRepository (escritura directa)
  - infrastructure.queue.rq_queue.RQActivityRecorder (escritura encolada)
  - crosscutting.metrics.record_activity_failure

Reglas:
  - record_activity retorna bool; jamás lanza.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from .crosscutting.logger import logger
from .crosscutting.metrics import record_activity_failure
from .domain.entities import ActivityAction, DocumentActivity
from .domain.repositories import ActivityRepository
from .domain.services import ActivityRecorder
from .domain.workspaces import WorkspaceType


@dataclass(frozen=True)
class RequestMeta:
    """Datos del cliente que se adjuntan a la actividad (opcionales)."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# =============================================================================
# Payload de cola
# =============================================================================


def activity_to_payload(activity: DocumentActivity) -> Dict[str, Any]:
    """Representación serializable (solo tipos JSON) para RQ."""
    return {
        "id": str(activity.id),
        "user_id": str(activity.user_id),
        "action": activity.action.value,
        "document_id": str(activity.document_id) if activity.document_id else None,
        "workspace": activity.workspace.value if activity.workspace else None,
        "details": dict(activity.details or {}),
        "ip_address": activity.ip_address,
        "user_agent": activity.user_agent,
        "created_at": activity.created_at.isoformat(),
    }


def activity_from_payload(payload: Dict[str, Any]) -> DocumentActivity:
    """Inversa de activity_to_payload. ValueError/KeyError si el payload es inválido."""
    document_id = payload.get("document_id")
    workspace = payload.get("workspace")
    return DocumentActivity(
        id=UUID(payload["id"]),
        user_id=UUID(payload["user_id"]),
        action=ActivityAction(payload["action"]),
        document_id=UUID(document_id) if document_id else None,
        workspace=WorkspaceType(workspace) if workspace else None,
        details=dict(payload.get("details") or {}),
        ip_address=payload.get("ip_address"),
        user_agent=payload.get("user_agent"),
        created_at=datetime.fromisoformat(payload["created_at"]),
    )


# =============================================================================
# Recorders
# =============================================================================


class RepositoryActivityRecorder(ActivityRecorder):
    """Escritura directa al repositorio (sin Redis / tests)."""

    def __init__(self, repository: ActivityRepository) -> None:
        self._repository = repository

    def record(self, activity: DocumentActivity) -> None:
        self._repository.append(activity)


def build_activity(
    *,
    user_id: UUID,
    action: ActivityAction,
    document_id: UUID | None = None,
    workspace: WorkspaceType | None = None,
    details: Dict[str, Any] | None = None,
    meta: RequestMeta | None = None,
) -> DocumentActivity:
    meta = meta or RequestMeta()
    return DocumentActivity(
        id=uuid4(),
        user_id=user_id,
        action=action,
        document_id=document_id,
        workspace=workspace,
        details=dict(details or {}),
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
        created_at=datetime.now(timezone.utc),
    )


def record_activity(
    recorder: ActivityRecorder | None,
    *,
    user_id: UUID,
    action: ActivityAction,
    document_id: UUID | None = None,
    workspace: WorkspaceType | None = None,
    details: Dict[str, Any] | None = None,
    meta: RequestMeta | None = None,
) -> bool:
    """
    Registra actividad best-effort.

    Retorna True si el sink aceptó el registro; False si no hay sink o falló.
    """
    if recorder is None:
        return False

    activity = build_activity(
        user_id=user_id,
        action=action,
        document_id=document_id,
        workspace=workspace,
        details=details,
        meta=meta,
    )
    try:
        recorder.record(activity)
        return True
    except Exception as exc:
        record_activity_failure("enqueue")
        logger.warning(
            "Activity record failed",
            extra={
                "action": action.value,
                "document_id": str(document_id) if document_id else None,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return False

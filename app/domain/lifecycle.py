"""
===============================================================================
TARJETA CRC — domain/lifecycle.py
===============================================================================

Módulo:
    Reglas del Ciclo de Vida de Documentos (draft -> stored -> archived)

Responsabilidades:
    - Definir las tablas de transición (canónica y extendida).
    - Decidir si un Principal puede cambiar el estado de un documento.
    - Decidir permisos de borrado y archivado.
    - Calcular los timestamps asociados a cada estado.

Colaboradores:
    - domain.entities.Document / DocumentStatus
    - domain.workspace_policy: Principal + check_workspace_access
    - application/usecases/documents/document_lifecycle.py: orquesta el cambio.

Reglas (intención):
    - El gate de permisos se evalúa ANTES que la tabla de transiciones.
    - Una sola tabla rige por despliegue (TransitionPolicy).
    - Funciones puras: la escritura atómica vive en el repositorio.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final, Mapping

from ..identity.users import EXECUTIVE_ROLES, SECRETARY_ROLES, UserRole, parse_role
from .entities import Document, DocumentStatus
from .workspace_policy import Principal, check_workspace_access
from .workspaces import WorkspaceType


class TransitionPolicy(str, Enum):
    """Tabla de transiciones vigente."""

    CANONICAL = "canonical"
    EXTENDED = "extended"


CANONICAL_TRANSITIONS: Final[Mapping[DocumentStatus, frozenset[DocumentStatus]]] = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.STORED}),
    DocumentStatus.STORED: frozenset({DocumentStatus.ARCHIVED}),
    DocumentStatus.ARCHIVED: frozenset(),
}

# Ruta de restauración para creador/ejecutivos.
EXTENDED_TRANSITIONS: Final[Mapping[DocumentStatus, frozenset[DocumentStatus]]] = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.STORED, DocumentStatus.ARCHIVED}),
    DocumentStatus.STORED: frozenset({DocumentStatus.DRAFT, DocumentStatus.ARCHIVED}),
    DocumentStatus.ARCHIVED: frozenset({DocumentStatus.STORED}),
}


def transitions_for(
    policy: TransitionPolicy,
) -> Mapping[DocumentStatus, frozenset[DocumentStatus]]:
    if policy == TransitionPolicy.EXTENDED:
        return EXTENDED_TRANSITIONS
    return CANONICAL_TRANSITIONS


def is_transition_allowed(
    policy: TransitionPolicy,
    current: DocumentStatus,
    target: DocumentStatus,
) -> bool:
    """True si la tabla de la policy permite current -> target."""
    return target in transitions_for(policy).get(current, frozenset())


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None


_ALLOW: Final[PermissionDecision] = PermissionDecision(allowed=True)

REASON_STATUS_FORBIDDEN: Final[str] = "Insufficient permissions to change document status"

# Transiciones que el creador puede ejecutar sin mirar el rol.
_CREATOR_TRANSITIONS: Final[frozenset[tuple[DocumentStatus, DocumentStatus]]] = (
    frozenset(
        {
            (DocumentStatus.DRAFT, DocumentStatus.STORED),
            (DocumentStatus.STORED, DocumentStatus.DRAFT),
            (DocumentStatus.DRAFT, DocumentStatus.ARCHIVED),
            (DocumentStatus.STORED, DocumentStatus.ARCHIVED),
            (DocumentStatus.ARCHIVED, DocumentStatus.ARCHIVED),
            (DocumentStatus.ARCHIVED, DocumentStatus.STORED),
        }
    )
)


# =============================================================================
# Gate de cambio de estado
# =============================================================================


def can_user_change_document_status(
    principal: Principal | None,
    document: Document,
    new_status: DocumentStatus,
) -> PermissionDecision:
    """Gate de permisos del cambio de estado (primera regla gana)."""
    if principal is None:
        return PermissionDecision(allowed=False, reason="User not found")

    role = parse_role(principal.role)
    if role == UserRole.ADMINISTRADOR:
        return _ALLOW

    # Creador: solo ciertos pares; si no aplica, sigue evaluando por rol.
    if document.is_created_by(principal.id):
        if (document.status, new_status) in _CREATOR_TRANSITIONS:
            return _ALLOW

    access = check_workspace_access(principal, document.workspace)
    if not access.has_access:
        return PermissionDecision(allowed=False, reason=access.reason)

    if role in EXECUTIVE_ROLES:
        return _ALLOW

    if role in SECRETARY_ROLES:
        if principal.workspace == document.workspace:
            return _ALLOW
        return PermissionDecision(allowed=False, reason=REASON_STATUS_FORBIDDEN)

    if role == UserRole.INTENDENTE:
        if document.workspace == WorkspaceType.INTENDENCIA:
            return _ALLOW
        return PermissionDecision(allowed=False, reason=REASON_STATUS_FORBIDDEN)

    if role == UserRole.CF_MEMBER:
        if document.workspace == WorkspaceType.COMISIONES_CF:
            return _ALLOW
        return PermissionDecision(allowed=False, reason=REASON_STATUS_FORBIDDEN)

    return PermissionDecision(allowed=False, reason=REASON_STATUS_FORBIDDEN)


# =============================================================================
# Borrado / archivado
# =============================================================================


def can_delete_document(
    principal: Principal | None, document: Document
) -> PermissionDecision:
    """Reglas de borrado físico (fila + archivo)."""
    if principal is None:
        return PermissionDecision(allowed=False, reason="User not found")

    role = parse_role(principal.role)
    is_creator = document.is_created_by(principal.id)
    not_archived = document.status != DocumentStatus.ARCHIVED

    if role == UserRole.ADMINISTRADOR:
        return _ALLOW
    if is_creator and document.status == DocumentStatus.DRAFT:
        return _ALLOW
    if role in SECRETARY_ROLES and principal.workspace == document.workspace:
        if not_archived:
            return _ALLOW
    if role in EXECUTIVE_ROLES and not_archived:
        return _ALLOW

    role_label = role.value if role is not None else str(principal.role)
    created_by = "you" if is_creator else "another user"
    return PermissionDecision(
        allowed=False,
        reason=(
            f"User with role {role_label} cannot delete this document. "
            f"Document status: {document.status.value}, Created by: {created_by}"
        ),
    )


def can_archive_document(
    principal: Principal | None, document: Document
) -> PermissionDecision:
    """Reglas previas al archivado (el gate de estado se evalúa después)."""
    if principal is None:
        return PermissionDecision(allowed=False, reason="User not found")

    if document.status != DocumentStatus.STORED:
        return PermissionDecision(
            allowed=False,
            reason=f"Invalid status: {document.status.value}. Must be 'stored' to archive",
        )

    role = parse_role(principal.role)
    if (
        role == UserRole.ADMINISTRADOR
        or role in SECRETARY_ROLES
        or role in EXECUTIVE_ROLES
        or document.is_created_by(principal.id)
    ):
        return _ALLOW

    return PermissionDecision(
        allowed=False, reason="Insufficient permissions to archive document"
    )


def can_bulk_archive(principal: Principal | None) -> bool:
    if principal is None:
        return False
    role = parse_role(principal.role)
    return role == UserRole.ADMINISTRADOR or role in SECRETARY_ROLES


# =============================================================================
# Timestamps
# =============================================================================


@dataclass(frozen=True)
class StatusTimestamps:
    stored_at: datetime | None
    archived_at: datetime | None


def status_timestamps(
    new_status: DocumentStatus,
    now: datetime,
    *,
    current_stored_at: datetime | None = None,
) -> StatusTimestamps:
    """
    Timestamps resultantes de entrar en `new_status`.

    - stored: stored_at = now, archived_at = None
    - archived: archived_at = now, stored_at se conserva (o now si faltaba)
    - draft: ambos en None
    """
    if new_status == DocumentStatus.STORED:
        return StatusTimestamps(stored_at=now, archived_at=None)
    if new_status == DocumentStatus.ARCHIVED:
        return StatusTimestamps(stored_at=current_stored_at or now, archived_at=now)
    return StatusTimestamps(stored_at=None, archived_at=None)

"""
===============================================================================
TARJETA CRC — domain/workspace_policy.py
===============================================================================

Módulo:
    Política de Acceso a Workspaces (Resolver)

Responsabilidades:
    - Resolver el acceso de un Principal explícito a un workspace.
    - Enumerar los workspaces accesibles de un Principal.
    - Validar combinaciones rol/workspace al asignar usuarios.
    - Construir la matriz de permisos rol × workspace.
    - Evaluar acciones (documents.*, users.*) y acciones administrativas.

Colaboradores:
    - domain.capabilities: flags por rol y proyección a tokens.
    - identity.users.UserRole: catálogo de roles.
    - application/usecases: todos los gates de documentos y usuarios.

Reglas (intención):
    - Primera regla que aplica gana; el orden es parte del contrato.
    - Sin principal => "User not found" (fail-closed).
    - Funciones puras: sin DB, sin FastAPI, sin cache.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal
from uuid import UUID

from ..identity.users import (
    EXECUTIVE_ROLES,
    SECRETARY_ROLES,
    User,
    UserRole,
    parse_role,
)
from .capabilities import capability_tokens, derive_capabilities, has_capability
from .workspaces import ALL_WORKSPACES, WorkspaceType, parse_workspace


@dataclass(frozen=True, slots=True)
class Principal:
    """Identidad explícita que ejecuta una operación."""

    id: UUID
    role: UserRole
    workspace: WorkspaceType

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, role=user.role, workspace=user.workspace)


@dataclass(frozen=True)
class WorkspaceAccess:
    """Resultado del resolver de acceso."""

    has_access: bool
    permissions: list[str] = field(default_factory=list)
    reason: str | None = None

    def allows(self, token: str) -> bool:
        return self.has_access and token in self.permissions


@dataclass(frozen=True)
class RoleWorkspaceValidation:
    valid: bool
    reason: str | None = None


# =============================================================================
# Constantes del resolver
# =============================================================================

REASON_USER_NOT_FOUND: Final[str] = "User not found"
REASON_CF_ONLY: Final[str] = "CF members can only access comisiones_cf workspace"
REASON_INSUFFICIENT: Final[str] = "Insufficient permissions for this workspace"

_ADMIN_PERMISSIONS: Final[tuple[str, ...]] = (
    "read",
    "write",
    "delete",
    "manage_users",
    "view_stats",
    "archive",
    "audit",
)
_EXECUTIVE_PERMISSIONS: Final[tuple[str, ...]] = (
    "read",
    "write",
    "view_stats",
    "archive",
    "audit",
)
_CF_PERMISSIONS: Final[tuple[str, ...]] = ("read", "write")
_READ_ONLY: Final[tuple[str, ...]] = ("read",)


def _granted(permissions: tuple[str, ...] | list[str]) -> WorkspaceAccess:
    return WorkspaceAccess(has_access=True, permissions=list(permissions))


def _denied(reason: str) -> WorkspaceAccess:
    return WorkspaceAccess(has_access=False, permissions=[], reason=reason)


# =============================================================================
# Resolver
# =============================================================================


def check_workspace_access(
    principal: Principal | None, workspace: WorkspaceType | str
) -> WorkspaceAccess:
    """Resuelve el acceso de `principal` a `workspace` (primera regla gana)."""
    if principal is None:
        return _denied(REASON_USER_NOT_FOUND)

    role = parse_role(principal.role)
    target = parse_workspace(workspace)
    if role is None or target is None:
        return _denied(REASON_INSUFFICIENT)

    if role == UserRole.ADMINISTRADOR:
        return _granted(_ADMIN_PERMISSIONS)

    if role in EXECUTIVE_ROLES:
        return _granted(_EXECUTIVE_PERMISSIONS)

    if parse_workspace(principal.workspace) == target:
        return _granted(capability_tokens(derive_capabilities(role, target)))

    if role in SECRETARY_ROLES:
        return _granted(_READ_ONLY)

    if role == UserRole.INTENDENTE:
        return _granted(_READ_ONLY)

    if role == UserRole.CF_MEMBER:
        if target == WorkspaceType.COMISIONES_CF:
            return _granted(_CF_PERMISSIONS)
        return _denied(REASON_CF_ONLY)

    return _denied(REASON_INSUFFICIENT)


def accessible_workspaces(principal: Principal | None) -> list[WorkspaceType]:
    """Workspaces con has_access=True, en orden canónico (sin cache)."""
    return [
        workspace
        for workspace in ALL_WORKSPACES
        if check_workspace_access(principal, workspace).has_access
    ]


# =============================================================================
# Validación de asignación rol/workspace
# =============================================================================

_REQUIRED_WORKSPACE: Final[dict[UserRole, tuple[WorkspaceType, str]]] = {
    UserRole.PRESIDENTE: (
        WorkspaceType.PRESIDENCIA,
        'Presidents and vice-presidents must be assigned to "presidencia" workspace',
    ),
    UserRole.VICEPRESIDENTE: (
        WorkspaceType.PRESIDENCIA,
        'Presidents and vice-presidents must be assigned to "presidencia" workspace',
    ),
    UserRole.SECRETARIO_CAM: (
        WorkspaceType.CAM,
        'CAM secretaries must be assigned to "cam" workspace',
    ),
    UserRole.SECRETARIO_AMPP: (
        WorkspaceType.AMPP,
        'AMPP secretaries must be assigned to "ampp" workspace',
    ),
    UserRole.SECRETARIO_CF: (
        WorkspaceType.COMISIONES_CF,
        'CF secretaries must be assigned to "comisiones_cf" workspace',
    ),
    UserRole.INTENDENTE: (
        WorkspaceType.INTENDENCIA,
        'Intendants must be assigned to "intendencia" workspace',
    ),
    UserRole.CF_MEMBER: (
        WorkspaceType.COMISIONES_CF,
        'CF members must be assigned to "comisiones_cf" workspace',
    ),
}


def validate_role_workspace_combination(
    role: UserRole | str, workspace: WorkspaceType | str
) -> RoleWorkspaceValidation:
    """Valida que el rol pueda asignarse al workspace indicado."""
    resolved_role = parse_role(role)
    resolved_ws = parse_workspace(workspace)
    if resolved_role is None:
        return RoleWorkspaceValidation(valid=False, reason=f"Unknown role: {role}")
    if resolved_ws is None:
        return RoleWorkspaceValidation(
            valid=False, reason=f"Unknown workspace: {workspace}"
        )

    if resolved_role == UserRole.ADMINISTRADOR:
        return RoleWorkspaceValidation(valid=True)

    required, reason = _REQUIRED_WORKSPACE[resolved_role]
    if resolved_ws != required:
        return RoleWorkspaceValidation(valid=False, reason=reason)
    return RoleWorkspaceValidation(valid=True)


def canonical_workspace_for(role: UserRole | str) -> WorkspaceType | None:
    """Workspace obligatorio de un rol (None para administrador o desconocido)."""
    resolved = parse_role(role)
    if resolved is None or resolved == UserRole.ADMINISTRADOR:
        return None
    return _REQUIRED_WORKSPACE[resolved][0]


# =============================================================================
# Matriz y acciones
# =============================================================================


def build_permissions_matrix() -> dict[str, object]:
    """Matriz completa rol × workspace, con claves "<rol>_<workspace>"."""
    permissions: dict[str, dict[str, dict[str, bool]]] = {}
    for role in UserRole:
        for workspace in ALL_WORKSPACES:
            capabilities = derive_capabilities(role, workspace)
            permissions[f"{role.value}_{workspace.value}"] = capabilities.to_dict()
    return {
        "roles": [role.value for role in UserRole],
        "workspaces": [workspace.value for workspace in ALL_WORKSPACES],
        "permissions": permissions,
    }


def can_user_perform_action(
    principal: Principal | None,
    action: str,
    resource: Literal["documents", "users"] = "documents",
    target_workspace: WorkspaceType | str | None = None,
) -> bool:
    """Acceso al workspace (si se indica) AND flag de capacidad."""
    if principal is None:
        return False
    if target_workspace is not None:
        access = check_workspace_access(principal, target_workspace)
        if not access.has_access:
            return False
    capabilities = derive_capabilities(principal.role, principal.workspace)
    return has_capability(capabilities, resource, action)


AdminAction = Literal["create_user", "delete_user", "view_audit", "system_config"]


def can_perform_admin_action(principal: Principal | None, action: AdminAction) -> bool:
    """Evalúa acciones administrativas; acción desconocida => False."""
    if principal is None:
        return False
    capabilities = derive_capabilities(principal.role, principal.workspace)
    if action in ("create_user", "delete_user"):
        return capabilities.users.create and capabilities.users.delete
    if action == "view_audit":
        return capabilities.admin.view_audit_logs
    if action == "system_config":
        return capabilities.admin.system_settings
    return False

"""
===============================================================================
TARJETA CRC — domain/capabilities.py
===============================================================================

Módulo:
    Modelo de Capacidades (rol × workspace -> flags booleanos)

Responsabilidades:
    - Derivar el registro completo de capacidades para un (rol, workspace).
    - Proyectar capacidades a tokens de permiso estables (read, create, ...).
    - Fallar cerrado: un rol desconocido obtiene todas las capacidades en False.

Colaboradores:
    - identity.users.UserRole: catálogo de roles.
    - domain.workspace_policy: usa los tokens para el workspace propio.
    - application/usecases: gates de create/update/download.

Patrones aplicados:
    - Función pura y total (sin I/O, sin estado).
    - Value objects inmutables (dataclasses frozen).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..identity.users import EXECUTIVE_ROLES, SECRETARY_ROLES, UserRole, parse_role
from .workspaces import WorkspaceType


@dataclass(frozen=True, slots=True)
class DocumentCapabilities:
    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False
    archive: bool = False
    download: bool = False


@dataclass(frozen=True, slots=True)
class UserCapabilities:
    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False


@dataclass(frozen=True, slots=True)
class AdminCapabilities:
    manage_users: bool = False
    view_audit_logs: bool = False
    system_settings: bool = False


@dataclass(frozen=True, slots=True)
class WorkspaceCapabilities:
    view_all: bool = False
    manage_all: bool = False
    view_own_workspace: bool = False
    manage_own_workspace: bool = False


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Registro completo de capacidades; todos los campos son booleanos."""

    documents: DocumentCapabilities = DocumentCapabilities()
    users: UserCapabilities = UserCapabilities()
    admin: AdminCapabilities = AdminCapabilities()
    workspaces: WorkspaceCapabilities = WorkspaceCapabilities()

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {
            "documents": {
                "create": self.documents.create,
                "read": self.documents.read,
                "update": self.documents.update,
                "delete": self.documents.delete,
                "archive": self.documents.archive,
                "download": self.documents.download,
            },
            "users": {
                "create": self.users.create,
                "read": self.users.read,
                "update": self.users.update,
                "delete": self.users.delete,
            },
            "admin": {
                "manage_users": self.admin.manage_users,
                "view_audit_logs": self.admin.view_audit_logs,
                "system_settings": self.admin.system_settings,
            },
            "workspaces": {
                "view_all": self.workspaces.view_all,
                "manage_all": self.workspaces.manage_all,
                "view_own_workspace": self.workspaces.view_own_workspace,
                "manage_own_workspace": self.workspaces.manage_own_workspace,
            },
        }


NO_CAPABILITIES: Final[Capabilities] = Capabilities()

# =============================================================================
# Tabla de capacidades por rol
# =============================================================================

_ADMIN_CAPABILITIES: Final[Capabilities] = Capabilities(
    documents=DocumentCapabilities(
        create=True, read=True, update=True, delete=True, archive=True, download=True
    ),
    users=UserCapabilities(create=True, read=True, update=True, delete=True),
    admin=AdminCapabilities(
        manage_users=True, view_audit_logs=True, system_settings=True
    ),
    workspaces=WorkspaceCapabilities(
        view_all=True,
        manage_all=True,
        view_own_workspace=True,
        manage_own_workspace=True,
    ),
)

_EXECUTIVE_CAPABILITIES: Final[Capabilities] = Capabilities(
    documents=DocumentCapabilities(
        create=True, read=True, update=True, archive=True, download=True
    ),
    users=UserCapabilities(read=True),
    admin=AdminCapabilities(view_audit_logs=True),
    workspaces=WorkspaceCapabilities(
        view_all=True, view_own_workspace=True, manage_own_workspace=True
    ),
)

_SECRETARY_CAPABILITIES: Final[Capabilities] = Capabilities(
    documents=DocumentCapabilities(
        create=True, read=True, update=True, archive=True, download=True
    ),
    workspaces=WorkspaceCapabilities(
        view_own_workspace=True, manage_own_workspace=True
    ),
)

_INTENDENTE_CAPABILITIES: Final[Capabilities] = Capabilities(
    documents=DocumentCapabilities(create=True, read=True, update=True, download=True),
    workspaces=WorkspaceCapabilities(
        view_own_workspace=True, manage_own_workspace=True
    ),
)

_CF_MEMBER_CAPABILITIES: Final[Capabilities] = Capabilities(
    documents=DocumentCapabilities(create=True, read=True, download=True),
    workspaces=WorkspaceCapabilities(view_own_workspace=True),
)


def derive_capabilities(
    role: UserRole | str | None, workspace: WorkspaceType | str | None = None
) -> Capabilities:
    """
    Deriva las capacidades de un rol.

    El workspace se acepta por contrato pero hoy no altera la tabla: las
    diferencias por workspace viven en el resolver de acceso.
    """
    resolved = parse_role(role)
    if resolved is None:
        return NO_CAPABILITIES
    if resolved == UserRole.ADMINISTRADOR:
        return _ADMIN_CAPABILITIES
    if resolved in EXECUTIVE_ROLES:
        return _EXECUTIVE_CAPABILITIES
    if resolved in SECRETARY_ROLES:
        return _SECRETARY_CAPABILITIES
    if resolved == UserRole.INTENDENTE:
        return _INTENDENTE_CAPABILITIES
    if resolved == UserRole.CF_MEMBER:
        return _CF_MEMBER_CAPABILITIES
    return NO_CAPABILITIES


# =============================================================================
# Proyección a tokens
# =============================================================================


def capability_tokens(capabilities: Capabilities) -> list[str]:
    """Proyecta capacidades a tokens en orden estable."""
    docs = capabilities.documents
    users = capabilities.users
    admin = capabilities.admin

    projection: tuple[tuple[bool, str], ...] = (
        (docs.read, "read"),
        (docs.create, "create"),
        (docs.update, "update"),
        (docs.delete, "delete"),
        (docs.archive, "archive"),
        (docs.download, "download"),
        (users.read, "view_users"),
        (users.create, "create_users"),
        (users.update, "update_users"),
        (admin.view_audit_logs, "audit"),
        (admin.manage_users, "manage_users"),
        (admin.system_settings, "system_settings"),
    )
    return [token for enabled, token in projection if enabled]


def has_capability(capabilities: Capabilities, resource: str, action: str) -> bool:
    """Lee un flag por nombre (resource.action); desconocido => False."""
    group = getattr(capabilities, resource, None)
    if group is None:
        return False
    value = getattr(group, action, False)
    return value is True

"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario (JWT + organización)

Responsabilidades:
    - Definir el catálogo cerrado de roles organizacionales.
    - Definir el dataclass User utilizado por auth, repositorios y use cases.
    - Mantener el contrato de datos de identidad centralizado y estable.

Colaboradores:
    - identity/auth_users.py: usa User y UserRole para emitir/validar JWT.
    - infrastructure/repositories/postgres/user.py: mapea filas -> User.
    - domain/capabilities.py y domain/workspace_policy.py: deciden por rol.

Notas (Clean Code / Sustentabilidad):
    - Este módulo NO contiene lógica de negocio: solo "shapes" de datos.
    - Si agregás nuevos roles, revisá derive_capabilities y
      validate_role_workspace_combination (ambos fallan cerrado).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from ..domain.workspaces import WorkspaceType


class UserRole(str, Enum):
    """Roles organizacionales soportados."""

    ADMINISTRADOR = "administrador"
    PRESIDENTE = "presidente"
    VICEPRESIDENTE = "vicepresidente"
    SECRETARIO_CAM = "secretario_cam"
    SECRETARIO_AMPP = "secretario_ampp"
    SECRETARIO_CF = "secretario_cf"
    INTENDENTE = "intendente"
    CF_MEMBER = "cf_member"


EXECUTIVE_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.PRESIDENTE, UserRole.VICEPRESIDENTE}
)
SECRETARY_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.SECRETARIO_CAM, UserRole.SECRETARIO_AMPP, UserRole.SECRETARIO_CF}
)

MIN_PASSWORD_LENGTH = 8


def parse_role(value: UserRole | str | None) -> UserRole | None:
    """Convierte un valor crudo en UserRole; None si no pertenece al catálogo."""
    if value is None:
        return None
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).strip().lower())
    except ValueError:
        return None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario utilizado por autenticación y autorización."""

    id: UUID
    email: str
    password_hash: str
    role: UserRole
    workspace: WorkspaceType
    is_active: bool
    full_name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login_at: datetime | None = None

"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para Usuarios, Capabilities y Matriz de permisos

Responsabilidades:
    - DTOs de request para alta/edición de usuarios.
    - DTOs de response (sin password_hash).
    - Normalizar email en el borde.

Colaboradores:
    - identity.users.UserRole
    - domain.workspaces.WorkspaceType
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from app.application.usecases.users.create_user import (
    MAX_FULL_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from app.domain.workspaces import WorkspaceType
from app.identity.users import UserRole
from pydantic import BaseModel, Field, field_validator

_PASSWORD_MAX_LENGTH = 256


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class CreateUserReq(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=_PASSWORD_MAX_LENGTH
    )
    full_name: str = Field(..., min_length=1, max_length=MAX_FULL_NAME_LENGTH)
    role: UserRole
    workspace: WorkspaceType

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UpdateUserReq(BaseModel):
    """PATCH parcial: None = sin cambios."""

    full_name: str | None = Field(default=None, max_length=MAX_FULL_NAME_LENGTH)
    role: UserRole | None = None
    workspace: WorkspaceType | None = None
    is_active: bool | None = None
    password: str | None = Field(
        default=None, min_length=MIN_PASSWORD_LENGTH, max_length=_PASSWORD_MAX_LENGTH
    )


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class UserRes(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: UserRole
    workspace: WorkspaceType
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login_at: datetime | None = None


class UsersListRes(BaseModel):
    users: list[UserRes]
    limit: int
    offset: int


class UserCapabilitiesRes(BaseModel):
    user_id: UUID
    role: UserRole
    workspace: WorkspaceType
    capabilities: dict[str, dict[str, bool]]
    tokens: list[str] = Field(default_factory=list)


class PermissionsMatrixRes(BaseModel):
    roles: list[str]
    workspaces: list[str]
    permissions: dict[str, Any]

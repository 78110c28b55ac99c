"""
===============================================================================
TARJETA CRC — app/api/auth_routes.py (Autenticación de usuarios)
===============================================================================

Responsabilidades:
  - Exponer endpoints de autenticación de usuario (login/logout/me) con JWT.
  - Cambio de password propio (verifica el actual).
  - Gestionar cookie httpOnly de forma consistente (set/clear).
  - Devolver rol y workspace del usuario para que el frontend arme la UI.

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP ↔ identidad.
  - Fail-safe security: si la autenticación falla, se deniega por defecto.

Colaboradores:
  - identity.auth_users: authenticate_user, create_access_token, require_user
  - crosscutting.error_responses: unauthorized

Notas:
  - La gestión de usuarios (alta/edición) vive en /v1/users.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, field_validator

from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, unauthorized
from ..crosscutting.logger import logger
from ..domain.workspaces import WorkspaceType
from ..identity.auth_users import DEFAULT_ACCESS_TOKEN_COOKIE as ACCESS_TOKEN_COOKIE
from ..identity.auth_users import (
    authenticate_user,
    change_password,
    create_access_token,
    get_auth_settings,
    require_user,
)
from ..identity.users import MIN_PASSWORD_LENGTH, User, UserRole, normalize_email

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("email")
    @classmethod
    def normalizar_email(cls, v: str) -> str:
        return normalize_email(v)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=512)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=512)


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: UserRole
    workspace: WorkspaceType
    is_active: bool
    created_at: datetime | None
    last_login_at: datetime | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _to_user_response(user: User) -> UserResponse:
    """Convierte entidad de usuario a DTO de respuesta."""
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        workspace=user.workspace,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


def _cookie_name() -> str:
    return (get_auth_settings().jwt_cookie_name or "").strip() or ACCESS_TOKEN_COOKIE


def _set_auth_cookie(response: Response, token: str, expires_in: int) -> None:
    """Setea cookie httpOnly de acceso."""
    response.set_cookie(
        key=_cookie_name(),
        value=token,
        httponly=True,
        secure=get_auth_settings().jwt_cookie_secure,
        samesite="lax",
        max_age=expires_in,
        path="/",
    )


def _clear_auth_cookie(response: Response) -> None:
    """Elimina cookie de acceso (si existe)."""
    response.delete_cookie(
        key=_cookie_name(),
        path="/",
        samesite="lax",
        secure=get_auth_settings().jwt_cookie_secure,
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/auth/login", response_model=LoginResponse, tags=["auth"])
def login(req: LoginRequest, response: Response):
    """
    Inicia sesión y devuelve JWT.

    - También setea cookie httpOnly con el mismo token.
    - Usuario inactivo => 403 (lo decide identity.auth_users).
    """
    user = authenticate_user(req.email, req.password)
    if not user:
        raise unauthorized("Credenciales inválidas.")

    token, expires_in = create_access_token(user)
    _set_auth_cookie(response, token, expires_in)

    logger.info(
        "Login exitoso",
        extra={
            "user_id": str(user.id),
            "role": user.role.value,
            "workspace": user.workspace.value,
        },
    )

    return LoginResponse(
        access_token=token,
        expires_in=expires_in,
        user=_to_user_response(user),
    )


@router.post("/auth/logout", tags=["auth"])
def logout(response: Response):
    """
    Cierra sesión.

    - Siempre borra la cookie (si estaba presente).
    - No requiere autenticación: es idempotente.
    """
    _clear_auth_cookie(response)
    return {"ok": True}


@router.post("/auth/change-password", tags=["auth"])
def change_own_password(req: ChangePasswordRequest, user: User = Depends(require_user)):
    """
    Cambia el password del usuario autenticado.

    - Password actual incorrecto => 422 (no 401: la sesión sigue válida).
    - El token vigente no se revoca.
    """
    change_password(user, req.current_password, req.new_password)
    return {"ok": True}


@router.get("/auth/me", response_model=UserResponse, tags=["auth"])
def me(user: User = Depends(require_user)):
    """Devuelve el usuario autenticado (JWT o cookie)."""
    return _to_user_response(user)


__all__ = ["router"]

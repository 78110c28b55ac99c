"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de Usuarios (JWT) y resolución del Principal

Responsabilidades:
    - Hashear/verificar passwords (Argon2) y cambio de password propio.
    - Emitir JWT de acceso con expiración (access token).
    - Decodificar y validar JWT (firma, exp, claims mínimos).
    - Resolver usuario actual (token -> user_id -> repo) y su Principal.
    - Exponer dependencias FastAPI (require_user, require_principal,
      require_roles).
    - Extraer token desde Authorization: Bearer o cookie.

Colaboradores:
    - crosscutting.config.get_settings: secretos, TTL, cookie settings.
    - crosscutting.error_responses: unauthorized/forbidden estándar.
    - container.get_user_repository: repositorio de usuarios (Postgres o memoria).
    - domain.workspace_policy.Principal
    - identity.users: User / UserRole.

Decisiones de diseño:
    - La lógica criptográfica vive acá (borde de identidad), NO en dominio.
    - El core recibe un Principal explícito; nunca lee request.state.
    - Claims: sub, email, role, workspace, iat, exp, typ.
    - No loguear secretos ni tokens; solo info mínima y segura.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import UUID

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Depends, Header, Request

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import forbidden, unauthorized, validation_error
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..domain.workspace_policy import Principal
from ..domain.workspaces import WorkspaceType
from .users import User, UserRole, normalize_email, parse_role

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

# R: fallback si Settings no define cookie.
DEFAULT_ACCESS_TOKEN_COOKIE: str = "access_token"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_WORKSPACE: str = "workspace"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

_password_hasher = PasswordHasher()


# ---------------------------------------------------------------------------
# Contratos internos
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Settings de auth (snapshot)."""

    jwt_secret: str
    jwt_access_ttl_minutes: int
    jwt_cookie_name: str
    jwt_cookie_secure: bool


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Payload mínimo que esperamos de un access token."""

    user_id: str
    email: str
    role: UserRole
    workspace: WorkspaceType | None = None


def get_auth_settings() -> AuthSettings:
    """Construye un snapshot de settings de auth."""
    s = get_settings()
    return AuthSettings(
        jwt_secret=s.jwt_secret,
        jwt_access_ttl_minutes=s.jwt_access_ttl_minutes,
        jwt_cookie_name=s.jwt_cookie_name,
        jwt_cookie_secure=s.jwt_cookie_secure,
    )


def _user_repository() -> UserRepository:
    # R: import diferido; el container importa este módulo indirectamente.
    from ..container import get_user_repository

    return get_user_repository()


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def authenticate_user(
    email: str, password: str, *, users: UserRepository | None = None
) -> User | None:
    """Valida credenciales y retorna el usuario activo o None.

    Seguridad:
        - Normalizamos el email (trim/lower) en el borde de identidad.
        - No diferenciamos “usuario no existe” vs “password incorrecto” (retorna None).
        - Si el usuario existe pero está inactivo, devolvemos 403 para dejarlo explícito.
    """
    normalized_email = normalize_email(email)
    if not normalized_email:
        return None

    repository = users or _user_repository()
    user = repository.get_user_by_email(normalized_email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    if not user.is_active:
        logger.warning(
            "Auth falló: usuario inactivo", extra={"user_id": str(user.id)}
        )
        raise forbidden("User account is inactive.")

    repository.record_login(user.id)
    return user


def change_password(
    user: User,
    current_password: str,
    new_password: str,
    *,
    users: UserRepository | None = None,
) -> User:
    """Cambia el password del propio usuario verificando el actual."""
    if not verify_password(current_password, user.password_hash):
        raise validation_error("Current password is incorrect.")
    if new_password == current_password:
        raise validation_error("New password must be different from the current one.")

    repository = users or _user_repository()
    updated = repository.update_user(user.id, password_hash=hash_password(new_password))
    if updated is None:
        raise unauthorized("User not found.")

    logger.info("Password cambiado", extra={"user_id": str(user.id)})
    return updated


# ---------------------------------------------------------------------------
# Tokens JWT (emitir / decodificar)
# ---------------------------------------------------------------------------


def create_access_token(
    user: User, settings: AuthSettings | None = None
) -> tuple[str, int]:
    """Crea un JWT de acceso (access token) firmado.

    Retorna:
        (token, expires_in_seconds)
    """
    auth_settings = settings or get_auth_settings()

    now = datetime.now(timezone.utc)
    expires_in = int(auth_settings.jwt_access_ttl_minutes * 60)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_ROLE: user.role.value,
        CLAIM_WORKSPACE: user.workspace.value,
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: AuthSettings | None = None
) -> TokenPayload:
    """Decodifica y valida un JWT de acceso.

    Errores:
        - 401 si expiró o firma inválida.
        - 401 si faltan claims mínimos.
    """
    auth_settings = settings or get_auth_settings()

    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={
                "require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_EXP],
            },
        )
    except jwt.ExpiredSignatureError as exc:
        raise unauthorized("Token expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise unauthorized("Invalid token.") from exc

    user_id = payload.get(CLAIM_SUB)
    email = payload.get(CLAIM_EMAIL)
    token_type = payload.get(CLAIM_TYP)

    # R: si viene typ, lo validamos; si no viene, lo aceptamos por compatibilidad.
    if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
        raise unauthorized("Invalid token type.")

    role = parse_role(payload.get(CLAIM_ROLE))
    if not user_id or not email or role is None:
        raise unauthorized("Invalid token.")

    workspace_value = payload.get(CLAIM_WORKSPACE)
    workspace = WorkspaceType(workspace_value) if workspace_value else None
    return TokenPayload(
        user_id=str(user_id), email=str(email), role=role, workspace=workspace
    )


def get_current_user(token: str, *, users: UserRepository | None = None) -> User:
    """Resuelve el usuario actual a partir del access token.

    El rol/workspace vigentes salen del repositorio, no del token: un cambio
    de rol aplica en el siguiente request.
    """
    payload = decode_access_token(token)

    try:
        user_id = UUID(payload.user_id)
    except ValueError as exc:
        raise unauthorized("Invalid token.") from exc

    user = (users or _user_repository()).get_user_by_id(user_id)
    if not user:
        raise unauthorized("Invalid token.")
    if not user.is_active:
        raise forbidden("User account is inactive.")
    return user


# ---------------------------------------------------------------------------
# Extracción de token (header/cookie)
# ---------------------------------------------------------------------------


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def extract_access_token(request: Request, authorization: str | None) -> str | None:
    """Resuelve token desde Authorization o cookie."""
    token = _extract_bearer_token(authorization)
    if token:
        return token

    cookie_name = (
        get_auth_settings().jwt_cookie_name or ""
    ).strip() or DEFAULT_ACCESS_TOKEN_COOKIE
    return request.cookies.get(cookie_name)


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def require_user(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
) -> User:
    """Dependency FastAPI: requiere usuario autenticado por JWT."""
    token = extract_access_token(request, authorization)
    if not token:
        raise unauthorized("Missing bearer token.")

    user = get_current_user(token)
    request.state.user = user
    return user


def require_principal(user: User = Depends(require_user)) -> Principal:
    """Dependency FastAPI: Principal explícito del usuario autenticado."""
    return Principal.from_user(user)


def require_roles(*roles: UserRole | str) -> Callable[..., Principal]:
    """Dependency FastAPI: requiere alguno de los roles indicados."""
    allowed = {UserRole(role) for role in roles}

    def dependency(principal: Principal = Depends(require_principal)) -> Principal:
        if principal.role not in allowed:
            raise forbidden("Insufficient role.")
        return principal

    return dependency

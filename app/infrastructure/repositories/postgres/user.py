"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios para autenticación (por email / por id).
  - Crear usuarios y actualizar campos administrables
    (nombre, rol, workspace, is_active, password).
  - Listar usuarios con filtros y agregar estadísticas para el dashboard.
  - Mapear filas crudas -> entidad `User` validando `UserRole` y `WorkspaceType`.
  - Exponer fallos consistentes vía `DatabaseError` con logging estructurado.

Collaborators:
  - infrastructure.db.pool.get_pool (pool global instrumentado)
  - identity.users.User / UserRole
  - domain.workspaces.WorkspaceType
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Repositorio puro: la validación rol/workspace vive en domain.workspace_policy.
  - Emails se persisten y buscan normalizados (lower + trim).
  - SQL parametrizado siempre (nunca interpolar input de usuario).
  - Orden estable en listados: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.value_objects import UserStats
from ....domain.workspaces import WorkspaceType
from ....identity.users import User, UserRole, normalize_email

# ============================================================
# Constantes y contratos de SQL
# ============================================================
_USER_COLUMNS = (
    "id, email, full_name, password_hash, role, workspace, is_active, "
    "created_at, updated_at, last_login_at"
)
_USER_ORDER_BY = "created_at DESC, id DESC"
_MAX_LIST_LIMIT = 500


def _get_pool():
    """Pool global (lazy import para no exigir DB al importar el módulo)."""
    from ...db.pool import get_pool

    return get_pool()


# ============================================================
# Helpers internos: mapping + ejecución
# ============================================================
def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a `User`.

    Role/workspace estrictos: un valor fuera del enum indica drift del
    esquema y se reporta como DatabaseError.
    """
    try:
        role = UserRole(row[4])
        workspace = WorkspaceType(row[5])
    except ValueError as exc:
        raise DatabaseError(
            f"Invalid user role/workspace in database: {row[4]}/{row[5]}"
        ) from exc

    return User(
        id=row[0],
        email=row[1],
        full_name=row[2] or "",
        password_hash=row[3],
        role=role,
        workspace=workspace,
        is_active=row[6],
        created_at=row[7],
        updated_at=row[8],
        last_login_at=row[9],
    )


def _fetchone(
    *,
    query: str,
    params: Iterable[object],
    log_msg: str,
    log_extra: dict[str, object],
) -> tuple | None:
    """SELECT/RETURNING ... fetchone() con logging + DatabaseError."""
    try:
        pool = _get_pool()
        with pool.connection() as conn:
            return conn.execute(query, tuple(params)).fetchone()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


def _fetchall(
    *,
    query: str,
    params: Iterable[object] = (),
    log_msg: str,
    log_extra: dict[str, object],
) -> list[tuple]:
    """SELECT ... fetchall() con logging + DatabaseError."""
    try:
        pool = _get_pool()
        with pool.connection() as conn:
            return conn.execute(query, tuple(params)).fetchall()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}") from exc


# ============================================================
# API del repositorio (funcional)
# ============================================================
def get_user_by_email(email: str) -> Optional[User]:
    """Obtiene un usuario por email normalizado (autenticación)."""
    normalized = normalize_email(email)
    row = _fetchone(
        query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
        params=(normalized,),
        log_msg="PostgresUserRepository: get_user_by_email failed",
        log_extra={"email": normalized},
    )
    return _row_to_user(row) if row else None


def get_user_by_id(user_id: UUID) -> Optional[User]:
    """Obtiene un usuario por ID (validación de token / resolver de acceso)."""
    row = _fetchone(
        query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
        params=(user_id,),
        log_msg="PostgresUserRepository: get_user_by_id failed",
        log_extra={"user_id": str(user_id)},
    )
    return _row_to_user(row) if row else None


def list_users(
    *,
    role: UserRole | None = None,
    workspace: WorkspaceType | None = None,
    is_active: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[User]:
    """Lista usuarios con filtros opcionales (AND)."""
    if limit <= 0:
        return []
    limit = min(limit, _MAX_LIST_LIMIT)
    offset = max(0, offset)

    filters: list[str] = []
    params: list[object] = []
    if role is not None:
        filters.append("role = %s")
        params.append(role.value)
    if workspace is not None:
        filters.append("workspace = %s")
        params.append(workspace.value)
    if is_active is not None:
        filters.append("is_active = %s")
        params.append(is_active)

    where = f"WHERE {' AND '.join(filters)}" if filters else ""
    rows = _fetchall(
        query=f"""
            SELECT {_USER_COLUMNS}
            FROM users
            {where}
            ORDER BY {_USER_ORDER_BY}
            LIMIT %s OFFSET %s
        """,
        params=(*params, limit, offset),
        log_msg="PostgresUserRepository: list_users failed",
        log_extra={"limit": limit, "offset": offset, "filters": len(filters)},
    )
    return [_row_to_user(r) for r in rows]


def create_user(
    *,
    email: str,
    full_name: str,
    password_hash: str,
    role: UserRole,
    workspace: WorkspaceType,
    is_active: bool = True,
) -> User:
    """
    Crea un usuario y devuelve el registro.

    Un email duplicado viola uq_users_email y llega como DatabaseError; el use
    case verifica unicidad antes para responder CONFLICT.
    """
    user_id = uuid4()
    normalized = normalize_email(email)

    row = _fetchone(
        query=f"""
            INSERT INTO users (id, email, full_name, password_hash, role, workspace, is_active)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {_USER_COLUMNS}
        """,
        params=(
            user_id,
            normalized,
            full_name,
            password_hash,
            role.value,
            workspace.value,
            is_active,
        ),
        log_msg="PostgresUserRepository: create_user failed",
        log_extra={
            "user_id": str(user_id),
            "role": role.value,
            "workspace": workspace.value,
        },
    )
    if not row:
        raise DatabaseError(
            "PostgresUserRepository: create_user failed (no row returned)"
        )
    return _row_to_user(row)


def update_user(
    user_id: UUID,
    *,
    full_name: str | None = None,
    role: UserRole | None = None,
    workspace: WorkspaceType | None = None,
    is_active: bool | None = None,
    password_hash: str | None = None,
) -> Optional[User]:
    """
    Update dinámico: solo los campos presentes.

    Sin cambios => retorna el estado actual (si existe).
    """
    updates: list[str] = []
    params: list[object] = []

    if full_name is not None:
        updates.append("full_name = %s")
        params.append(full_name)
    if role is not None:
        updates.append("role = %s")
        params.append(role.value)
    if workspace is not None:
        updates.append("workspace = %s")
        params.append(workspace.value)
    if is_active is not None:
        updates.append("is_active = %s")
        params.append(is_active)
    if password_hash is not None:
        updates.append("password_hash = %s")
        params.append(password_hash)

    if not updates:
        return get_user_by_id(user_id)

    updates.append("updated_at = NOW()")
    params.append(user_id)

    # updates es controlado por código (no input usuario).
    row = _fetchone(
        query=f"""
            UPDATE users
            SET {", ".join(updates)}
            WHERE id = %s
            RETURNING {_USER_COLUMNS}
        """,
        params=params,
        log_msg="PostgresUserRepository: update_user failed",
        log_extra={"user_id": str(user_id), "fields": len(updates) - 1},
    )
    return _row_to_user(row) if row else None


def record_login(user_id: UUID) -> None:
    _fetchone(
        query="UPDATE users SET last_login_at = NOW() WHERE id = %s RETURNING id",
        params=(user_id,),
        log_msg="PostgresUserRepository: record_login failed",
        log_extra={"user_id": str(user_id)},
    )


def delete_user(user_id: UUID) -> bool:
    """Borra la fila; la actividad queda con user_id NULL (FK SET NULL)."""
    row = _fetchone(
        query="DELETE FROM users WHERE id = %s RETURNING id",
        params=(user_id,),
        log_msg="PostgresUserRepository: delete_user failed",
        log_extra={"user_id": str(user_id)},
    )
    return row is not None


def user_stats() -> UserStats:
    """Totales, activos y distribución por rol/workspace."""
    rows = _fetchall(
        query="""
            SELECT role, workspace, COUNT(*), COUNT(*) FILTER (WHERE is_active)
            FROM users
            GROUP BY role, workspace
        """,
        log_msg="PostgresUserRepository: user_stats failed",
        log_extra={},
    )
    total = 0
    active = 0
    by_role: dict[str, int] = {}
    by_workspace: dict[str, int] = {}
    for role, workspace, count, active_count in rows:
        total += count
        active += active_count
        by_role[role] = by_role.get(role, 0) + count
        by_workspace[workspace] = by_workspace.get(workspace, 0) + count
    return UserStats(
        total=total, active=active, by_role=by_role, by_workspace=by_workspace
    )


# ============================================================
# Clase wrapper (contrato UserRepository)
# ============================================================
class PostgresUserRepository:
    """Wrapper OO sobre las funciones del módulo (implementa UserRepository)."""

    def get_user_by_email(self, email: str) -> Optional[User]:
        return get_user_by_email(email)

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return get_user_by_id(user_id)

    def list_users(
        self,
        *,
        role: UserRole | None = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[User]:
        return list_users(
            role=role,
            workspace=workspace,
            is_active=is_active,
            limit=limit,
            offset=offset,
        )

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: UserRole,
        workspace: WorkspaceType,
        is_active: bool = True,
    ) -> User:
        return create_user(
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            workspace=workspace,
            is_active=is_active,
        )

    def update_user(
        self,
        user_id: UUID,
        *,
        full_name: str | None = None,
        role: UserRole | None = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        password_hash: str | None = None,
    ) -> Optional[User]:
        return update_user(
            user_id,
            full_name=full_name,
            role=role,
            workspace=workspace,
            is_active=is_active,
            password_hash=password_hash,
        )

    def record_login(self, user_id: UUID) -> None:
        record_login(user_id)

    def delete_user(self, user_id: UUID) -> bool:
        return delete_user(user_id)

    def user_stats(self) -> UserStats:
        return user_stats()

"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Replicar unicidad de email normalizado y filtros de listado.

Collaborators:
  - identity.users.User / UserRole
  - domain.repositories.UserRepository (contrato)

Constraints / Notes:
  - Thread-safe (Lock). User es inmutable: se reemplaza con dataclasses.replace.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import DatabaseError
from ....domain.repositories import UserRepository
from ....domain.value_objects import UserStats
from ....domain.workspaces import WorkspaceType
from ....identity.users import User, UserRole, normalize_email

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryUserRepository(UserRepository):
    """Repositorio in-memory, thread-safe, para usuarios."""

    def __init__(self, users: List[User] | None = None) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {u.id: u for u in users or []}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def add(self, user: User) -> User:
        """Alta directa (fixtures / seeds)."""
        with self._lock:
            self._users[user.id] = user
        return user

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        with self._lock:
            for user in self._users.values():
                if user.email == normalized:
                    return user
        return None

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
        normalized = normalize_email(email)
        now = self._now()
        user = User(
            id=uuid4(),
            email=normalized,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            workspace=workspace,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if any(u.email == normalized for u in self._users.values()):
                raise DatabaseError(f"Duplicate email: {normalized}")
            self._users[user.id] = user
        return user

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
        changes: dict[str, object] = {}
        if full_name is not None:
            changes["full_name"] = full_name
        if role is not None:
            changes["role"] = role
        if workspace is not None:
            changes["workspace"] = workspace
        if is_active is not None:
            changes["is_active"] = is_active
        if password_hash is not None:
            changes["password_hash"] = password_hash

        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            if not changes:
                return current
            updated = replace(current, updated_at=self._now(), **changes)
            self._users[user_id] = updated
            return updated

    def delete_user(self, user_id: UUID) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def record_login(self, user_id: UUID) -> None:
        with self._lock:
            current = self._users.get(user_id)
            if current is not None:
                self._users[user_id] = replace(current, last_login_at=self._now())

    def list_users(
        self,
        *,
        role: UserRole | None = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        if limit <= 0:
            return []
        with self._lock:
            values = list(self._users.values())

        def predicate(u: User) -> bool:
            if role is not None and u.role != role:
                return False
            if workspace is not None and u.workspace != workspace:
                return False
            if is_active is not None and u.is_active != is_active:
                return False
            return True

        selected = sorted(
            (u for u in values if predicate(u)),
            key=lambda u: (u.created_at or _EPOCH, str(u.id)),
            reverse=True,
        )
        offset = max(0, offset)
        return selected[offset : offset + limit]

    def user_stats(self) -> UserStats:
        with self._lock:
            values = list(self._users.values())
        by_role: Dict[str, int] = {}
        by_workspace: Dict[str, int] = {}
        for user in values:
            by_role[user.role.value] = by_role.get(user.role.value, 0) + 1
            by_workspace[user.workspace.value] = (
                by_workspace.get(user.workspace.value, 0) + 1
            )
        return UserStats(
            total=len(values),
            active=sum(1 for u in values if u.is_active),
            by_role=by_role,
            by_workspace=by_workspace,
        )

"""
===============================================================================
USE CASES: List Users / Update User
===============================================================================

Responsibilities:
    - ListUsersUseCase: requiere users.read; filtros rol/workspace/activo.
    - UpdateUserUseCase: sólo administrador; revalida rol/workspace contra
      el valor resultante (campos no enviados conservan el actual).

Collaborators:
    - UserRepository.list_users / get_user_by_id / update_user
    - domain.workspace_policy.validate_role_workspace_combination
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable, Final
from uuid import UUID

from ....crosscutting.metrics import record_permission_denied
from ....crosscutting.pagination import clamp_limit
from ....domain.capabilities import derive_capabilities
from ....domain.repositories import UserRepository
from ....domain.workspace_policy import Principal, validate_role_workspace_combination
from ....domain.workspaces import WorkspaceType, parse_workspace
from ....identity.users import UserRole, parse_role
from .create_user import MAX_FULL_NAME_LENGTH, MIN_PASSWORD_LENGTH
from .user_results import (
    UserListResult,
    UserResult,
    user_forbidden,
    user_not_found,
    user_validation_error,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT: Final[int] = 50
MAX_LIMIT: Final[int] = 200


class ListUsersUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(
        self,
        *,
        principal: Principal,
        role: UserRole | None = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> UserListResult:
        capabilities = derive_capabilities(principal.role, principal.workspace)
        if not capabilities.users.read:
            record_permission_denied("list_users")
            return UserListResult(error=user_forbidden("Insufficient permissions to view users"))

        users = self._users.list_users(
            role=role,
            workspace=workspace,
            is_active=is_active,
            limit=clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT),
            offset=max(0, offset),
        )
        return UserListResult(users=users)


class UpdateUserUseCase:
    def __init__(
        self,
        users: UserRepository,
        *,
        password_hasher: Callable[[str], str] | None = None,
    ) -> None:
        self._users = users
        self._hash_password = password_hasher

    def execute(
        self,
        *,
        principal: Principal,
        user_id: UUID,
        full_name: str | None = None,
        role: str | None = None,
        workspace: str | None = None,
        is_active: bool | None = None,
        password: str | None = None,
    ) -> UserResult:
        # ---------------------------------------------------------------------
        # 1) Autorización (sólo administrador).
        # ---------------------------------------------------------------------
        if parse_role(principal.role) != UserRole.ADMINISTRADOR:
            record_permission_denied("update_user")
            return UserResult(error=user_forbidden("Only administrators can update users"))

        current = self._users.get_user_by_id(user_id)
        if current is None:
            return UserResult(error=user_not_found())

        # ---------------------------------------------------------------------
        # 2) Validación sobre los valores resultantes.
        # ---------------------------------------------------------------------
        new_role = parse_role(role) if role is not None else current.role
        new_workspace = (
            parse_workspace(workspace) if workspace is not None else current.workspace
        )
        if new_role is None:
            return UserResult(error=user_validation_error(f"Unknown role: {role}"))
        if new_workspace is None:
            return UserResult(error=user_validation_error(f"Unknown workspace: {workspace}"))
        validation = validate_role_workspace_combination(new_role, new_workspace)
        if not validation.valid:
            return UserResult(error=user_validation_error(validation.reason or "Invalid role"))

        clean_name = None
        if full_name is not None:
            clean_name = full_name.strip()
            if not clean_name or len(clean_name) > MAX_FULL_NAME_LENGTH:
                return UserResult(
                    error=user_validation_error(
                        f"Full name must be between 1 and {MAX_FULL_NAME_LENGTH} characters"
                    )
                )

        password_hash = None
        if password is not None:
            if len(password) < MIN_PASSWORD_LENGTH:
                return UserResult(
                    error=user_validation_error(
                        f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
                    )
                )
            if self._hash_password is None:
                return UserResult(error=user_validation_error("Password changes are not supported"))
            password_hash = self._hash_password(password)

        if is_active is False and current.id == principal.id:
            return UserResult(error=user_validation_error("You cannot deactivate yourself"))

        # ---------------------------------------------------------------------
        # 3) Persistir.
        # ---------------------------------------------------------------------
        updated = self._users.update_user(
            user_id,
            full_name=clean_name,
            role=new_role if role is not None else None,
            workspace=new_workspace if workspace is not None else None,
            is_active=is_active,
            password_hash=password_hash,
        )
        if updated is None:
            return UserResult(error=user_not_found())

        logger.info(
            "User updated",
            extra={"user_id": str(user_id), "updated_by": str(principal.id)},
        )
        return UserResult(user=updated)

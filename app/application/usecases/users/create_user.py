"""
===============================================================================
USE CASE: Create User
===============================================================================

Name:
    Create User Use Case

Business Goal:
    Dar de alta un usuario con rol y workspace válidos.

Why (Context / Intención):
    - La combinación rol/workspace se valida al asignar, no al usar: un
      secretario de AMPP nunca queda asignado a CAM.
    - El email se normaliza (trim + lower) y es único.
    - El hash de password se inyecta (argon2 en producción).

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Responsibilities:
    - Verificar can_perform_admin_action(create_user).
    - Validar email, nombre, password y rol/workspace.
    - Detectar duplicados (CONFLICT) y persistir.

Collaborators:
    - UserRepository.get_user_by_email / create_user
    - domain.workspace_policy.validate_role_workspace_combination
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable, Final

from ....crosscutting.metrics import record_permission_denied
from ....domain.repositories import UserRepository
from ....domain.workspace_policy import (
    Principal,
    can_perform_admin_action,
    validate_role_workspace_combination,
)
from ....domain.workspaces import parse_workspace
from ....identity.users import MIN_PASSWORD_LENGTH, normalize_email, parse_role
from .user_results import (
    UserError,
    UserErrorCode,
    UserResult,
    user_forbidden,
    user_validation_error,
)

logger = logging.getLogger(__name__)

MAX_FULL_NAME_LENGTH: Final[int] = 255


class CreateUserUseCase:
    def __init__(
        self,
        users: UserRepository,
        *,
        password_hasher: Callable[[str], str],
    ) -> None:
        self._users = users
        self._hash_password = password_hasher

    def execute(
        self,
        *,
        principal: Principal,
        email: str,
        password: str,
        full_name: str,
        role: str,
        workspace: str,
    ) -> UserResult:
        # ---------------------------------------------------------------------
        # 1) Autorización.
        # ---------------------------------------------------------------------
        if not can_perform_admin_action(principal, "create_user"):
            record_permission_denied("create_user")
            return UserResult(error=user_forbidden("Insufficient permissions to create users"))

        # ---------------------------------------------------------------------
        # 2) Validación de input.
        # ---------------------------------------------------------------------
        normalized_email = normalize_email(email)
        if "@" not in normalized_email or normalized_email.startswith("@"):
            return UserResult(error=user_validation_error("Invalid email address"))
        clean_name = (full_name or "").strip()
        if not clean_name or len(clean_name) > MAX_FULL_NAME_LENGTH:
            return UserResult(
                error=user_validation_error(
                    f"Full name must be between 1 and {MAX_FULL_NAME_LENGTH} characters"
                )
            )
        if len(password or "") < MIN_PASSWORD_LENGTH:
            return UserResult(
                error=user_validation_error(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
                )
            )

        validation = validate_role_workspace_combination(role, workspace)
        if not validation.valid:
            return UserResult(error=user_validation_error(validation.reason or "Invalid role"))
        resolved_role = parse_role(role)
        resolved_workspace = parse_workspace(workspace)
        assert resolved_role is not None and resolved_workspace is not None

        # ---------------------------------------------------------------------
        # 3) Unicidad + persistencia.
        # ---------------------------------------------------------------------
        if self._users.get_user_by_email(normalized_email) is not None:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.CONFLICT,
                    message="A user with this email already exists",
                )
            )

        user = self._users.create_user(
            email=normalized_email,
            full_name=clean_name,
            password_hash=self._hash_password(password),
            role=resolved_role,
            workspace=resolved_workspace,
            is_active=True,
        )
        logger.info(
            "User created",
            extra={
                "user_id": str(user.id),
                "role": resolved_role.value,
                "workspace": resolved_workspace.value,
                "created_by": str(principal.id),
            },
        )
        return UserResult(user=user)

"""
===============================================================================
USE CASES: Capabilities / Permissions Matrix / Workspace Access
===============================================================================

Responsibilities:
    - GetUserCapabilitiesUseCase: capacidades de un usuario (uno mismo o
      administrador).
    - GetPermissionsMatrixUseCase: matriz rol × workspace (administrador).
    - ResolveWorkspaceAccessUseCase: forma por userId del resolver; un
      usuario inexistente o inactivo se resuelve como "sin principal".

Collaborators:
    - UserRepository.get_user_by_id
    - domain.capabilities / domain.workspace_policy
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.metrics import record_permission_denied
from ....domain.capabilities import capability_tokens, derive_capabilities
from ....domain.repositories import UserRepository
from ....domain.workspace_policy import (
    Principal,
    build_permissions_matrix,
    check_workspace_access,
)
from ....domain.workspaces import WorkspaceType
from ....identity.users import UserRole, parse_role
from .user_results import (
    PermissionsMatrixResult,
    UserCapabilitiesResult,
    WorkspaceAccessResult,
    user_forbidden,
    user_not_found,
)


def _is_admin(principal: Principal) -> bool:
    return parse_role(principal.role) == UserRole.ADMINISTRADOR


class GetUserCapabilitiesUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(
        self, *, principal: Principal, user_id: UUID | None = None
    ) -> UserCapabilitiesResult:
        target_id = user_id or principal.id
        if target_id != principal.id and not _is_admin(principal):
            record_permission_denied("user_capabilities")
            return UserCapabilitiesResult(
                error=user_forbidden("You can only view your own capabilities")
            )

        user = self._users.get_user_by_id(target_id)
        if user is None:
            return UserCapabilitiesResult(error=user_not_found())

        capabilities = derive_capabilities(user.role, user.workspace)
        return UserCapabilitiesResult(
            user=user,
            capabilities=capabilities,
            tokens=capability_tokens(capabilities),
        )


class GetPermissionsMatrixUseCase:
    def execute(self, *, principal: Principal) -> PermissionsMatrixResult:
        if not _is_admin(principal):
            record_permission_denied("permissions_matrix")
            return PermissionsMatrixResult(
                error=user_forbidden("Only administrators can view the permissions matrix")
            )
        return PermissionsMatrixResult(matrix=build_permissions_matrix())


class ResolveWorkspaceAccessUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(
        self,
        *,
        principal: Principal,
        user_id: UUID,
        workspace: WorkspaceType,
    ) -> WorkspaceAccessResult:
        if user_id != principal.id and not _is_admin(principal):
            record_permission_denied("resolve_workspace_access")
            return WorkspaceAccessResult(
                error=user_forbidden("You can only resolve your own workspace access")
            )

        user = self._users.get_user_by_id(user_id)
        subject = Principal.from_user(user) if user and user.is_active else None
        return WorkspaceAccessResult(access=check_workspace_access(subject, workspace))


__all__ = [
    "GetUserCapabilitiesUseCase",
    "GetPermissionsMatrixUseCase",
    "ResolveWorkspaceAccessUseCase",
]

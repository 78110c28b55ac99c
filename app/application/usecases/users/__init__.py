"""
===============================================================================
USER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Responsibilities:
    - Re-exportar los casos de uso de usuarios, capacidades y acceso.
    - Re-exportar resultados y tipos de error.
===============================================================================
"""

from __future__ import annotations

from .create_user import CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .manage_users import ListUsersUseCase, UpdateUserUseCase
from .user_access import (
    GetPermissionsMatrixUseCase,
    GetUserCapabilitiesUseCase,
    ResolveWorkspaceAccessUseCase,
)
from .user_results import (
    DeleteUserResult,
    PermissionsMatrixResult,
    UserCapabilitiesResult,
    UserError,
    UserErrorCode,
    UserListResult,
    UserResult,
    WorkspaceAccessResult,
)

__all__ = [
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "ListUsersUseCase",
    "UpdateUserUseCase",
    "GetUserCapabilitiesUseCase",
    "GetPermissionsMatrixUseCase",
    "ResolveWorkspaceAccessUseCase",
    "UserResult",
    "DeleteUserResult",
    "UserListResult",
    "UserCapabilitiesResult",
    "PermissionsMatrixResult",
    "WorkspaceAccessResult",
    "UserError",
    "UserErrorCode",
]

"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Name:
    User Use Case Results

Business Goal:
    Modelos compartidos de resultados y errores para los casos de uso de
    usuarios, capacidades y acceso a workspaces.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - UserErrorCode / UserError como contrato de error.
    - Resultados por caso de uso (alta, listado, edición, capacidades,
      matriz y acceso a workspace).

Collaborators:
    - identity.users.User
    - domain.capabilities.Capabilities
    - domain.workspace_policy.WorkspaceAccess
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Final, List

from ....domain.capabilities import Capabilities
from ....domain.workspace_policy import WorkspaceAccess
from ....identity.users import User

RESOURCE_USER: Final[str] = "User"


class UserErrorCode(str, Enum):
    """Mismo set de categorías que los documentos (mapeo HTTP uniforme)."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


@dataclass(frozen=True)
class UserError:
    code: UserErrorCode
    message: str
    resource: str | None = RESOURCE_USER


def user_not_found() -> UserError:
    return UserError(code=UserErrorCode.NOT_FOUND, message="User not found")


def user_forbidden(message: str) -> UserError:
    return UserError(code=UserErrorCode.FORBIDDEN, message=message)


def user_validation_error(message: str) -> UserError:
    return UserError(code=UserErrorCode.VALIDATION_ERROR, message=message)


@dataclass
class UserResult:
    user: User | None = None
    error: UserError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    error: UserError | None = None


@dataclass
class UserCapabilitiesResult:
    user: User | None = None
    capabilities: Capabilities | None = None
    tokens: List[str] = field(default_factory=list)
    error: UserError | None = None


@dataclass
class PermissionsMatrixResult:
    matrix: Dict[str, Any] = field(default_factory=dict)
    error: UserError | None = None


@dataclass
class WorkspaceAccessResult:
    access: WorkspaceAccess | None = None
    error: UserError | None = None


@dataclass
class DeleteUserResult:
    deleted: bool = False
    purged_documents: int = 0
    error: UserError | None = None

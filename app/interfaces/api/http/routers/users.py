"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/users.py
===============================================================================

Name:
    Users Router

Responsibilities:
    - Alta, listado, edición y baja de usuarios.
    - Capabilities del caller o de otro usuario (administrador).
    - Resolver de acceso a workspace por userId.
    - Matriz de permisos rol × workspace.
    - Mapeo de UserError -> RFC7807.

Collaborators:
    - application.usecases.users
    - identity.auth_users.require_principal
    - schemas.users / schemas.workspaces
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from app.application.usecases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    GetPermissionsMatrixUseCase,
    GetUserCapabilitiesUseCase,
    ListUsersUseCase,
    ResolveWorkspaceAccessUseCase,
    UpdateUserUseCase,
)
from app.application.usecases.users.manage_users import DEFAULT_LIMIT, MAX_LIMIT
from app.application.usecases.users.user_results import UserCapabilitiesResult
from app.container import (
    get_create_user_use_case,
    get_delete_user_use_case,
    get_list_users_use_case,
    get_permissions_matrix_use_case,
    get_resolve_workspace_access_use_case,
    get_update_user_use_case,
    get_user_capabilities_use_case,
)
from app.crosscutting.pagination import clamp_limit
from app.domain.workspace_policy import Principal
from app.domain.workspaces import WorkspaceType
from app.identity.auth_users import require_principal
from app.identity.users import User, UserRole
from fastapi import APIRouter, Depends, Query, Response

from ..dependencies import parse_workspace_param
from ..error_mapping import raise_user_error
from ..schemas.users import (
    CreateUserReq,
    PermissionsMatrixRes,
    UpdateUserReq,
    UserCapabilitiesRes,
    UserRes,
    UsersListRes,
)
from ..schemas.workspaces import WorkspaceAccessRes
from .workspaces import to_access_res

router = APIRouter()


def to_user_res(user: User) -> UserRes:
    return UserRes(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        workspace=user.workspace,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login_at=user.last_login_at,
    )


def _to_capabilities_res(result: UserCapabilitiesResult) -> UserCapabilitiesRes:
    if result.error is not None:
        raise_user_error(result.error)
    assert result.user is not None and result.capabilities is not None
    return UserCapabilitiesRes(
        user_id=result.user.id,
        role=result.user.role,
        workspace=result.user.workspace,
        capabilities=result.capabilities.to_dict(),
        tokens=list(result.tokens),
    )


# =============================================================================
# CRUD
# =============================================================================


@router.get("/users", response_model=UsersListRes, tags=["users"])
def list_users(
    role: UserRole | None = None,
    workspace: WorkspaceType | None = None,
    is_active: bool | None = None,
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(
        principal=principal,
        role=role,
        workspace=workspace,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )
    if result.error is not None:
        raise_user_error(result.error)
    return UsersListRes(
        users=[to_user_res(u) for u in result.users],
        limit=clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT),
        offset=offset,
    )


@router.post("/users", response_model=UserRes, status_code=201, tags=["users"])
def create_user(
    req: CreateUserReq,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(
        principal=principal,
        email=req.email,
        password=req.password,
        full_name=req.full_name,
        role=req.role.value,
        workspace=req.workspace.value,
    )
    if result.error is not None:
        raise_user_error(result.error)
    assert result.user is not None
    return to_user_res(result.user)


# R: /users/me/* antes de /users/{user_id}/*.
@router.get(
    "/users/me/capabilities", response_model=UserCapabilitiesRes, tags=["users"]
)
def my_capabilities(
    use_case: GetUserCapabilitiesUseCase = Depends(get_user_capabilities_use_case),
    principal: Principal = Depends(require_principal),
):
    return _to_capabilities_res(use_case.execute(principal=principal))


@router.patch("/users/{user_id}", response_model=UserRes, tags=["users"])
def update_user(
    user_id: UUID,
    req: UpdateUserReq,
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(
        principal=principal,
        user_id=user_id,
        full_name=req.full_name,
        role=req.role.value if req.role else None,
        workspace=req.workspace.value if req.workspace else None,
        is_active=req.is_active,
        password=req.password,
    )
    if result.error is not None:
        raise_user_error(result.error)
    assert result.user is not None
    return to_user_res(result.user)


@router.delete("/users/{user_id}", status_code=204, tags=["users"])
def delete_user(
    user_id: UUID,
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
    principal: Principal = Depends(require_principal),
):
    """Sólo administrador; sus documentos archivados se purgan."""
    result = use_case.execute(principal=principal, user_id=user_id)
    if result.error is not None:
        raise_user_error(result.error)
    return Response(status_code=204)


# =============================================================================
# Capabilities / acceso
# =============================================================================


@router.get(
    "/users/{user_id}/capabilities",
    response_model=UserCapabilitiesRes,
    tags=["users"],
)
def user_capabilities(
    user_id: UUID,
    use_case: GetUserCapabilitiesUseCase = Depends(get_user_capabilities_use_case),
    principal: Principal = Depends(require_principal),
):
    return _to_capabilities_res(use_case.execute(principal=principal, user_id=user_id))


@router.get(
    "/users/{user_id}/workspaces/{workspace}/access",
    response_model=WorkspaceAccessRes,
    tags=["users"],
)
def user_workspace_access(
    user_id: UUID,
    workspace: str,
    use_case: ResolveWorkspaceAccessUseCase = Depends(
        get_resolve_workspace_access_use_case
    ),
    principal: Principal = Depends(require_principal),
):
    ws = parse_workspace_param(workspace)
    result = use_case.execute(principal=principal, user_id=user_id, workspace=ws)
    if result.error is not None:
        raise_user_error(result.error)
    assert result.access is not None
    return to_access_res(ws, result.access)


@router.get(
    "/permissions/matrix", response_model=PermissionsMatrixRes, tags=["users"]
)
def permissions_matrix(
    use_case: GetPermissionsMatrixUseCase = Depends(get_permissions_matrix_use_case),
    principal: Principal = Depends(require_principal),
):
    result = use_case.execute(principal=principal)
    if result.error is not None:
        raise_user_error(result.error)
    return PermissionsMatrixRes(**result.matrix)

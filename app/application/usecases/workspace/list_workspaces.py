"""
===============================================================================
USE CASE: List Workspaces (catálogo + acceso del principal)
===============================================================================

Name:
    List Workspaces Use Case

Business Goal:
    Devolver los cinco workspaces del catálogo junto con el WorkspaceAccess
    que el resolver asigna al principal en cada uno.

Why (Context / Intención):
    - La UI decide qué mostrar (y con qué acciones) a partir de `permissions`;
      se devuelven también los workspaces sin acceso, con su `reason`.
    - Opcionalmente se filtran sólo los accesibles.

Collaborators:
    - domain.workspaces.WORKSPACE_DEFINITIONS / ALL_WORKSPACES
    - domain.workspace_policy.check_workspace_access
===============================================================================
"""

from __future__ import annotations

from ....domain.workspace_policy import Principal, check_workspace_access
from ....domain.workspaces import ALL_WORKSPACES, WORKSPACE_DEFINITIONS
from .workspace_results import WorkspaceListResult, WorkspaceOverview


class ListWorkspacesUseCase:
    """
    Use Case (Application Service / Query):
        Lista workspaces con el acceso resuelto para el principal.
    """

    def execute(
        self, *, principal: Principal, only_accessible: bool = False
    ) -> WorkspaceListResult:
        overviews = []
        for workspace in ALL_WORKSPACES:
            access = check_workspace_access(principal, workspace)
            if only_accessible and not access.has_access:
                continue
            overviews.append(
                WorkspaceOverview(
                    workspace=workspace,
                    definition=WORKSPACE_DEFINITIONS[workspace],
                    access=access,
                )
            )
        return WorkspaceListResult(workspaces=overviews)

"""
===============================================================================
WORKSPACE USE CASES PACKAGE (Public API / Exports)
===============================================================================

Name:
    Workspace Use Cases (package exports)

Business Goal:
    Punto único de importación para los casos de uso sobre el catálogo de
    workspaces (acceso, estadísticas, documentos por workspace).

-------------------------------------------------------------------------------
CRC CARD (Module-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    workspace usecases package (__init__.py)

Responsibilities:
    - Re-exportar casos de uso y resultados del subdominio Workspace.

Collaborators:
    - list_workspaces, workspace_stats, workspace_documents, workspace_results
===============================================================================
"""

from __future__ import annotations

from .list_workspaces import ListWorkspacesUseCase
from .workspace_documents import ListWorkspaceDocumentsUseCase
from .workspace_results import (
    WorkspaceListResult,
    WorkspaceOverview,
    WorkspaceStats,
    WorkspaceStatsResult,
)
from .workspace_stats import GetWorkspaceStatsUseCase

__all__ = [
    "ListWorkspacesUseCase",
    "GetWorkspaceStatsUseCase",
    "ListWorkspaceDocumentsUseCase",
    "WorkspaceListResult",
    "WorkspaceOverview",
    "WorkspaceStats",
    "WorkspaceStatsResult",
]

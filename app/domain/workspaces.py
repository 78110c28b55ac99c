"""
===============================================================================
TARJETA CRC — domain/workspaces.py
===============================================================================

Módulo:
    Catálogo de Workspaces Organizacionales

Responsabilidades:
    - Definir el conjunto cerrado de workspaces (cam, ampp, presidencia,
      intendencia, comisiones_cf).
    - Exponer nombre y descripción de cada workspace para la UI.
    - Parsear valores crudos (query params, filas) de forma tolerante.

Colaboradores:
    - domain.capabilities / domain.workspace_policy: deciden acceso por workspace.
    - domain.facets: esquema de facetas por workspace.
    - interfaces/api: listados y validación de path params.

Notas:
    - Es un enum cerrado: agregar un workspace exige migración (CHECK en DB)
      y revisar accessible_workspaces().
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class WorkspaceType(str, Enum):
    """Workspaces organizacionales."""

    CAM = "cam"
    AMPP = "ampp"
    PRESIDENCIA = "presidencia"
    INTENDENCIA = "intendencia"
    COMISIONES_CF = "comisiones_cf"


# Orden canónico: se usa para accessible_workspaces() y la matriz de permisos.
ALL_WORKSPACES: Final[tuple[WorkspaceType, ...]] = (
    WorkspaceType.PRESIDENCIA,
    WorkspaceType.INTENDENCIA,
    WorkspaceType.CAM,
    WorkspaceType.AMPP,
    WorkspaceType.COMISIONES_CF,
)


@dataclass(frozen=True, slots=True)
class WorkspaceDefinition:
    """Metadata estática de un workspace."""

    type: WorkspaceType
    name: str
    description: str


WORKSPACE_DEFINITIONS: Final[dict[WorkspaceType, WorkspaceDefinition]] = {
    WorkspaceType.CAM: WorkspaceDefinition(
        type=WorkspaceType.CAM,
        name="CAM",
        description="Cámara de Comercio - Gestión de documentos comerciales y empresariales",
    ),
    WorkspaceType.AMPP: WorkspaceDefinition(
        type=WorkspaceType.AMPP,
        name="AMPP",
        description="Asociación de Municipalidades - Documentos municipales y administrativos",
    ),
    WorkspaceType.PRESIDENCIA: WorkspaceDefinition(
        type=WorkspaceType.PRESIDENCIA,
        name="Presidencia",
        description="Presidencia - Documentos ejecutivos y de alta dirección",
    ),
    WorkspaceType.INTENDENCIA: WorkspaceDefinition(
        type=WorkspaceType.INTENDENCIA,
        name="Intendencia",
        description="Intendencia - Documentos de gestión territorial y administrativa",
    ),
    WorkspaceType.COMISIONES_CF: WorkspaceDefinition(
        type=WorkspaceType.COMISIONES_CF,
        name="Comisiones CF",
        description="Comisiones de Fiscalización - Documentos de control y supervisión",
    ),
}


def parse_workspace(value: WorkspaceType | str | None) -> WorkspaceType | None:
    """Convierte un valor crudo en WorkspaceType; None si es desconocido."""
    if value is None:
        return None
    if isinstance(value, WorkspaceType):
        return value
    try:
        return WorkspaceType(str(value).strip().lower())
    except ValueError:
        return None

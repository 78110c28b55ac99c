# =============================================================================
# FILE: domain/value_objects.py
# =============================================================================
"""
===============================================================================
DOMAIN: Value Objects (Immutable Domain Primitives)
===============================================================================

Name:
    Domain Value Objects

Qué es:
    Objetos de valor inmutables que representan conceptos del dominio
    sin identidad propia. Son iguales si sus atributos son iguales.

Contenido:
    - DocumentSort: ordenamiento permitido para listados
    - DocumentStats / UserStats: agregados para dashboards
    - ActivityQuery: filtros de consulta del log de actividad
    - format_file_size: representación legible de tamaños

Principios:
    - Inmutabilidad (frozen dataclasses)
    - Validación en constructor
    - Sin side effects
    - Equality por valor

===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Final, Literal, Optional
from uuid import UUID

from .entities import ActivityAction
from .workspaces import WorkspaceType

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
SORTABLE_FIELDS: Final[tuple[str, ...]] = (
    "created_at",
    "updated_at",
    "title",
    "file_size",
)
_SIZE_UNITS: Final[tuple[str, ...]] = ("Bytes", "KB", "MB", "GB", "TB")


# -----------------------------------------------------------------------------
# Sorting
# -----------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class DocumentSort:
    """
    Ordenamiento de listados (allowlist).

    Un campo fuera de SORTABLE_FIELDS se rechaza en el constructor para que
    ningún valor de usuario llegue a SQL.
    """

    field: str = "created_at"
    order: Literal["asc", "desc"] = "desc"

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_FIELDS:
            raise ValueError(f"Unsupported sort field: {self.field}")
        if self.order not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort order: {self.order}")


# -----------------------------------------------------------------------------
# Stats
# -----------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class DocumentStats:
    total: int = 0
    total_size: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    by_workspace: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "total_size": self.total_size,
            "total_size_formatted": format_file_size(self.total_size),
            "by_status": dict(self.by_status),
            "by_workspace": dict(self.by_workspace),
        }


@dataclass(frozen=True, slots=True)
class UserStats:
    total: int = 0
    active: int = 0
    by_role: Dict[str, int] = field(default_factory=dict)
    by_workspace: Dict[str, int] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Activity query
# -----------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ActivityQuery:
    """Filtros del log de actividad (todos opcionales, combinados con AND)."""

    document_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    action: Optional[ActivityAction] = None
    workspace: Optional[WorkspaceType] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def format_file_size(size_bytes: int) -> str:
    """1536 -> '1.5 KB'. Negativos o cero -> '0 Bytes'."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    rounded = round(value, 2)
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit_index]}"

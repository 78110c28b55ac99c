"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/predicate_sql.py
============================================================
Componente: compile_predicate

Responsibilities:
  - Traducir el árbol de predicados de domain.visibility a un fragmento
    WHERE parametrizado (texto SQL + lista de parámetros).

Collaborators:
  - domain.visibility (nodos del árbol)
  - postgres/document.py (query_documents / document_stats)

Constraints / Notes:
  - Los nombres de columna salen de un allowlist; los valores siempre van
    como parámetros (%s), nunca interpolados.
  - Cada nodo compuesto se envuelve en paréntesis: el OR de visibilidad
    nunca se mezcla con los AND de filtros o búsqueda.
============================================================
"""

from __future__ import annotations

from typing import Any, Final

from ....domain.visibility import (
    AllOf,
    AnyOf,
    CreatedBetween,
    FacetEquals,
    FieldEquals,
    FieldIn,
    HasAllTags,
    MatchAll,
    MatchNone,
    Predicate,
    TextSearch,
)

# Allowlist: campo lógico -> columna real.
_COLUMNS: Final[dict[str, str]] = {
    "workspace": "workspace",
    "status": "status",
    "created_by": "created_by",
    "mime_type": "mime_type",
    "title": "title",
    "description": "description",
    "file_name": "file_name",
}


def _column(name: str) -> str:
    try:
        return _COLUMNS[name]
    except KeyError:
        raise ValueError(f"Unsupported predicate field: {name}") from None


def _param(value: Any) -> Any:
    # Enums (WorkspaceType, DocumentStatus) viajan como su valor string.
    return getattr(value, "value", value)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_predicate(predicate: Predicate) -> tuple[str, list[Any]]:
    """Devuelve (sql, params) listo para `WHERE {sql}`."""
    if isinstance(predicate, MatchAll):
        return "TRUE", []
    if isinstance(predicate, MatchNone):
        return "FALSE", []

    if isinstance(predicate, FieldEquals):
        return f"{_column(predicate.field)} = %s", [_param(predicate.value)]

    if isinstance(predicate, FieldIn):
        if not predicate.values:
            return "FALSE", []
        return f"{_column(predicate.field)} = ANY(%s)", [
            [_param(v) for v in predicate.values]
        ]

    if isinstance(predicate, TextSearch):
        like = f"%{_escape_like(predicate.text)}%"
        parts = [f"{_column(name)} ILIKE %s" for name in predicate.fields]
        return "(" + " OR ".join(parts) + ")", [like] * len(parts)

    if isinstance(predicate, HasAllTags):
        return "tags @> %s", [list(predicate.tags)]

    if isinstance(predicate, FacetEquals):
        return "facets ->> %s = %s", [predicate.key, predicate.value]

    if isinstance(predicate, CreatedBetween):
        parts: list[str] = []
        params: list[Any] = []
        if predicate.start is not None:
            parts.append("created_at >= %s")
            params.append(predicate.start)
        if predicate.end is not None:
            parts.append("created_at <= %s")
            params.append(predicate.end)
        if not parts:
            return "TRUE", []
        return "(" + " AND ".join(parts) + ")", params

    if isinstance(predicate, (AllOf, AnyOf)):
        joiner = " AND " if isinstance(predicate, AllOf) else " OR "
        if not predicate.children:
            return ("TRUE", []) if isinstance(predicate, AllOf) else ("FALSE", [])
        fragments: list[str] = []
        params = []
        for child in predicate.children:
            sql, child_params = compile_predicate(child)
            fragments.append(f"({sql})")
            params.extend(child_params)
        return "(" + joiner.join(fragments) + ")", params

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")

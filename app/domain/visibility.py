"""
===============================================================================
TARJETA CRC — domain/visibility.py
===============================================================================

Módulo:
    Filtro de Visibilidad de Documentos (árbol de predicados abstracto)

Responsabilidades:
    - Definir un árbol de predicados independiente de SQL.
    - Construir el predicado de listado (policy A) y el de visibilidad
      estricta (policy B) a partir de un Principal y filtros de usuario.
    - Evaluar un predicado contra un Document en memoria.

Colaboradores:
    - domain.workspace_policy: accessible_workspaces(principal).
    - infrastructure/repositories/postgres/predicate_sql.py: compila a SQL.
    - infrastructure/repositories/in_memory/document.py: usa matches().

Reglas (intención):
    - La disyunción de visibilidad nunca se aplana con la de búsqueda:
      siempre se combina como AllOf(visibilidad, búsqueda).
    - Un filtro de workspace sin acceso nunca amplía la visibilidad.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Union
from uuid import UUID

from ..identity.users import EXECUTIVE_ROLES, UserRole, parse_role
from .entities import Document, DocumentStatus
from .workspace_policy import Principal, accessible_workspaces
from .workspaces import WorkspaceType

FilterField = Literal["workspace", "status", "created_by", "mime_type"]
TextField = Literal["title", "description", "file_name"]


# =============================================================================
# Nodos del árbol
# =============================================================================


@dataclass(frozen=True)
class MatchAll:
    pass


@dataclass(frozen=True)
class MatchNone:
    pass


@dataclass(frozen=True)
class FieldEquals:
    field: FilterField
    value: Any


@dataclass(frozen=True)
class FieldIn:
    field: FilterField
    values: tuple[Any, ...]


@dataclass(frozen=True)
class TextSearch:
    """Coincidencia case-insensitive de substring en cualquiera de los campos."""

    text: str
    fields: tuple[TextField, ...] = ("title", "description", "file_name")


@dataclass(frozen=True)
class HasAllTags:
    tags: tuple[str, ...]


@dataclass(frozen=True)
class FacetEquals:
    key: str
    value: str


@dataclass(frozen=True)
class CreatedBetween:
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class AllOf:
    children: tuple["Predicate", ...]


@dataclass(frozen=True)
class AnyOf:
    children: tuple["Predicate", ...]


Predicate = Union[
    MatchAll,
    MatchNone,
    FieldEquals,
    FieldIn,
    TextSearch,
    HasAllTags,
    FacetEquals,
    CreatedBetween,
    AllOf,
    AnyOf,
]


@dataclass(frozen=True)
class DocumentFilters:
    """Filtros de usuario para listados."""

    workspace: WorkspaceType | None = None
    statuses: tuple[DocumentStatus, ...] = ()
    created_by: UUID | None = None
    mime_type: str | None = None
    tags: tuple[str, ...] = ()
    facets: dict[str, str] = field(default_factory=dict)
    search: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


# =============================================================================
# Builders
# =============================================================================


def all_of(*children: Predicate) -> Predicate:
    """AllOf simplificado: descarta MatchAll y colapsa ante MatchNone."""
    kept: list[Predicate] = []
    for child in children:
        if isinstance(child, MatchNone):
            return MatchNone()
        if isinstance(child, MatchAll):
            continue
        kept.append(child)
    if not kept:
        return MatchAll()
    if len(kept) == 1:
        return kept[0]
    return AllOf(tuple(kept))


def _workspace_in(workspaces: list[WorkspaceType]) -> Predicate:
    if not workspaces:
        return MatchNone()
    return FieldIn("workspace", tuple(workspaces))


def _user_filters(filters: DocumentFilters, *, include_workspace: bool) -> Predicate:
    """Filtros de usuario (AND). La búsqueda queda encapsulada en su nodo."""
    parts: list[Predicate] = []
    if include_workspace and filters.workspace is not None:
        parts.append(FieldEquals("workspace", filters.workspace))
    if filters.statuses:
        if len(filters.statuses) == 1:
            parts.append(FieldEquals("status", filters.statuses[0]))
        else:
            parts.append(FieldIn("status", tuple(filters.statuses)))
    if filters.created_by is not None:
        parts.append(FieldEquals("created_by", filters.created_by))
    if filters.mime_type:
        parts.append(FieldEquals("mime_type", filters.mime_type))
    if filters.tags:
        parts.append(HasAllTags(tuple(filters.tags)))
    for key, value in sorted(filters.facets.items()):
        parts.append(FacetEquals(key, value))
    if filters.date_from is not None or filters.date_to is not None:
        parts.append(CreatedBetween(filters.date_from, filters.date_to))
    search = (filters.search or "").strip()
    if search:
        parts.append(TextSearch(search))
    return all_of(*parts)


def build_listing_predicate(
    principal: Principal, filters: DocumentFilters | None = None
) -> Predicate:
    """
    Policy A (listado general).

    - administrador: sin restricción.
    - resto: propios OR workspace accesible.
    - workspace pedido sin acceso: se reduce a propios de ese workspace.
    """
    filters = filters or DocumentFilters()
    if parse_role(principal.role) == UserRole.ADMINISTRADOR:
        return _user_filters(filters, include_workspace=True)

    accessible = accessible_workspaces(principal)
    own = FieldEquals("created_by", principal.id)

    if filters.workspace is not None:
        if filters.workspace in accessible:
            visibility: Predicate = FieldEquals("workspace", filters.workspace)
        else:
            visibility = all_of(FieldEquals("workspace", filters.workspace), own)
    else:
        visibility = AnyOf((own, _workspace_in(accessible)))

    return all_of(visibility, _user_filters(filters, include_workspace=False))


def build_visibility_predicate(
    principal: Principal, filters: DocumentFilters | None = None
) -> Predicate:
    """
    Policy B (visibilidad estricta, borradores aislados).

    - administrador / presidente / vicepresidente: sin restricción.
    - resto: propios OR (stored AND workspace accesible).
    - workspace pedido sin acceso: sin resultados.
    """
    filters = filters or DocumentFilters()
    role = parse_role(principal.role)
    if role == UserRole.ADMINISTRADOR or role in EXECUTIVE_ROLES:
        return _user_filters(filters, include_workspace=True)

    accessible = accessible_workspaces(principal)
    if filters.workspace is not None:
        if filters.workspace not in accessible:
            return MatchNone()
        scope: list[WorkspaceType] = [filters.workspace]
    else:
        scope = accessible

    visible_stored = all_of(
        FieldEquals("status", DocumentStatus.STORED), _workspace_in(scope)
    )
    own = FieldEquals("created_by", principal.id)
    if filters.workspace is not None:
        own = all_of(own, FieldEquals("workspace", filters.workspace))
    visibility = AnyOf((own, visible_stored))

    return all_of(visibility, _user_filters(filters, include_workspace=False))


def is_document_visible(principal: Principal, document: Document) -> bool:
    """Visibilidad de un documento puntual bajo policy B."""
    return matches(build_visibility_predicate(principal), document)


# =============================================================================
# Evaluación en memoria
# =============================================================================


def _field_value(document: Document, name: str) -> Any:
    value = getattr(document, name)
    return getattr(value, "value", value)


def _normalize(value: Any) -> Any:
    return getattr(value, "value", value)


def matches(predicate: Predicate, document: Document) -> bool:
    """Evalúa el predicado contra un documento."""
    if isinstance(predicate, MatchAll):
        return True
    if isinstance(predicate, MatchNone):
        return False
    if isinstance(predicate, FieldEquals):
        return _field_value(document, predicate.field) == _normalize(predicate.value)
    if isinstance(predicate, FieldIn):
        current = _field_value(document, predicate.field)
        return current in {_normalize(value) for value in predicate.values}
    if isinstance(predicate, TextSearch):
        needle = predicate.text.lower()
        for name in predicate.fields:
            haystack = getattr(document, name) or ""
            if needle in haystack.lower():
                return True
        return False
    if isinstance(predicate, HasAllTags):
        return set(predicate.tags).issubset(set(document.tags or []))
    if isinstance(predicate, FacetEquals):
        return (document.facets or {}).get(predicate.key) == predicate.value
    if isinstance(predicate, CreatedBetween):
        created = document.created_at
        if created is None:
            return False
        if predicate.start is not None and created < predicate.start:
            return False
        if predicate.end is not None and created > predicate.end:
            return False
        return True
    if isinstance(predicate, AllOf):
        return all(matches(child, document) for child in predicate.children)
    if isinstance(predicate, AnyOf):
        return any(matches(child, document) for child in predicate.children)
    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")

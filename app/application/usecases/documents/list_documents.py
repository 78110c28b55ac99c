"""
===============================================================================
USE CASE: List Documents (listado paginado con visibilidad)
===============================================================================

Name:
    List Documents Use Case

Business Goal:
    Listar documentos visibles para el principal con filtros, orden y
    paginación (offset o cursor).

Why (Context / Intención):
    - La visibilidad se expresa como un árbol de predicados del dominio; el
      repositorio lo compila a SQL parametrizado o lo evalúa en memoria.
    - El orden sólo admite campos de una allowlist (DocumentSort).
    - Límite acotado para evitar consultas costosas.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ListDocumentsUseCase

Responsibilities:
    - Normalizar paginación (default 20, máximo 100).
    - Construir el predicado de visibilidad (policy B por defecto).
    - Delegar la consulta al repositorio y armar el resultado paginado.

Collaborators:
    - domain.visibility: build_visibility_predicate / build_listing_predicate
    - DocumentRepository.query_documents
    - crosscutting.pagination
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from ....crosscutting.pagination import clamp_limit, next_cursor, resolve_offset
from ....domain.repositories import DocumentRepository
from ....domain.value_objects import DocumentSort
from ....domain.visibility import (
    DocumentFilters,
    build_listing_predicate,
    build_visibility_predicate,
)
from ....domain.workspace_policy import Principal
from .document_results import ListDocumentsResult

DEFAULT_LIMIT: Final[int] = 20
MAX_LIMIT: Final[int] = 100


class VisibilityPolicy(str, Enum):
    """
    STRICT: borradores aislados (propios o stored en workspaces accesibles).
    LISTING: propios o cualquier documento de workspaces accesibles.
    """

    STRICT = "strict"
    LISTING = "listing"


class ListDocumentsUseCase:
    """
    Use Case (Application Service / Query):
        Lista documentos visibles con filtros y paginación.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        *,
        policy: VisibilityPolicy = VisibilityPolicy.STRICT,
    ) -> None:
        self._documents = repository
        self._policy = policy

    def execute(
        self,
        *,
        principal: Principal,
        filters: DocumentFilters | None = None,
        sort: DocumentSort | None = None,
        limit: int | None = None,
        offset: int | None = None,
        cursor: str | None = None,
    ) -> ListDocumentsResult:
        # ---------------------------------------------------------------------
        # 1) Paginación.
        # ---------------------------------------------------------------------
        page_size = clamp_limit(limit, default=DEFAULT_LIMIT, maximum=MAX_LIMIT)
        start = resolve_offset(cursor=cursor, offset=offset)

        # ---------------------------------------------------------------------
        # 2) Predicado de visibilidad + filtros de usuario.
        # ---------------------------------------------------------------------
        if self._policy == VisibilityPolicy.LISTING:
            predicate = build_listing_predicate(principal, filters)
        else:
            predicate = build_visibility_predicate(principal, filters)

        # ---------------------------------------------------------------------
        # 3) Consulta.
        # ---------------------------------------------------------------------
        documents, total = self._documents.query_documents(
            predicate,
            sort=sort or DocumentSort(),
            limit=page_size,
            offset=start,
        )

        return ListDocumentsResult(
            documents=documents,
            total=total,
            has_more=start + len(documents) < total,
            next_cursor=next_cursor(offset=start, limit=page_size, total=total),
        )

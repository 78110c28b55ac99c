"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/document.py
============================================================
Class: InMemoryDocumentRepository

Responsibilities:
  - Almacenar documentos en memoria (tests / local dev).
  - Evaluar el árbol de predicados con domain.visibility.matches.
  - Replicar la semántica compare-and-set de las transiciones de estado.
  - Mantener ordering determinístico alineado con Postgres.

Collaborators:
  - domain.entities.Document / DocumentStatus
  - domain.visibility.matches
  - domain.repositories.DocumentRepository (contrato a implementar)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Copias: se devuelven copias para que los callers no muten el "storage".
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from ....domain.entities import Document, DocumentStatus
from ....domain.repositories import DocumentRepository
from ....domain.value_objects import DocumentSort, DocumentStats
from ....domain.visibility import Predicate, matches

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _copy(document: Document) -> Document:
    return replace(
        document,
        tags=list(document.tags),
        facets=dict(document.facets),
        metadata=dict(document.metadata),
    )


class InMemoryDocumentRepository(DocumentRepository):
    """Repositorio in-memory, thread-safe, para documentos."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._documents: Dict[UUID, Document] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _sort_key(field: str):
        def key(doc: Document):
            value = getattr(doc, field)
            if value is None:
                return _EPOCH if field in ("created_at", "updated_at") else ""
            if isinstance(value, str):
                return value.lower()
            return value

        return key

    # =========================================================
    # Persistencia
    # =========================================================
    def save_document(self, document: Document) -> None:
        now = self._now()
        stored = _copy(document)
        if stored.created_at is None:
            stored.created_at = now
        if stored.updated_at is None:
            stored.updated_at = stored.created_at
        with self._lock:
            self._documents[stored.id] = stored

    def get_document(self, document_id: UUID) -> Optional[Document]:
        with self._lock:
            doc = self._documents.get(document_id)
            return _copy(doc) if doc else None

    # =========================================================
    # Listados / agregados
    # =========================================================
    def query_documents(
        self,
        predicate: Predicate,
        *,
        sort: DocumentSort | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Document], int]:
        if limit <= 0:
            return [], 0
        sort = sort or DocumentSort()
        with self._lock:
            selected = [d for d in self._documents.values() if matches(predicate, d)]

        selected.sort(
            key=self._sort_key(sort.field),
            reverse=sort.order == "desc",
        )
        offset = max(0, offset)
        page = selected[offset : offset + limit]
        return [_copy(d) for d in page], len(selected)

    def document_stats(self, predicate: Predicate) -> DocumentStats:
        with self._lock:
            selected = [d for d in self._documents.values() if matches(predicate, d)]

        by_status: Dict[str, int] = {}
        by_workspace: Dict[str, int] = {}
        for doc in selected:
            by_status[doc.status.value] = by_status.get(doc.status.value, 0) + 1
            by_workspace[doc.workspace.value] = (
                by_workspace.get(doc.workspace.value, 0) + 1
            )
        return DocumentStats(
            total=len(selected),
            total_size=sum(d.file_size for d in selected),
            by_status=by_status,
            by_workspace=by_workspace,
        )

    # =========================================================
    # Updates
    # =========================================================
    def update_document_metadata(
        self,
        document_id: UUID,
        *,
        title: str | None = None,
        description: str | None = None,
        tags: List[str] | None = None,
        facets: Dict[str, str] | None = None,
        updated_at: datetime,
    ) -> bool:
        with self._lock:
            doc = self._documents.get(document_id)
            if doc is None:
                return False
            if title is not None:
                doc.title = title
            if description is not None:
                doc.description = description
            if tags is not None:
                doc.tags = list(tags)
            if facets is not None:
                doc.facets = dict(facets)
            doc.updated_at = updated_at
            return True

    def transition_document_status(
        self,
        document_id: UUID,
        *,
        expected_status: DocumentStatus,
        new_status: DocumentStatus,
        stored_at: datetime | None,
        archived_at: datetime | None,
        updated_at: datetime,
    ) -> bool:
        """Compare-and-set bajo lock (equivalente al UPDATE ... AND status = %s)."""
        with self._lock:
            doc = self._documents.get(document_id)
            if doc is None or doc.status != expected_status:
                return False
            doc.status = new_status
            doc.stored_at = stored_at
            doc.archived_at = archived_at
            doc.updated_at = updated_at
            return True

    def delete_document(self, document_id: UUID) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    def ping(self) -> bool:
        return True

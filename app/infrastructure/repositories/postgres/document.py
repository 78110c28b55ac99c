"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/document.py
============================================================
Class: PostgresDocumentRepository

Responsibilities:
- Implementar el repositorio de documentos sobre PostgreSQL.
- Listados y agregados a partir del árbol de predicados de visibilidad
  (compilado a SQL parametrizado por predicate_sql).
- Transiciones de estado condicionales (compare-and-set sobre status).
- Borrado físico de la fila (el archivo lo borra el use case).

Collaborators:
- domain.entities: Document, DocumentStatus
- domain.visibility: Predicate
- infrastructure.db.pool: get_pool() (pool instrumentado)
- postgres.predicate_sql.compile_predicate
- crosscutting.logger / crosscutting.exceptions

Constraints / Notes (Clean / KISS):
- Este archivo es “infra”: NO contiene políticas de negocio (RBAC/visibilidad);
  recibe el predicado ya construido por el dominio.
- Todas las queries son parametrizadas (no interpolar input de usuario).
- ORDER BY solo desde allowlist (_SORT_COLUMNS).
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable
from uuid import UUID

from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import Document, DocumentStatus
from ....domain.value_objects import DocumentSort, DocumentStats
from ....domain.visibility import Predicate
from ....domain.workspaces import WorkspaceType
from .predicate_sql import compile_predicate

# Allowlist de ORDER BY: evita inyección y mantiene un contrato estable de sorting.
_SORT_COLUMNS: dict[str, str] = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "title": "title",
    "file_size": "file_size",
}
_MAX_PAGE_SIZE = 500


class PostgresDocumentRepository:
    """
    Repositorio PostgreSQL para documentos (metadata + estado).

    Modelo mental:
    - documents: metadata + estado del ciclo de vida + datos del archivo
    - los bytes viven en el object storage (storage_key)
    """

    # ---------------------------------------------------------------------
    # SQL SELECT “canon” (misma proyección => mapeo consistente)
    # ---------------------------------------------------------------------
    _DOC_SELECT_COLUMNS = """
        id, title, description, workspace, status, tags, facets, metadata,
        created_by, file_name, file_size, mime_type, file_hash, storage_key,
        created_at, updated_at, stored_at, archived_at
    """

    def __init__(self, pool: ConnectionPool | None = None):
        # Pool inyectable: tests pueden usar un pool controlado o fake.
        self._pool = pool

    # ============================================================
    # Pool
    # ============================================================
    def _get_pool(self) -> ConnectionPool:
        """Devuelve el pool inyectado o el pool global (lazy import)."""
        if self._pool is not None:
            return self._pool

        from app.infrastructure.db.pool import get_pool

        return get_pool()

    # ============================================================
    # Helpers DB (DRY: logging + exception wrapping consistente)
    # ============================================================
    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
    ) -> list[tuple]:
        """Ejecuta SELECT y devuelve todas las filas."""
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
    ) -> tuple | None:
        """Ejecuta SELECT y devuelve una fila o None."""
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    def _execute(
        self,
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
    ) -> int:
        """Ejecuta un statement de escritura y devuelve rowcount."""
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                result = conn.execute(query, tuple(params))
            return int(result.rowcount or 0)
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    # ============================================================
    # Mapping (SQL row -> entidades)
    # ============================================================
    def _row_to_document(self, row: tuple) -> Document:
        """
        Mapea un row de documents al entity Document.

        Mantener esta función “única” reduce bugs por desalineación de columnas.
        """
        return Document(
            id=row[0],
            title=row[1],
            description=row[2],
            workspace=WorkspaceType(row[3]),
            status=DocumentStatus(row[4]),
            tags=list(row[5] or []),
            facets=dict(row[6] or {}),
            metadata=dict(row[7] or {}),
            created_by=row[8],
            file_name=row[9] or "",
            file_size=int(row[10] or 0),
            mime_type=row[11] or "",
            file_hash=row[12] or "",
            storage_key=row[13],
            created_at=row[14],
            updated_at=row[15],
            stored_at=row[16],
            archived_at=row[17],
        )

    # ============================================================
    # Persistencia
    # ============================================================
    def save_document(self, document: Document) -> None:
        """Inserta un documento nuevo (siempre nace en draft)."""
        query = """
            INSERT INTO documents (
                id, title, description, workspace, status, tags, facets, metadata,
                created_by, file_name, file_size, mime_type, file_hash, storage_key,
                created_at, updated_at, stored_at, archived_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    COALESCE(%s, NOW()), COALESCE(%s, NOW()), %s, %s)
        """
        params = (
            document.id,
            document.title,
            document.description,
            document.workspace.value,
            document.status.value,
            document.tags or [],
            Json(document.facets or {}),
            Json(document.metadata or {}),
            document.created_by,
            document.file_name,
            document.file_size,
            document.mime_type,
            document.file_hash,
            document.storage_key,
            document.created_at,
            document.updated_at,
            document.stored_at,
            document.archived_at,
        )
        self._execute(
            query=query,
            params=params,
            context_msg="PostgresDocumentRepository: Failed to save document",
            extra={"document_id": str(document.id)},
        )
        logger.info(
            "PostgresDocumentRepository: Document saved",
            extra={"document_id": str(document.id)},
        )

    def get_document(self, document_id: UUID) -> Document | None:
        row = self._fetchone(
            query=f"SELECT {self._DOC_SELECT_COLUMNS} FROM documents WHERE id = %s",
            params=(document_id,),
            context_msg="PostgresDocumentRepository: Failed to get document",
            extra={"document_id": str(document_id)},
        )
        return self._row_to_document(row) if row else None

    # ============================================================
    # Listado / agregados por predicado
    # ============================================================
    def query_documents(
        self,
        predicate: Predicate,
        *,
        sort: DocumentSort | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Document], int]:
        """
        Lista documentos que cumplen el predicado.

        Devuelve (página, total). El total se calcula con COUNT(*) OVER()
        en la misma query; si la página queda vacía se hace un COUNT aparte.
        """
        if limit <= 0:
            return [], 0
        limit = min(limit, _MAX_PAGE_SIZE)
        offset = max(0, offset)

        sort = sort or DocumentSort()
        column = _SORT_COLUMNS[sort.field]
        direction = "ASC" if sort.order == "asc" else "DESC"
        where_sql, where_params = compile_predicate(predicate)

        rows = self._fetchall(
            query=f"""
                SELECT {self._DOC_SELECT_COLUMNS}, COUNT(*) OVER() AS total_count
                FROM documents
                WHERE {where_sql}
                ORDER BY {column} {direction} NULLS LAST, id {direction}
                LIMIT %s OFFSET %s
            """,
            params=(*where_params, limit, offset),
            context_msg="PostgresDocumentRepository: Failed to query documents",
            extra={"limit": limit, "offset": offset, "sort": sort.field},
        )
        if rows:
            return [self._row_to_document(r[:-1]) for r in rows], int(rows[0][-1])

        count_row = self._fetchone(
            query=f"SELECT COUNT(*) FROM documents WHERE {where_sql}",
            params=where_params,
            context_msg="PostgresDocumentRepository: Failed to count documents",
            extra={"offset": offset},
        )
        return [], int(count_row[0]) if count_row else 0

    def document_stats(self, predicate: Predicate) -> DocumentStats:
        """Totales por status/workspace y tamaño total sobre el predicado."""
        where_sql, where_params = compile_predicate(predicate)
        rows = self._fetchall(
            query=f"""
                SELECT workspace, status, COUNT(*), COALESCE(SUM(file_size), 0)
                FROM documents
                WHERE {where_sql}
                GROUP BY workspace, status
            """,
            params=where_params,
            context_msg="PostgresDocumentRepository: Failed to compute stats",
            extra={},
        )
        total = 0
        total_size = 0
        by_status: dict[str, int] = {}
        by_workspace: dict[str, int] = {}
        for workspace, status, count, size in rows:
            total += count
            total_size += int(size)
            by_status[status] = by_status.get(status, 0) + count
            by_workspace[workspace] = by_workspace.get(workspace, 0) + count
        return DocumentStats(
            total=total,
            total_size=total_size,
            by_status=by_status,
            by_workspace=by_workspace,
        )

    # ============================================================
    # Updates
    # ============================================================
    def update_document_metadata(
        self,
        document_id: UUID,
        *,
        title: str | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
        facets: dict[str, str] | None = None,
        updated_at: datetime,
    ) -> bool:
        """Update dinámico de campos editables (None = sin cambio)."""
        updates: list[str] = []
        params: list[object] = []
        if title is not None:
            updates.append("title = %s")
            params.append(title)
        if description is not None:
            updates.append("description = %s")
            params.append(description)
        if tags is not None:
            updates.append("tags = %s")
            params.append(tags)
        if facets is not None:
            updates.append("facets = %s")
            params.append(Json(facets))

        updates.append("updated_at = %s")
        params.append(updated_at)
        params.append(document_id)

        # updates es controlado por código (no input usuario).
        rowcount = self._execute(
            query=f"UPDATE documents SET {', '.join(updates)} WHERE id = %s",
            params=params,
            context_msg="PostgresDocumentRepository: Update metadata failed",
            extra={"document_id": str(document_id), "fields": len(updates) - 1},
        )
        return rowcount > 0

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
        """
        Transición de estado condicional (optimistic):

        - Solo actualiza si el status actual es expected_status.

        Retorna True si se actualizó; False si no (cambio concurrente o no existe).
        """
        rowcount = self._execute(
            query="""
                UPDATE documents
                SET status = %s,
                    stored_at = %s,
                    archived_at = %s,
                    updated_at = %s
                WHERE id = %s AND status = %s
            """,
            params=(
                new_status.value,
                stored_at,
                archived_at,
                updated_at,
                document_id,
                expected_status.value,
            ),
            context_msg="PostgresDocumentRepository: Status transition failed",
            extra={
                "document_id": str(document_id),
                "from_status": expected_status.value,
                "to_status": new_status.value,
            },
        )
        return rowcount > 0

    # ============================================================
    # Deletes
    # ============================================================
    def delete_document(self, document_id: UUID) -> bool:
        rowcount = self._execute(
            query="DELETE FROM documents WHERE id = %s",
            params=(document_id,),
            context_msg="PostgresDocumentRepository: Delete failed",
            extra={"document_id": str(document_id)},
        )
        deleted = rowcount > 0
        if deleted:
            logger.info(
                "PostgresDocumentRepository: Document deleted",
                extra={"document_id": str(document_id)},
            )
        return deleted

    # ============================================================
    # Health
    # ============================================================
    def ping(self) -> bool:
        """Chequeo trivial de conectividad."""
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                conn.execute("SELECT 1")
            return True
        except Exception as exc:
            logger.exception(
                "PostgresDocumentRepository: ping failed", extra={"error": str(exc)}
            )
            raise DatabaseError(f"Ping failed: {exc}") from exc

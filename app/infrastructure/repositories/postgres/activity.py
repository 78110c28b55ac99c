"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/activity.py
============================================================
Class: PostgresActivityRepository

Responsibilities:
  - Persistir actividad de documentos en PostgreSQL (tabla document_activities).
  - Listar actividad con filtros opcionales (documento, usuario, acción,
    workspace, rango de fechas).
  - Mantener respuestas determinísticas (orden estable) para APIs/tests.

Collaborators:
  - domain.entities.DocumentActivity / ActivityAction
  - domain.value_objects.ActivityQuery
  - psycopg.types.json.Json (JSON seguro hacia PostgreSQL)
  - crosscutting.logger / crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Log append-only: no se edita ni se borra.
  - document_id pasa a NULL cuando se borra el documento (FK ON DELETE SET NULL).
  - Queries SIEMPRE parametrizadas.
============================================================
"""

from __future__ import annotations

from typing import Iterable

from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import ActivityAction, DocumentActivity
from ....domain.value_objects import ActivityQuery
from ....domain.workspaces import WorkspaceType

_MAX_LIST_LIMIT = 500


class PostgresActivityRepository:
    """Repositorio PostgreSQL para actividad (document_activities)."""

    def __init__(self, pool: ConnectionPool | None = None):
        # Pool inyectable: tests pueden pasar su pool; prod usa el pool global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from app.infrastructure.db.pool import get_pool

        return get_pool()

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object],
        error_message: str,
        extra: dict[str, object],
    ) -> list[tuple]:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(error_message, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{error_message}: {exc}") from exc

    @staticmethod
    def _row_to_activity(row: tuple) -> DocumentActivity:
        return DocumentActivity(
            id=row[0],
            document_id=row[1],
            user_id=row[2],
            action=ActivityAction(row[3]),
            workspace=WorkspaceType(row[4]) if row[4] else None,
            details=dict(row[5] or {}),
            ip_address=row[6],
            user_agent=row[7],
            created_at=row[8],
        )

    # ------------------------------------------------------------
    # Escritura (append-only)
    # ------------------------------------------------------------
    def append(self, activity: DocumentActivity) -> None:
        """
        Inserta un registro de actividad.

        Si falla, se propaga DatabaseError; app.activity.record_activity
        decide tragarlo (best-effort).
        """
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO document_activities (
                        id, document_id, user_id, action, workspace, details,
                        ip_address, user_agent, created_at
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        activity.id,
                        activity.document_id,
                        activity.user_id,
                        activity.action.value,
                        activity.workspace.value if activity.workspace else None,
                        Json(activity.details or {}),
                        activity.ip_address,
                        activity.user_agent,
                        activity.created_at,
                    ),
                )
        except Exception as exc:
            logger.exception(
                "PostgresActivityRepository: Failed to append activity",
                extra={
                    "activity_id": str(activity.id),
                    "action": activity.action.value,
                    "error": str(exc),
                },
            )
            raise DatabaseError(f"Failed to append activity: {exc}") from exc

    # ------------------------------------------------------------
    # Lectura (listado con filtros)
    # ------------------------------------------------------------
    def list_activities(
        self,
        query: ActivityQuery,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DocumentActivity]:
        """
        Lista actividad con filtros AND.

        Orden: created_at DESC, id DESC (estable con timestamps iguales).
        """
        if limit <= 0:
            return []
        limit = min(limit, _MAX_LIST_LIMIT)
        offset = max(0, offset)

        conditions: list[str] = []
        params: list[object] = []

        if query.document_id is not None:
            conditions.append("document_id = %s")
            params.append(query.document_id)
        if query.user_id is not None:
            conditions.append("user_id = %s")
            params.append(query.user_id)
        if query.action is not None:
            conditions.append("action = %s")
            params.append(query.action.value)
        if query.workspace is not None:
            conditions.append("workspace = %s")
            params.append(query.workspace.value)
        if query.date_from is not None:
            conditions.append("created_at >= %s")
            params.append(query.date_from)
        if query.date_to is not None:
            conditions.append("created_at <= %s")
            params.append(query.date_to)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self._fetchall(
            query=f"""
                SELECT id, document_id, user_id, action, workspace, details,
                       ip_address, user_agent, created_at
                FROM document_activities
                {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, offset],
            error_message="PostgresActivityRepository: Failed to list activities",
            extra={"filters": len(conditions), "limit": limit, "offset": offset},
        )
        return [self._row_to_activity(r) for r in rows]

"""
In-memory activity log (append-only).

Thread-safe; used by unit tests and by local runs without PostgreSQL.
"""

from __future__ import annotations

from threading import Lock
from typing import List

from ....domain.entities import DocumentActivity
from ....domain.repositories import ActivityRepository
from ....domain.value_objects import ActivityQuery


class InMemoryActivityRepository(ActivityRepository):
    def __init__(self) -> None:
        self._lock = Lock()
        self._activities: List[DocumentActivity] = []

    def append(self, activity: DocumentActivity) -> None:
        with self._lock:
            self._activities.append(activity)

    def list_activities(
        self,
        query: ActivityQuery,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[DocumentActivity]:
        if limit <= 0:
            return []
        with self._lock:
            values = list(self._activities)

        def predicate(a: DocumentActivity) -> bool:
            if query.document_id is not None and a.document_id != query.document_id:
                return False
            if query.user_id is not None and a.user_id != query.user_id:
                return False
            if query.action is not None and a.action != query.action:
                return False
            if query.workspace is not None and a.workspace != query.workspace:
                return False
            if query.date_from is not None and a.created_at < query.date_from:
                return False
            if query.date_to is not None and a.created_at > query.date_to:
                return False
            return True

        selected = sorted(
            (a for a in values if predicate(a)),
            key=lambda a: (a.created_at, str(a.id)),
            reverse=True,
        )
        offset = max(0, offset)
        return selected[offset : offset + limit]

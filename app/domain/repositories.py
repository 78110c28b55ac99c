"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the domain layer (ports).
- Keep the application/domain independent from infrastructure (PostgreSQL, in-memory, etc.).
- Enable dependency inversion and straightforward unit testing (in-memory repositories).

Collaborators
- domain.entities: Document, DocumentActivity, DocumentStatus
- domain.visibility: Predicate (abstract filter tree)
- identity.users: User
- infrastructure.repositories: postgres/*, in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.
- Status writes are conditional: they only apply if the row still holds
  the expected status.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Outputs are concrete lists for predictable iteration/serialization.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Tuple
from uuid import UUID

from .entities import Document, DocumentActivity, DocumentStatus
from .value_objects import ActivityQuery, DocumentSort, DocumentStats, UserStats
from .workspaces import WorkspaceType

if TYPE_CHECKING:
    from ..identity.users import User, UserRole
    from .visibility import Predicate


class DocumentRepository(Protocol):
    """
    R: Interface for document metadata persistence.

    Implementations must provide:
      - Document metadata storage
      - Predicate-based listing (visibility filter compiled per backend)
      - Conditional (compare-and-set) status transitions
      - Hard delete
    """

    def save_document(self, document: Document) -> None:
        """R: Persist a new document row."""
        ...

    def get_document(self, document_id: UUID) -> Optional[Document]:
        """R: Fetch a document by ID (None if missing)."""
        ...

    def query_documents(
        self,
        predicate: "Predicate",
        *,
        sort: DocumentSort | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Document], int]:
        """
        R: List documents matching the predicate.

        Returns:
            (page of documents, total matching rows)
        """
        ...

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
        """R: Update editable fields (None = unchanged). False if missing."""
        ...

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
        R: Atomically move a document to new_status.

        Only applies if the current status equals expected_status.
        Returns False when no row was updated (missing or concurrent change).
        """
        ...

    def delete_document(self, document_id: UUID) -> bool:
        """R: Hard-delete the row. False if missing."""
        ...

    def document_stats(self, predicate: "Predicate") -> DocumentStats:
        """R: Aggregates (count, size, by status/workspace) over the predicate."""
        ...

    def ping(self) -> bool:
        """R: Readiness check."""
        ...


class UserRepository(Protocol):
    """R: Interface for user persistence."""

    def get_user_by_id(self, user_id: UUID) -> Optional["User"]: ...

    def get_user_by_email(self, email: str) -> Optional["User"]: ...

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: "UserRole",
        workspace: WorkspaceType,
        is_active: bool = True,
    ) -> "User": ...

    def update_user(
        self,
        user_id: UUID,
        *,
        full_name: str | None = None,
        role: "UserRole | None" = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        password_hash: str | None = None,
    ) -> Optional["User"]: ...

    def list_users(
        self,
        *,
        role: "UserRole | None" = None,
        workspace: WorkspaceType | None = None,
        is_active: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List["User"]: ...

    def delete_user(self, user_id: UUID) -> bool: ...

    def record_login(self, user_id: UUID) -> None: ...

    def user_stats(self) -> UserStats: ...


class ActivityRepository(Protocol):
    """R: Append-only activity log."""

    def append(self, activity: DocumentActivity) -> None: ...

    def list_activities(
        self,
        query: ActivityQuery,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[DocumentActivity]: ...

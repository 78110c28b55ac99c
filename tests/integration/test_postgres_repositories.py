"""
Name: PostgreSQL Repository Integration Tests

Responsibilities:
  - Validate document persistence, conditional status transitions and deletes
  - Validate listings/stats compiled from visibility predicates
  - Validate user and activity repositories against a real schema

Notes:
  - Requires RUN_INTEGRATION=1 and a reachable PostgreSQL (DATABASE_URL)
  - Each test creates its own user so data from other runs does not interfere
"""

import os
from datetime import datetime, timezone
from uuid import uuid4

import pytest

if os.getenv("RUN_INTEGRATION") != "1":
    pytest.skip("Set RUN_INTEGRATION=1 to run integration tests", allow_module_level=True)

from app.application.usecases.documents.document_rules import (  # noqa: E402
    FILE_NAME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from app.crosscutting.exceptions import DatabaseError  # noqa: E402
from app.domain.entities import (  # noqa: E402
    ActivityAction,
    DocumentActivity,
    DocumentStatus,
)
from app.domain.value_objects import ActivityQuery, DocumentSort  # noqa: E402
from app.domain.visibility import (  # noqa: E402
    DocumentFilters,
    FieldEquals,
    build_visibility_predicate,
)
from app.domain.workspace_policy import Principal  # noqa: E402
from app.domain.workspaces import WorkspaceType  # noqa: E402
from app.identity.users import UserRole  # noqa: E402
from app.infrastructure.repositories.postgres import (  # noqa: E402
    PostgresActivityRepository,
    PostgresDocumentRepository,
    PostgresUserRepository,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def users():
    return PostgresUserRepository()


@pytest.fixture
def documents():
    return PostgresDocumentRepository()


@pytest.fixture
def activities():
    return PostgresActivityRepository()


@pytest.fixture
def creator(users):
    return users.create_user(
        email=f"it-{uuid4().hex[:10]}@example.com",
        full_name="Integración",
        password_hash="hashed",
        role=UserRole.SECRETARIO_CAM,
        workspace=WorkspaceType.CAM,
    )


class TestDocuments:
    def test_save_and_get_roundtrip(self, documents, creator, document_factory):
        document = document_factory.create(
            created_by=creator.id,
            tags=["sesion", "2024"],
            facets={"periodo": "2024"},
        )

        documents.save_document(document)
        loaded = documents.get_document(document.id)

        assert loaded is not None
        assert loaded.title == document.title
        assert loaded.status == DocumentStatus.DRAFT
        assert loaded.workspace == WorkspaceType.CAM
        assert loaded.tags == ["sesion", "2024"]
        assert loaded.facets == {"periodo": "2024"}
        assert loaded.created_by == creator.id

    def test_column_limits_match_input_rules(self, documents, creator, document_factory):
        document = document_factory.create(
            created_by=creator.id,
            title="T" * TITLE_MAX_LENGTH,
            file_name="f" * (FILE_NAME_MAX_LENGTH - 4) + ".pdf",
        )

        documents.save_document(document)
        loaded = documents.get_document(document.id)

        assert len(loaded.title) == TITLE_MAX_LENGTH
        assert len(loaded.file_name) == FILE_NAME_MAX_LENGTH

    def test_transition_is_compare_and_set(self, documents, creator, document_factory):
        document = document_factory.create(created_by=creator.id)
        documents.save_document(document)
        now = datetime.now(timezone.utc)

        first = documents.transition_document_status(
            document.id,
            expected_status=DocumentStatus.DRAFT,
            new_status=DocumentStatus.STORED,
            stored_at=now,
            archived_at=None,
            updated_at=now,
        )
        second = documents.transition_document_status(
            document.id,
            expected_status=DocumentStatus.DRAFT,
            new_status=DocumentStatus.STORED,
            stored_at=now,
            archived_at=None,
            updated_at=now,
        )

        assert first is True
        assert second is False
        loaded = documents.get_document(document.id)
        assert loaded.status == DocumentStatus.STORED
        assert loaded.stored_at is not None

    def test_update_metadata_only_touches_given_fields(
        self, documents, creator, document_factory
    ):
        document = document_factory.create(created_by=creator.id, description="orig")
        documents.save_document(document)

        updated = documents.update_document_metadata(
            document.id, title="Nuevo título", updated_at=datetime.now(timezone.utc)
        )

        loaded = documents.get_document(document.id)
        assert updated is True
        assert loaded.title == "Nuevo título"
        assert loaded.description == "orig"

    def test_visibility_predicate_hides_foreign_drafts(
        self, documents, users, creator, document_factory
    ):
        other = users.create_user(
            email=f"it-{uuid4().hex[:10]}@example.com",
            full_name="Otro",
            password_hash="hashed",
            role=UserRole.SECRETARIO_CAM,
            workspace=WorkspaceType.CAM,
        )
        own_draft = document_factory.create(created_by=creator.id)
        foreign_draft = document_factory.create(created_by=other.id)
        foreign_stored = document_factory.create(
            created_by=other.id, status=DocumentStatus.STORED
        )
        for document in (own_draft, foreign_draft, foreign_stored):
            documents.save_document(document)

        principal = Principal(
            id=creator.id, role=UserRole.SECRETARIO_CAM, workspace=WorkspaceType.CAM
        )
        predicate = build_visibility_predicate(principal, DocumentFilters())
        page, _ = documents.query_documents(
            predicate, sort=DocumentSort(), limit=500, offset=0
        )
        ids = {document.id for document in page}

        assert own_draft.id in ids
        assert foreign_stored.id in ids
        assert foreign_draft.id not in ids

    def test_stats_and_pagination_share_predicate(
        self, documents, creator, document_factory
    ):
        for size in (1024, 2048, 4096):
            documents.save_document(
                document_factory.create(created_by=creator.id, file_size=size)
            )
        predicate = FieldEquals("created_by", creator.id)

        page, total = documents.query_documents(predicate, limit=2, offset=0)
        stats = documents.document_stats(predicate)

        assert len(page) == 2
        assert total == 3
        assert stats.total == 3
        assert stats.total_size == 1024 + 2048 + 4096
        assert stats.by_status == {"draft": 3}

    def test_delete_reports_existence(self, documents, creator, document_factory):
        document = document_factory.create(created_by=creator.id)
        documents.save_document(document)

        assert documents.delete_document(document.id) is True
        assert documents.delete_document(document.id) is False
        assert documents.get_document(document.id) is None

    def test_ping(self, documents):
        assert documents.ping() is True


class TestUsers:
    def test_email_is_unique_case_insensitive(self, users, creator):
        with pytest.raises(DatabaseError):
            users.create_user(
                email=creator.email.upper(),
                full_name="Duplicado",
                password_hash="hashed",
                role=UserRole.SECRETARIO_CAM,
                workspace=WorkspaceType.CAM,
            )

    def test_delete_keeps_activity_without_user(self, users, activities):
        user = users.create_user(
            email=f"it-{uuid4().hex[:10]}@example.com",
            full_name="Temporal",
            password_hash="hashed",
            role=UserRole.SECRETARIO_CAM,
            workspace=WorkspaceType.CAM,
        )
        activity_id = uuid4()
        activities.append(
            DocumentActivity(
                id=activity_id,
                user_id=user.id,
                action=ActivityAction.VIEWED,
                workspace=WorkspaceType.CAM,
            )
        )

        assert users.delete_user(user.id) is True
        assert users.delete_user(user.id) is False
        rows = activities.list_activities(ActivityQuery(action=ActivityAction.VIEWED))
        survivor = next(row for row in rows if row.id == activity_id)
        assert survivor.user_id is None

    def test_update_and_record_login(self, users, creator):
        updated = users.update_user(creator.id, role=UserRole.PRESIDENTE)
        users.record_login(creator.id)

        loaded = users.get_user_by_email(creator.email)
        assert updated.role == UserRole.PRESIDENTE
        assert loaded.last_login_at is not None


class TestActivity:
    def test_append_and_filter_by_document(
        self, activities, documents, creator, document_factory
    ):
        document = document_factory.create(created_by=creator.id)
        documents.save_document(document)
        for action in (ActivityAction.CREATED, ActivityAction.VIEWED):
            activities.append(
                DocumentActivity(
                    id=uuid4(),
                    user_id=creator.id,
                    action=action,
                    document_id=document.id,
                    workspace=WorkspaceType.CAM,
                    details={"title": document.title},
                    ip_address="127.0.0.1",
                )
            )

        rows = activities.list_activities(ActivityQuery(document_id=document.id))

        assert [row.action for row in rows] == [
            ActivityAction.VIEWED,
            ActivityAction.CREATED,
        ]
        assert rows[0].details == {"title": document.title}

    def test_activity_survives_document_delete(
        self, activities, documents, creator, document_factory
    ):
        document = document_factory.create(created_by=creator.id)
        documents.save_document(document)
        activities.append(
            DocumentActivity(
                id=uuid4(),
                user_id=creator.id,
                action=ActivityAction.DELETED,
                document_id=document.id,
                workspace=WorkspaceType.CAM,
            )
        )

        documents.delete_document(document.id)
        rows = activities.list_activities(
            ActivityQuery(user_id=creator.id, action=ActivityAction.DELETED)
        )

        assert len(rows) == 1
        assert rows[0].document_id is None

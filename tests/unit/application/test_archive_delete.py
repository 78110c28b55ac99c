"""
Name: Archive / Delete Use Case Tests

Responsibilities:
  - Validate single and bulk archive (per-item error accumulation)
  - Validate physical delete (file + row) and storage error tolerance
  - Validate bulk delete restricted to administrators
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from app.application.usecases.documents.archive_document import (
    MAX_BULK_ITEMS,
    ArchiveDocumentUseCase,
    BulkArchiveDocumentsUseCase,
    dedupe_ids,
)
from app.application.usecases.documents.delete_document import (
    BulkDeleteDocumentsUseCase,
    DeleteDocumentUseCase,
)
from app.application.usecases.documents.document_lifecycle import (
    DocumentLifecycleEngine,
)
from app.application.usecases.documents.document_results import DocumentErrorCode
from app.domain.entities import ActivityAction, DocumentStatus
from app.domain.value_objects import ActivityQuery
from app.domain.workspaces import WorkspaceType
from app.infrastructure.storage import StorageUnavailableError

pytestmark = pytest.mark.unit


@pytest.fixture
def archive_use_case(document_repo, activity_recorder):
    engine = DocumentLifecycleEngine(document_repo, activity_recorder=activity_recorder)
    return ArchiveDocumentUseCase(document_repo, engine)


@pytest.fixture
def delete_use_case(document_repo, storage, activity_recorder):
    return DeleteDocumentUseCase(
        document_repo, storage, activity_recorder=activity_recorder
    )


def _save_with_file(repo, storage, document):
    repo.save_document(document)
    storage.upload_file(document.storage_key, b"%PDF-1.4", "application/pdf")
    return document


class TestArchive:
    def test_archive_stored_document(
        self, archive_use_case, document_repo, activity_repo, document_factory, secretario_cam
    ):
        document = document_factory.create(status=DocumentStatus.STORED)
        document_repo.save_document(document)

        result = archive_use_case.execute(principal=secretario_cam, document_id=document.id)

        assert result.error is None
        assert result.document.status == DocumentStatus.ARCHIVED
        activities = activity_repo.list_activities(ActivityQuery(document_id=document.id))
        assert [a.action for a in activities] == [ActivityAction.ARCHIVED]

    def test_archive_draft_is_conflict(
        self, archive_use_case, document_repo, document_factory, admin
    ):
        document = document_factory.create(status=DocumentStatus.DRAFT)
        document_repo.save_document(document)

        result = archive_use_case.execute(principal=admin, document_id=document.id)

        assert result.error.code == DocumentErrorCode.CONFLICT

    def test_archive_forbidden_for_intendente(
        self, archive_use_case, document_repo, document_factory, intendente
    ):
        document = document_factory.create(status=DocumentStatus.STORED)
        document_repo.save_document(document)

        result = archive_use_case.execute(principal=intendente, document_id=document.id)

        assert result.error.code == DocumentErrorCode.FORBIDDEN

    def test_bulk_archive_accumulates_item_errors(
        self, archive_use_case, document_repo, document_factory, admin
    ):
        stored_a = document_factory.create(status=DocumentStatus.STORED)
        stored_b = document_factory.create(status=DocumentStatus.STORED)
        draft = document_factory.create(status=DocumentStatus.DRAFT)
        for document in (stored_a, stored_b, draft):
            document_repo.save_document(document)

        result = BulkArchiveDocumentsUseCase(archive_use_case).execute(
            principal=admin,
            document_ids=[stored_a.id, stored_b.id, draft.id, stored_a.id],
        )

        assert result.error is None
        assert result.archived == 2
        assert result.failed == 1
        assert result.errors[0].document_id == draft.id
        assert "Must be 'stored' to archive" in result.errors[0].error

    def test_bulk_archive_forbidden_for_executives(self, archive_use_case, presidente):
        result = BulkArchiveDocumentsUseCase(archive_use_case).execute(
            principal=presidente, document_ids=[uuid4()]
        )

        assert result.error.code == DocumentErrorCode.FORBIDDEN

    def test_bulk_archive_limits(self, archive_use_case, admin):
        bulk = BulkArchiveDocumentsUseCase(archive_use_case)

        empty = bulk.execute(principal=admin, document_ids=[])
        too_many = bulk.execute(
            principal=admin, document_ids=[uuid4() for _ in range(MAX_BULK_ITEMS + 1)]
        )

        assert empty.error.code == DocumentErrorCode.VALIDATION_ERROR
        assert too_many.error.code == DocumentErrorCode.VALIDATION_ERROR

    def test_dedupe_preserves_order(self):
        a, b = uuid4(), uuid4()

        assert dedupe_ids([b, a, b, a]) == [b, a]


class TestDelete:
    def test_admin_deletes_file_and_row(
        self, delete_use_case, document_repo, storage, activity_repo, document_factory, admin
    ):
        document = _save_with_file(document_repo, storage, document_factory.create())

        result = delete_use_case.execute(principal=admin, document_id=document.id)

        assert result.deleted is True
        assert document_repo.get_document(document.id) is None
        assert storage.exists(document.storage_key) is False
        activity = activity_repo.list_activities(ActivityQuery())[0]
        assert activity.action == ActivityAction.DELETED
        assert activity.document_id is None
        assert activity.details["documentId"] == str(document.id)

    def test_missing_file_is_tolerated(
        self, delete_use_case, document_repo, document_factory, admin
    ):
        document = document_factory.create(status=DocumentStatus.ARCHIVED)
        document_repo.save_document(document)

        result = delete_use_case.execute(principal=admin, document_id=document.id)

        assert result.deleted is True
        assert document_repo.get_document(document.id) is None

    def test_storage_failure_keeps_row(self, document_repo, document_factory, admin):
        storage = MagicMock()
        storage.delete_file.side_effect = StorageUnavailableError()
        document = document_factory.create()
        document_repo.save_document(document)

        result = DeleteDocumentUseCase(document_repo, storage).execute(
            principal=admin, document_id=document.id
        )

        assert result.error.code == DocumentErrorCode.SERVICE_UNAVAILABLE
        assert document_repo.get_document(document.id) is not None

    def test_secretary_deletes_foreign_draft_in_own_workspace(
        self, delete_use_case, document_repo, storage, document_factory, secretario_cam
    ):
        # Borrador ajeno invisible bajo policy B, pero borrable por la secretaría.
        document = _save_with_file(
            document_repo, storage, document_factory.create(workspace=WorkspaceType.CAM)
        )

        result = delete_use_case.execute(principal=secretario_cam, document_id=document.id)

        assert result.error is None
        assert result.deleted is True
        assert document_repo.get_document(document.id) is None
        assert storage.exists(document.storage_key) is False

    def test_invisible_and_not_deletable_is_not_found(
        self, delete_use_case, document_repo, document_factory, secretario_ampp
    ):
        document = document_factory.create(workspace=WorkspaceType.CAM)
        document_repo.save_document(document)

        result = delete_use_case.execute(principal=secretario_ampp, document_id=document.id)

        assert result.error.code == DocumentErrorCode.NOT_FOUND
        assert document_repo.get_document(document.id) is not None

    def test_visible_but_not_deletable_is_forbidden(
        self, delete_use_case, document_repo, document_factory, intendente
    ):
        document = document_factory.create(status=DocumentStatus.STORED)
        document_repo.save_document(document)

        result = delete_use_case.execute(principal=intendente, document_id=document.id)

        assert result.error.code == DocumentErrorCode.FORBIDDEN
        assert document_repo.get_document(document.id) is not None

    def test_bulk_delete_requires_admin(self, delete_use_case, secretario_cam):
        result = BulkDeleteDocumentsUseCase(delete_use_case).execute(
            principal=secretario_cam, document_ids=[uuid4()]
        )

        assert result.error.code == DocumentErrorCode.FORBIDDEN

    def test_bulk_delete_counts(
        self, delete_use_case, document_repo, storage, document_factory, admin
    ):
        document = _save_with_file(document_repo, storage, document_factory.create())
        missing = uuid4()

        result = BulkDeleteDocumentsUseCase(delete_use_case).execute(
            principal=admin, document_ids=[document.id, missing]
        )

        assert result.deleted == 1
        assert result.failed == 1
        assert result.errors[0].document_id == missing
        assert result.errors[0].error == "Document not found"

"""
Name: Document Query Use Case Tests

Responsibilities:
  - Validate listing visibility, filters and cursor pagination
  - Validate get/update/download visibility and permission rules
  - Validate stats scoped by visibility
"""

from datetime import datetime, timedelta, timezone

import pytest
from app.application.usecases.documents.document_results import DocumentErrorCode
from app.application.usecases.documents.document_stats import GetDocumentStatsUseCase
from app.application.usecases.documents.download_document import (
    MAX_TTL_SECONDS,
    DownloadDocumentUseCase,
    FetchDocumentContentUseCase,
)
from app.application.usecases.documents.get_document import GetDocumentUseCase
from app.application.usecases.documents.list_documents import (
    MAX_LIMIT,
    ListDocumentsUseCase,
    VisibilityPolicy,
)
from app.application.usecases.documents.update_document_metadata import (
    UpdateDocumentMetadataUseCase,
)
from app.crosscutting.pagination import decode_cursor, encode_cursor
from app.domain.entities import ActivityAction, DocumentStatus
from app.domain.value_objects import ActivityQuery, DocumentSort
from app.domain.visibility import DocumentFilters
from app.domain.workspaces import WorkspaceType

pytestmark = pytest.mark.unit


def _save(repo, *documents):
    for document in documents:
        repo.save_document(document)
    return documents


class TestListDocuments:
    def test_strict_policy_hides_foreign_drafts(
        self, document_repo, document_factory, secretario_cam
    ):
        mine, foreign_draft, foreign_stored = _save(
            document_repo,
            document_factory.create(created_by=secretario_cam.id),
            document_factory.create(),
            document_factory.create(status=DocumentStatus.STORED),
        )

        result = ListDocumentsUseCase(document_repo).execute(principal=secretario_cam)

        ids = {document.id for document in result.documents}
        assert ids == {mine.id, foreign_stored.id}
        assert result.total == 2

    def test_listing_policy_shows_workspace_drafts(
        self, document_repo, document_factory, secretario_cam
    ):
        _save(document_repo, document_factory.create(), document_factory.create())

        result = ListDocumentsUseCase(
            document_repo, policy=VisibilityPolicy.LISTING
        ).execute(principal=secretario_cam)

        assert result.total == 2

    def test_search_and_filters(self, document_repo, document_factory, admin):
        _save(
            document_repo,
            document_factory.create(title="Acta de asamblea", tags=["2024"]),
            document_factory.create(title="Acta anterior", tags=["2023"]),
            document_factory.create(title="Balance", tags=["2024"]),
        )

        result = ListDocumentsUseCase(document_repo).execute(
            principal=admin,
            filters=DocumentFilters(search="acta", tags=("2024",)),
        )

        assert [document.title for document in result.documents] == ["Acta de asamblea"]

    def test_sort_by_title(self, document_repo, document_factory, admin):
        _save(
            document_repo,
            document_factory.create(title="Beta"),
            document_factory.create(title="alfa"),
            document_factory.create(title="Gamma"),
        )

        result = ListDocumentsUseCase(document_repo).execute(
            principal=admin, sort=DocumentSort(field="title", order="asc")
        )

        assert [d.title for d in result.documents] == ["alfa", "Beta", "Gamma"]

    def test_cursor_pagination(self, document_repo, document_factory, admin):
        _save(document_repo, *[document_factory.create(title=f"Doc {i}") for i in range(5)])
        use_case = ListDocumentsUseCase(document_repo)

        first = use_case.execute(principal=admin, limit=2)
        second = use_case.execute(principal=admin, limit=2, cursor=first.next_cursor)
        last = use_case.execute(principal=admin, limit=2, cursor=second.next_cursor)

        assert first.has_more is True
        assert decode_cursor(first.next_cursor) == 2
        assert len(second.documents) == 2
        assert len(last.documents) == 1
        assert last.has_more is False
        assert last.next_cursor is None
        seen = {d.id for page in (first, second, last) for d in page.documents}
        assert len(seen) == 5

    def test_limit_is_clamped(self, document_repo, document_factory, admin):
        _save(document_repo, document_factory.create())

        result = ListDocumentsUseCase(document_repo).execute(
            principal=admin, limit=MAX_LIMIT * 10, offset=-3
        )

        assert result.total == 1
        assert len(result.documents) == 1

    def test_invalid_cursor_restarts(self, document_repo, document_factory, admin):
        _save(document_repo, document_factory.create())

        result = ListDocumentsUseCase(document_repo).execute(
            principal=admin, cursor="not-a-cursor"
        )

        assert len(result.documents) == 1
        assert decode_cursor(encode_cursor(7)) == 7


class TestGetDocument:
    def test_visible_document_records_view(
        self, document_repo, activity_repo, activity_recorder, document_factory, intendente
    ):
        (document,) = _save(
            document_repo, document_factory.create(status=DocumentStatus.STORED)
        )

        result = GetDocumentUseCase(
            document_repo, activity_recorder=activity_recorder
        ).execute(principal=intendente, document_id=document.id)

        assert result.document.id == document.id
        actions = [a.action for a in activity_repo.list_activities(ActivityQuery())]
        assert actions == [ActivityAction.VIEWED]

    def test_record_view_can_be_skipped(
        self, document_repo, activity_repo, activity_recorder, document_factory, admin
    ):
        (document,) = _save(document_repo, document_factory.create())

        GetDocumentUseCase(document_repo, activity_recorder=activity_recorder).execute(
            principal=admin, document_id=document.id, record_view=False
        )

        assert activity_repo.list_activities(ActivityQuery()) == []

    def test_foreign_draft_is_not_found(self, document_repo, document_factory, intendente):
        (document,) = _save(document_repo, document_factory.create())

        result = GetDocumentUseCase(document_repo).execute(
            principal=intendente, document_id=document.id
        )

        assert result.error.code == DocumentErrorCode.NOT_FOUND


class TestUpdateMetadata:
    def test_creator_updates_fields(self, document_repo, document_factory, cf_member):
        (document,) = _save(
            document_repo,
            document_factory.create(
                created_by=cf_member.id, workspace=WorkspaceType.COMISIONES_CF
            ),
        )

        result = UpdateDocumentMetadataUseCase(document_repo).execute(
            principal=cf_member,
            document_id=document.id,
            title="  Informe de auditoría ",
            tags=["auditoria"],
            facets={"severidad": "alto"},
        )

        assert result.error is None
        persisted = document_repo.get_document(document.id)
        assert persisted.title == "Informe de auditoría"
        assert persisted.tags == ["auditoria"]
        assert persisted.facets == {"severidad": "alto"}

    def test_reader_without_update_capability_is_forbidden(
        self, document_repo, document_factory, cf_member
    ):
        (document,) = _save(
            document_repo,
            document_factory.create(
                workspace=WorkspaceType.COMISIONES_CF, status=DocumentStatus.STORED
            ),
        )

        result = UpdateDocumentMetadataUseCase(document_repo).execute(
            principal=cf_member, document_id=document.id, title="Nuevo título"
        )

        assert result.error.code == DocumentErrorCode.FORBIDDEN

    def test_archived_document_is_conflict(self, document_repo, document_factory, admin):
        (document,) = _save(
            document_repo, document_factory.create(status=DocumentStatus.ARCHIVED)
        )

        result = UpdateDocumentMetadataUseCase(document_repo).execute(
            principal=admin, document_id=document.id, title="Nuevo título"
        )

        assert result.error.code == DocumentErrorCode.CONFLICT

    def test_invalid_facet_is_validation_error(
        self, document_repo, document_factory, admin
    ):
        (document,) = _save(document_repo, document_factory.create())

        result = UpdateDocumentMetadataUseCase(document_repo).execute(
            principal=admin, document_id=document.id, facets={"color": "rojo"}
        )

        assert result.error.code == DocumentErrorCode.VALIDATION_ERROR


class TestDownload:
    def test_presigned_url_ttl_is_capped(
        self, document_repo, storage, activity_repo, activity_recorder, document_factory, admin
    ):
        (document,) = _save(document_repo, document_factory.create())
        storage.upload_file(document.storage_key, b"data", "application/pdf")

        result = DownloadDocumentUseCase(
            document_repo, storage, activity_recorder=activity_recorder
        ).execute(principal=admin, document_id=document.id, expires_in=10**7, inline=True)

        assert result.error is None
        assert result.expires_in == MAX_TTL_SECONDS
        assert "disposition=inline" in result.url
        actions = [a.action for a in activity_repo.list_activities(ActivityQuery())]
        assert actions == [ActivityAction.DOWNLOADED]

    def test_content_missing_file_is_not_found(
        self, document_repo, storage, document_factory, admin
    ):
        (document,) = _save(document_repo, document_factory.create())

        result = FetchDocumentContentUseCase(document_repo, storage).execute(
            principal=admin, document_id=document.id
        )

        assert result.error.code == DocumentErrorCode.NOT_FOUND

    def test_content_returns_bytes(self, document_repo, storage, document_factory, admin):
        (document,) = _save(document_repo, document_factory.create())
        storage.upload_file(document.storage_key, b"hola", "text/plain")

        result = FetchDocumentContentUseCase(document_repo, storage).execute(
            principal=admin, document_id=document.id
        )

        assert result.content == b"hola"
        assert result.file_name == "acta.pdf"

    def test_storage_not_configured(self, document_repo, document_factory, admin):
        (document,) = _save(document_repo, document_factory.create())

        result = DownloadDocumentUseCase(document_repo, None).execute(
            principal=admin, document_id=document.id
        )

        assert result.error.code == DocumentErrorCode.SERVICE_UNAVAILABLE


def test_stats_are_scoped_by_visibility(document_repo, document_factory, cf_member, admin):
    _save(
        document_repo,
        document_factory.create(
            workspace=WorkspaceType.COMISIONES_CF, status=DocumentStatus.STORED, file_size=100
        ),
        document_factory.create(workspace=WorkspaceType.CAM, status=DocumentStatus.STORED),
    )
    use_case = GetDocumentStatsUseCase(document_repo)

    scoped = use_case.execute(principal=cf_member).stats
    everything = use_case.execute(principal=admin).stats

    assert scoped.total == 1
    assert scoped.total_size == 100
    assert scoped.by_workspace == {"comisiones_cf": 1}
    assert everything.total == 2


def test_date_filters(document_repo, document_factory, admin):
    _save(document_repo, document_factory.create())
    now = datetime.now(timezone.utc)

    future = ListDocumentsUseCase(document_repo).execute(
        principal=admin, filters=DocumentFilters(date_from=now + timedelta(days=1))
    )

    assert future.total == 0

"""
Name: Document Endpoint Tests

Responsibilities:
  - Validate /v1/documents endpoints wire use cases to HTTP correctly
  - Validate DocumentError -> RFC7807 mapping (403/404/409/415/422/503)
  - Validate upload form-data parsing and response DTOs

Notes:
  - Use cases are wired to in-memory adapters via dependency_overrides
  - The authenticated Principal is injected by overriding require_principal
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from app.activity import RepositoryActivityRecorder
from app.api.exception_handlers import register_exception_handlers
from app.application.usecases import (
    ArchiveDocumentUseCase,
    BulkArchiveDocumentsUseCase,
    BulkDeleteDocumentsUseCase,
    ChangeDocumentStatusUseCase,
    DeleteDocumentUseCase,
    DocumentLifecycleEngine,
    DownloadDocumentUseCase,
    FetchDocumentContentUseCase,
    GetDocumentStatsUseCase,
    GetDocumentUseCase,
    ListDocumentsUseCase,
    UploadDocumentUseCase,
)
from app.container import (
    get_archive_document_use_case,
    get_bulk_archive_documents_use_case,
    get_bulk_delete_documents_use_case,
    get_change_document_status_use_case,
    get_delete_document_use_case,
    get_document_stats_use_case,
    get_download_document_use_case,
    get_fetch_document_content_use_case,
    get_get_document_use_case,
    get_list_documents_use_case,
    get_upload_document_use_case,
)
from app.domain.entities import DocumentStatus
from app.domain.value_objects import ActivityQuery
from app.domain.workspaces import WorkspaceType
from app.identity.auth_users import require_principal
from app.interfaces.api.http.router import build_router
from fastapi import FastAPI
from fastapi.testclient import TestClient

pytestmark = pytest.mark.unit

PDF_BYTES = b"%PDF-1.4 acta de prueba"


class _Env:
    """Adapters in-memory + Principal mutable para un app de test."""

    def __init__(self, document_repo, activity_repo, storage, principal):
        self.documents = document_repo
        self.activity = activity_repo
        self.storage = storage
        self.principal = principal


def _build_app(env: _Env) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(build_router(), prefix="/v1")

    recorder = RepositoryActivityRecorder(env.activity)
    engine = DocumentLifecycleEngine(env.documents, activity_recorder=recorder)
    archive = ArchiveDocumentUseCase(env.documents, engine)
    delete = DeleteDocumentUseCase(env.documents, env.storage, activity_recorder=recorder)

    overrides = {
        require_principal: lambda: env.principal,
        get_upload_document_use_case: lambda: UploadDocumentUseCase(
            env.documents, env.storage, activity_recorder=recorder
        ),
        get_list_documents_use_case: lambda: ListDocumentsUseCase(env.documents),
        get_get_document_use_case: lambda: GetDocumentUseCase(
            env.documents, activity_recorder=recorder
        ),
        get_document_stats_use_case: lambda: GetDocumentStatsUseCase(env.documents),
        get_change_document_status_use_case: lambda: ChangeDocumentStatusUseCase(
            env.documents, engine
        ),
        get_archive_document_use_case: lambda: archive,
        get_bulk_archive_documents_use_case: lambda: BulkArchiveDocumentsUseCase(archive),
        get_delete_document_use_case: lambda: delete,
        get_bulk_delete_documents_use_case: lambda: BulkDeleteDocumentsUseCase(delete),
        get_download_document_use_case: lambda: DownloadDocumentUseCase(
            env.documents, env.storage, activity_recorder=recorder
        ),
        get_fetch_document_content_use_case: lambda: FetchDocumentContentUseCase(
            env.documents, env.storage, activity_recorder=recorder
        ),
    }
    app.dependency_overrides.update(overrides)
    return app


@pytest.fixture
def env(document_repo, activity_repo, storage, secretario_cam):
    return _Env(document_repo, activity_repo, storage, secretario_cam)


@pytest.fixture
def client(env):
    return TestClient(_build_app(env))


def _save(env, document):
    env.documents.save_document(document)
    return document


class TestUpload:
    def test_upload_defaults_to_principal_workspace(self, client, env):
        response = client.post(
            "/v1/documents/upload",
            files={"file": ("acta.pdf", PDF_BYTES, "application/pdf")},
            data={"title": "Acta de sesión", "tags": "sesion, 2024"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["workspace"] == "cam"
        assert body["status"] == "draft"
        assert body["tags"] == ["sesion", "2024"]
        assert body["file_size"] == len(PDF_BYTES)
        assert "storage_key" not in body
        assert env.storage.exists(env.documents.get_document(body["id"]).storage_key)

    def test_unsupported_mime_is_415(self, client):
        response = client.post(
            "/v1/documents/upload",
            files={"file": ("script.py", b"print(1)", "text/x-python")},
        )

        assert response.status_code == 415
        assert response.json()["code"] == "UNSUPPORTED_MEDIA"

    def test_invalid_tags_json_is_422(self, client):
        response = client.post(
            "/v1/documents/upload",
            files={"file": ("acta.pdf", PDF_BYTES, "application/pdf")},
            data={"tags": "[1, 2]"},
        )

        assert response.status_code == 422

    def test_cf_member_cannot_upload_outside_comisiones(self, client, env, cf_member):
        env.principal = cf_member

        response = client.post(
            "/v1/documents/upload",
            files={"file": ("acta.pdf", PDF_BYTES, "application/pdf")},
            data={"workspace": "cam"},
        )

        assert response.status_code == 403
        assert response.headers["content-type"].startswith("application/problem+json")
        assert "comisiones_cf" in response.json()["detail"]

    def test_unknown_workspace_is_422(self, client):
        response = client.post(
            "/v1/documents/upload",
            files={"file": ("acta.pdf", PDF_BYTES, "application/pdf")},
            data={"workspace": "tesoreria"},
        )

        assert response.status_code == 422


class TestReadEndpoints:
    def test_missing_document_is_404(self, client):
        response = client.get(f"/v1/documents/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_list_paginates_with_cursor(self, client, env, document_factory):
        for i in range(3):
            _save(env, document_factory.create(created_by=env.principal.id, title=f"Doc {i}"))

        first = client.get("/v1/documents", params={"limit": 2}).json()
        second = client.get(
            "/v1/documents", params={"limit": 2, "cursor": first["next_cursor"]}
        ).json()

        assert first["total"] == 3
        assert first["has_more"] is True
        assert len(second["documents"]) == 1
        assert second["offset"] == 2

    def test_list_accepts_naive_date_bounds(self, client, env, document_factory):
        _save(env, document_factory.create(created_by=env.principal.id))

        response = client.get(
            "/v1/documents",
            params={"date_from": "2000-01-01T00:00:00", "date_to": "2100-01-01T00:00:00"},
        )

        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_mixed_naive_and_aware_bounds_are_compared_as_utc(self, client):
        response = client.get(
            "/v1/documents",
            params={"date_from": "2024-06-02T00:00:00", "date_to": "2024-06-01T00:00:00Z"},
        )

        assert response.status_code == 422

    def test_invalid_sort_field_is_422(self, client):
        response = client.get("/v1/documents", params={"sort_by": "password"})

        assert response.status_code == 422

    def test_stats(self, client, env, document_factory):
        _save(env, document_factory.create(status=DocumentStatus.STORED, file_size=2048))

        body = client.get("/v1/documents/stats").json()

        assert body["total"] == 1
        assert body["total_size_formatted"] == "2 KB"

    def test_content_sets_disposition(self, client, env, document_factory):
        document = _save(env, document_factory.create(created_by=env.principal.id))
        env.storage.upload_file(document.storage_key, b"hola", "application/pdf")

        response = client.get(f"/v1/documents/{document.id}/content")

        assert response.status_code == 200
        assert response.content == b"hola"
        assert response.headers["content-disposition"] == 'attachment; filename="acta.pdf"'

    def test_content_with_non_latin_filename_inline(self, client, env, document_factory):
        document = _save(
            env, document_factory.create(created_by=env.principal.id, file_name="报告.pdf")
        )
        env.storage.upload_file(document.storage_key, b"hola", "application/pdf")

        response = client.get(
            f"/v1/documents/{document.id}/content", params={"inline": "true"}
        )

        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            "inline; filename=\"document.pdf\"; filename*=UTF-8''%E6%8A%A5%E5%91%8A.pdf"
        )
        activity = env.activity.list_activities(ActivityQuery(document_id=document.id))
        downloaded = [a for a in activity if a.action.value == "downloaded"]
        assert downloaded[0].details["inline"] is True


class TestStatusEndpoints:
    def test_creator_stores_then_cannot_go_back(self, client, env, document_factory):
        document = _save(env, document_factory.create(created_by=env.principal.id))

        stored = client.put(
            f"/v1/documents/{document.id}/status", json={"status": "stored"}
        )
        back = client.put(
            f"/v1/documents/{document.id}/status", json={"status": "draft"}
        )

        assert stored.status_code == 200
        assert stored.json()["previous_status"] == "draft"
        assert stored.json()["document"]["status"] == "stored"
        assert back.status_code == 409

    def test_unknown_status_is_422(self, client, env, document_factory):
        document = _save(env, document_factory.create(created_by=env.principal.id))

        response = client.put(
            f"/v1/documents/{document.id}/status", json={"status": "published"}
        )

        assert response.status_code == 422

    def test_archive_without_body(self, client, env, document_factory):
        document = _save(env, document_factory.create(status=DocumentStatus.STORED))

        response = client.put(f"/v1/documents/{document.id}/archive")

        assert response.status_code == 200
        assert response.json()["document"]["status"] == "archived"

    def test_bulk_delete_requires_admin(self, client, env, document_factory):
        document = _save(env, document_factory.create(created_by=env.principal.id))

        response = client.request(
            "DELETE", "/v1/documents/bulk", json={"document_ids": [str(document.id)]}
        )

        assert response.status_code == 403
        assert env.documents.get_document(document.id) is not None

    def test_admin_deletes(self, client, env, document_factory, admin):
        env.principal = admin
        document = _save(env, document_factory.create(workspace=WorkspaceType.AMPP))
        env.storage.upload_file(document.storage_key, b"x", None)

        response = client.delete(f"/v1/documents/{document.id}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert env.storage.exists(document.storage_key) is False


def test_download_without_storage_is_503(
    document_repo, activity_repo, admin, document_factory
):
    env = _Env(document_repo, activity_repo, None, admin)
    document = _save(env, document_factory.create())
    client = TestClient(_build_app(env))

    response = client.get(f"/v1/documents/{document.id}/download")

    assert response.status_code == 503
    assert response.json()["code"] == "SERVICE_UNAVAILABLE"

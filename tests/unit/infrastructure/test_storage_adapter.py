"""
Name: Storage Adapter Tests

Responsibilities:
  - Validate S3 adapter uses the boto3 client correctly
  - Validate SDK error mapping to StorageError subtypes
  - Validate in-memory storage contract (tests/local dev)

Notes:
  - No real network calls (mocked client, no-op retry decorator)
"""

from unittest.mock import MagicMock

import pytest
from app.infrastructure.storage import (
    InMemoryFileStorage,
    S3Config,
    S3FileStorageAdapter,
    StorageConfigurationError,
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
)
from botocore.exceptions import ClientError

pytestmark = pytest.mark.unit


def _no_retry(fn):
    return fn


def _make_adapter_with_mock_client(mock_client: MagicMock) -> S3FileStorageAdapter:
    """Create an adapter with an injected mock S3 client."""
    return S3FileStorageAdapter(
        S3Config(
            bucket="bucket",
            access_key="key",
            secret_key="secret",
            region="us-east-1",
            endpoint_url="http://minio:9000",
        ),
        client=mock_client,
        retry_decorator=_no_retry,
    )


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


def test_upload_file_uses_put_object():
    mock_client = MagicMock()
    adapter = _make_adapter_with_mock_client(mock_client)

    adapter.upload_file("cam/u/d/doc.pdf", b"data", "application/pdf")

    mock_client.put_object.assert_called_once_with(
        Bucket="bucket",
        Key="cam/u/d/doc.pdf",
        Body=b"data",
        ContentType="application/pdf",
    )


def test_upload_without_content_type_defaults_to_octet_stream():
    mock_client = MagicMock()
    adapter = _make_adapter_with_mock_client(mock_client)

    adapter.upload_file("doc.bin", b"data", None)

    assert mock_client.put_object.call_args.kwargs["ContentType"] == (
        "application/octet-stream"
    )


def test_delete_file_uses_delete_object():
    mock_client = MagicMock()
    adapter = _make_adapter_with_mock_client(mock_client)

    adapter.delete_file("doc.pdf")

    mock_client.delete_object.assert_called_once_with(Bucket="bucket", Key="doc.pdf")


def test_download_file_uses_get_object():
    mock_client = MagicMock()
    mock_body = MagicMock()
    mock_body.read.return_value = b"data"
    mock_client.get_object.return_value = {"Body": mock_body}
    adapter = _make_adapter_with_mock_client(mock_client)

    data = adapter.download_file("doc.pdf")

    assert data == b"data"
    mock_client.get_object.assert_called_once_with(Bucket="bucket", Key="doc.pdf")
    mock_body.close.assert_called_once()


def test_presigned_url_sets_content_disposition():
    mock_client = MagicMock()
    mock_client.generate_presigned_url.return_value = "https://minio/signed"
    adapter = _make_adapter_with_mock_client(mock_client)

    url = adapter.generate_presigned_url(
        "doc.pdf", expires_in_seconds=600, filename='acta "final".pdf', inline=True
    )

    assert url == "https://minio/signed"
    kwargs = mock_client.generate_presigned_url.call_args.kwargs
    assert kwargs["ExpiresIn"] == 600
    assert kwargs["Params"]["ResponseContentDisposition"] == (
        "inline; filename=\"acta 'final'.pdf\""
    )


@pytest.mark.parametrize(
    "code, expected",
    [
        ("NoSuchKey", StorageNotFoundError),
        ("AccessDenied", StoragePermissionError),
        ("InternalError", StorageError),
    ],
)
def test_client_errors_are_mapped(code, expected):
    mock_client = MagicMock()
    mock_client.get_object.side_effect = _client_error(code)
    adapter = _make_adapter_with_mock_client(mock_client)

    with pytest.raises(expected):
        adapter.download_file("doc.pdf")


def test_empty_key_is_rejected():
    adapter = _make_adapter_with_mock_client(MagicMock())

    with pytest.raises(StorageError):
        adapter.delete_file("  ")


def test_missing_credentials_fail_fast():
    with pytest.raises(StorageConfigurationError):
        S3FileStorageAdapter(
            S3Config(bucket="bucket", access_key="", secret_key=""),
            client=MagicMock(),
        )


class TestInMemoryStorage:
    def test_roundtrip_and_delete(self):
        storage = InMemoryFileStorage()
        storage.upload_file("k", b"abc", "text/plain")

        assert storage.download_file("k") == b"abc"
        storage.delete_file("k")
        assert storage.exists("k") is False

    def test_missing_key_raises_not_found(self):
        storage = InMemoryFileStorage()

        with pytest.raises(StorageNotFoundError):
            storage.download_file("missing")
        with pytest.raises(StorageNotFoundError):
            storage.delete_file("missing")

    def test_presigned_url_encodes_ttl_and_filename(self):
        storage = InMemoryFileStorage()
        storage.upload_file("cam/a b.pdf", b"x", None)

        url = storage.generate_presigned_url(
            "cam/a b.pdf", expires_in_seconds=60, filename="a b.pdf"
        )

        assert url == "memory://cam/a%20b.pdf?expires=60&disposition=attachment&filename=a%20b.pdf"


def test_presigned_url_encodes_non_latin_filename():
    mock_client = MagicMock()
    mock_client.generate_presigned_url.return_value = "https://minio/signed"
    adapter = _make_adapter_with_mock_client(mock_client)

    adapter.generate_presigned_url("doc.pdf", filename="报告.pdf")

    disposition = mock_client.generate_presigned_url.call_args.kwargs["Params"][
        "ResponseContentDisposition"
    ]
    assert disposition == (
        "attachment; filename=\"document.pdf\"; "
        "filename*=UTF-8''%E6%8A%A5%E5%91%8A.pdf"
    )
    disposition.encode("latin-1")

"""
In-memory FileStoragePort (tests / local dev sin MinIO).

Thread-safe. Las URLs presignadas son ficticias (`memory://`), pero respetan
TTL y disposition para poder verificarlas en tests.
"""

from __future__ import annotations

from threading import Lock
from typing import Dict
from urllib.parse import quote

from ...domain.services import FileStoragePort
from .errors import StorageError, StorageNotFoundError


class InMemoryFileStorage(FileStoragePort):
    def __init__(self) -> None:
        self._lock = Lock()
        self._objects: Dict[str, tuple[bytes, str]] = {}

    def upload_file(self, key: str, content: bytes, content_type: str | None) -> None:
        if not (key or "").strip():
            raise StorageError("key de storage es requerido.")
        with self._lock:
            self._objects[key] = (
                bytes(content),
                content_type or "application/octet-stream",
            )

    def download_file(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._objects[key][0]
            except KeyError:
                raise StorageNotFoundError(key) from None

    def delete_file(self, key: str) -> None:
        with self._lock:
            if self._objects.pop(key, None) is None:
                raise StorageNotFoundError(key)

    def generate_presigned_url(
        self,
        key: str,
        *,
        expires_in_seconds: int = 3600,
        filename: str | None = None,
        inline: bool = False,
    ) -> str:
        with self._lock:
            if key not in self._objects:
                raise StorageNotFoundError(key)
        disposition = "inline" if inline else "attachment"
        url = f"memory://{quote(key)}?expires={int(expires_in_seconds)}&disposition={disposition}"
        if filename:
            url += f"&filename={quote(filename)}"
        return url

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

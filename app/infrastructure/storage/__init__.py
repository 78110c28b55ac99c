"""Adapters de infraestructura: Storage."""

from .errors import (
    StorageConfigurationError,
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUnavailableError,
)
from .in_memory import InMemoryFileStorage
from .s3_file_storage import S3Config, S3FileStorageAdapter

__all__ = [
    "InMemoryFileStorage",
    "S3Config",
    "S3FileStorageAdapter",
    "StorageError",
    "StorageConfigurationError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageUnavailableError",
]

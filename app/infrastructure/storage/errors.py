"""
===============================================================================
CRC CARD — infrastructure/storage/errors.py
===============================================================================

Componente:
  Errores tipados del object storage de LisaDocs (S3/MinIO o in-memory)

Responsabilidades:
  - Traducir fallas del SDK (boto3/botocore) a un vocabulario propio.
  - Exponer `outcome`: etiqueta estable para la métrica de operaciones.
  - Distinguir fallas transitorias (reintento) de permanentes.

Colaboradores:
  - s3_file_storage.py (mapeo ClientError -> StorageError)
  - in_memory.py (mismo contrato en tests)
  - services/retry.py (decide reintentos por tipo)
  - use cases de documentos (upload/delete/download)
===============================================================================
"""

from __future__ import annotations


class StorageError(Exception):
    """Base de errores de storage."""

    outcome = "error"

    def __init__(self, message: str = "Fallo de storage.", *, key: str | None = None):
        super().__init__(message)
        self.key = key


class StorageConfigurationError(StorageError):
    """Faltan bucket/credenciales o el SDK no está instalado."""

    outcome = "misconfigured"


class StorageNotFoundError(StorageError):
    """El objeto no existe (NoSuchKey / 404)."""

    outcome = "not_found"

    def __init__(self, key: str):
        super().__init__(f"Archivo no encontrado en storage. key={key}", key=key)


class StoragePermissionError(StorageError):
    """AccessDenied o credenciales inválidas. No se reintenta."""

    outcome = "denied"

    def __init__(self, message: str = "Permiso denegado en storage."):
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """Timeout, endpoint caído o throttling: transitorio."""

    outcome = "unavailable"

    def __init__(self, message: str = "Storage no disponible."):
        super().__init__(message)

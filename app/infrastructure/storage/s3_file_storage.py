"""
===============================================================================
CRC CARD — infrastructure/storage/s3_file_storage.py
===============================================================================

Clase:
  S3FileStorageAdapter (Adapter / Facade)

Responsabilidades:
  - Implementar FileStoragePort contra S3-compatible (AWS S3 / MinIO).
  - Encapsular boto3 (NO filtrar ClientError).
  - Subir (bytes o stream), descargar (bytes), borrar.
  - Generar presigned URLs (attachment o inline).
  - Reintentar fallas transitorias (tenacity) y contar operaciones.

Colaboradores:
  - domain.services.FileStoragePort (port)
  - infrastructure.storage.errors (errores tipados)
  - infrastructure.services.retry (backoff + jitter)
  - crosscutting.metrics.record_storage_operation
  - boto3/botocore (SDK, oculto por este adapter)

Decisiones de diseño:
  - Un único bucket; el prefijo de la key es el workspace.
  - Validación fail-fast de config.
  - Lazy import de boto3/botocore para mejorar cold start.
  - Mapeo explícito de errores (ClientError -> StorageError).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional, TypeVar, Union

from ...crosscutting.content_disposition import build_content_disposition
from ...crosscutting.logger import logger
from ...crosscutting.metrics import record_storage_operation
from ...domain.services import FileStoragePort
from ..services.retry import create_retry_decorator
from .errors import (
    StorageConfigurationError,
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUnavailableError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class S3Config:
    """
    Configuración del storage S3-compatible.

    Nota:
      - endpoint_url permite MinIO u otros S3 compatibles.
      - region puede omitirse en MinIO.
    """

    bucket: str
    access_key: str
    secret_key: str
    region: Optional[str] = None
    endpoint_url: Optional[str] = None


class S3FileStorageAdapter(FileStoragePort):
    """
    Adapter S3-compatible.

    Implementa:
      - upload_file
      - download_file
      - delete_file
      - generate_presigned_url
    """

    def __init__(
        self,
        config: S3Config,
        *,
        client=None,
        retry_decorator: Callable | None = None,
    ) -> None:
        self._config = config
        self._bucket = (config.bucket or "").strip()

        # ---------------------------------------------------------------------
        # Validaciones (fail-fast).
        # ---------------------------------------------------------------------
        if not self._bucket:
            raise StorageConfigurationError("S3 bucket es requerido.")
        if (
            not (config.access_key or "").strip()
            or not (config.secret_key or "").strip()
        ):
            raise StorageConfigurationError(
                "Credenciales S3 requeridas (access_key/secret_key)."
            )

        self._retry = retry_decorator or create_retry_decorator()

        # ---------------------------------------------------------------------
        # Cliente: inyectable para tests (mocks).
        # ---------------------------------------------------------------------
        if client is not None:
            self._client = client
            return

        # Lazy import para reducir costo de arranque.
        import boto3

        self._client = boto3.client(
            "s3",
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region or None,
            endpoint_url=config.endpoint_url or None,
        )

    # =========================================================================
    # API pública (Port)
    # =========================================================================

    def upload_file(
        self,
        key: str,
        content: Union[bytes, BinaryIO],
        content_type: str | None,
    ) -> None:
        """
        Sube un objeto al bucket.

        Soporta bytes o stream (BinaryIO). Solo los bytes se reintentan:
        un stream ya consumido no puede re-leerse.
        """
        self._require_key(key)
        effective_ct = (content_type or "application/octet-stream").strip()

        if isinstance(content, (bytes, bytearray, memoryview)):

            def _put() -> None:
                self._client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=bytes(content),
                    ContentType=effective_ct,
                )

            self._call("upload", key, _put, retryable=True)
            return

        def _put_stream() -> None:
            self._client.upload_fileobj(
                Fileobj=content,
                Bucket=self._bucket,
                Key=key,
                ExtraArgs={"ContentType": effective_ct},
            )

        self._call("upload", key, _put_stream, retryable=False)

    def download_file(self, key: str) -> bytes:
        """Descarga el objeto completo a memoria."""
        self._require_key(key)

        def _get() -> bytes:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()

        return self._call("download", key, _get, retryable=True)

    def delete_file(self, key: str) -> None:
        """
        Borra el objeto.

        S3 responde OK al borrar una key inexistente; MinIO/gateways pueden
        devolver NoSuchKey, que se tipa como StorageNotFoundError.
        """
        self._require_key(key)

        def _delete() -> None:
            self._client.delete_object(Bucket=self._bucket, Key=key)

        self._call("delete", key, _delete, retryable=True)

    def generate_presigned_url(
        self,
        key: str,
        *,
        expires_in_seconds: int = 3600,
        filename: str | None = None,
        inline: bool = False,
    ) -> str:
        """
        Genera una URL firmada para descargar el objeto sin que el backend
        sea proxy. inline=True pide al browser mostrarlo (PDF, imágenes).
        """
        self._require_key(key)

        if expires_in_seconds <= 0:
            expires_in_seconds = 3600

        params: dict = {"Bucket": self._bucket, "Key": key}
        if filename:
            params["ResponseContentDisposition"] = build_content_disposition(
                filename, inline=inline
            )
        elif inline:
            params["ResponseContentDisposition"] = "inline"

        def _presign() -> str:
            return str(
                self._client.generate_presigned_url(
                    ClientMethod="get_object",
                    Params=params,
                    ExpiresIn=int(expires_in_seconds),
                )
            )

        return self._call("presign", key, _presign, retryable=False)

    # =========================================================================
    # Helpers privados
    # =========================================================================

    @staticmethod
    def _require_key(key: str) -> None:
        if not (key or "").strip():
            raise StorageError("key de storage es requerido.")

    def _call(
        self, action: str, key: str, fn: Callable[[], T], *, retryable: bool
    ) -> T:
        """Ejecuta fn mapeando errores del SDK; reintenta si corresponde."""

        def _mapped() -> T:
            try:
                return fn()
            except StorageError:
                raise
            except Exception as exc:
                raise self._map_storage_error(exc, key=key, action=action) from exc

        runner = self._retry(_mapped) if retryable else _mapped
        try:
            result = runner()
        except StorageError as exc:
            record_storage_operation(action, exc.outcome)
            raise
        record_storage_operation(action, "ok")
        return result

    def _map_storage_error(
        self, exc: Exception, *, key: str, action: str
    ) -> StorageError:
        """
        Traduce errores del SDK a errores del subsistema.

        Regla:
          - Infra (boto3) queda encapsulada.
          - Capas superiores trabajan con StorageError.
        """
        from botocore.exceptions import (
            ClientError,
            ConnectTimeoutError,
            EndpointConnectionError,
            ReadTimeoutError,
        )

        # Timeouts / endpoint caído
        if isinstance(
            exc, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)
        ):
            logger.warning("Storage unavailable", extra={"action": action, "key": key})
            return StorageUnavailableError("Storage no disponible (timeout/conexión).")

        # Error S3 “estructurado”
        if isinstance(exc, ClientError):
            code = str((exc.response.get("Error") or {}).get("Code") or "")

            if code in {"NoSuchKey", "404", "NotFound"}:
                return StorageNotFoundError(key)

            if code in {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}:
                return StoragePermissionError(
                    "Permiso/credenciales inválidas en storage."
                )

            if code in {"SlowDown", "RequestTimeout", "ServiceUnavailable", "503"}:
                return StorageUnavailableError("Storage temporalmente no disponible.")

            logger.exception(
                "Storage ClientError",
                extra={"action": action, "key": key, "code": code},
            )
            return StorageError(f"Fallo de storage ({action}). code={code}", key=key)

        # Fallback genérico
        logger.exception("Storage error", extra={"action": action, "key": key})
        return StorageError(f"Fallo de storage ({action}).", key=key)

"""
===============================================================================
TARJETA CRC — domain/services.py
===============================================================================

Módulo:
    Puertos de Servicios Externos (Protocols)

Responsabilidades:
    - Definir contratos para servicios externos (storage de archivos,
      sink de actividad).
    - Proteger a application de detalles del proveedor.
    - Mantener el dominio independiente de SDKs.

Colaboradores:
    - infrastructure/storage/*: implementaciones de FileStoragePort.
    - infrastructure/queue/*, app/activity.py: implementaciones de ActivityRecorder.
    - application/usecases: consumen estos puertos.

Reglas:
    - SOLO interfaces: nada de implementación.
    - Firmas estables y provider-agnostic.
===============================================================================
"""

from __future__ import annotations

from typing import Protocol

from .entities import DocumentActivity


class FileStoragePort(Protocol):
    """Contrato de storage de archivos (S3/MinIO/etc.)."""

    def upload_file(
        self, key: str, content: bytes, content_type: str | None
    ) -> None: ...

    def download_file(self, key: str) -> bytes: ...

    def delete_file(self, key: str) -> None: ...

    def generate_presigned_url(
        self,
        key: str,
        *,
        expires_in_seconds: int = 3600,
        filename: str | None = None,
        inline: bool = False,
    ) -> str: ...


class ActivityRecorder(Protocol):
    """
    Contrato del sink de actividad.

    Las implementaciones pueden fallar; los use cases nunca lo llaman directo,
    sino a través de app.activity.record_activity (best-effort).
    """

    def record(self, activity: DocumentActivity) -> None: ...

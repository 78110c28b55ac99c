"""
===============================================================================
SUBSISTEMA: Infraestructura / Queue
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Errores Tipados de Cola

Responsabilidades:
    - Distinguir errores de configuración (fail-fast al arrancar) de errores
      al encolar (runtime, los traga app.activity.record_activity).

Colaboradores:
    - rq_queue.RQActivityRecorder
    - import_utils.ensure_importable
===============================================================================
"""

from __future__ import annotations


class QueueError(Exception):
    """Error base del subsistema de colas."""

    code: str = "QUEUE_ERROR"


class QueueConfigurationError(QueueError):
    """Cola mal configurada (job path no importable, parámetros inválidos, rq ausente)."""

    code = "QUEUE_CONFIGURATION_ERROR"


class QueueEnqueueError(QueueError):
    """Falla al encolar (Redis caído, timeout de socket, etc.)."""

    code = "QUEUE_ENQUEUE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        queue_name: str,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.queue_name = queue_name
        self.original_error = original_error

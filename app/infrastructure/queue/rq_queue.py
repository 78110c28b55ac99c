"""
===============================================================================
ARCHIVO: infrastructure/queue/rq_queue.py
===============================================================================

CRC CARD (Class)
-------------------------------------------------------------------------------
Clase:
    RQActivityRecorder (Adapter)

Responsabilidades:
    - Implementar el puerto `ActivityRecorder` encolando la escritura en RQ,
      fuera del camino crítico del request.
    - Adjuntar reintentos y un callback on_failure que supervisa jobs fallidos.
    - Validar configuración (nombre de cola + job paths importables) en modo fail-fast.
    - Encapsular dependencias externas (rq/redis) para no “filtrarlas” al dominio.

Colaboradores:
    - domain.services.ActivityRecorder
    - app.activity.activity_to_payload
    - job_paths.RECORD_ACTIVITY_JOB_PATH / ACTIVITY_FAILURE_CALLBACK_PATH
    - import_utils.ensure_importable
    - errors.QueueConfigurationError / QueueEnqueueError

Patrones:
    - Adapter: traduce el puerto del dominio a una implementación RQ.
    - Fail-Fast: valida paths importables antes de encolar.
    - Lazy Import: rq se importa al construir el adapter.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...activity import activity_to_payload
from ...crosscutting.logger import logger
from ...domain.entities import DocumentActivity
from ...domain.services import ActivityRecorder
from .errors import QueueConfigurationError, QueueEnqueueError
from .import_utils import ensure_importable
from .job_paths import (
    ACTIVITY_FAILURE_CALLBACK_PATH,
    ACTIVITY_QUEUE_NAME,
    RECORD_ACTIVITY_JOB_PATH,
)


@dataclass(frozen=True)
class RQQueueConfig:
    """Configuración del adaptador RQ.

    queue_name:
        Nombre de la cola en Redis.
    retry_max_attempts:
        Reintentos automáticos si el job falla en el worker.
    job_timeout_seconds:
        Timeout máximo de ejecución del job.
    result_ttl_seconds:
        Tiempo de vida del resultado del job en Redis.
    """

    queue_name: str = ACTIVITY_QUEUE_NAME
    retry_max_attempts: int = 3
    job_timeout_seconds: int = 60
    result_ttl_seconds: int = 0


class RQActivityRecorder(ActivityRecorder):
    """Adapter RQ: cada registro de actividad es un job independiente."""

    def __init__(self, *, redis: Any, config: RQQueueConfig) -> None:
        self._redis = redis
        self._config = _validate_config(config)

        # Fail-fast: el worker necesita importar job y callback.
        ensure_importable(RECORD_ACTIVITY_JOB_PATH, ACTIVITY_FAILURE_CALLBACK_PATH)

        self._rq = _lazy_import_rq()
        self._queue = self._rq.Queue(name=self._config.queue_name, connection=redis)

        self._retry = None
        if self._config.retry_max_attempts > 0:
            self._retry = self._rq.Retry(max=self._config.retry_max_attempts)
        self._on_failure = self._rq.Callback(ACTIVITY_FAILURE_CALLBACK_PATH)

        logger.info(
            "RQ activity queue inicializada",
            extra={
                "queue": self._config.queue_name,
                "retry_max_attempts": self._config.retry_max_attempts,
                "job_timeout_seconds": self._config.job_timeout_seconds,
            },
        )

    def record(self, activity: DocumentActivity) -> None:
        """Encola el registro. QueueEnqueueError si Redis no acepta el job."""
        try:
            job = self._queue.enqueue(
                RECORD_ACTIVITY_JOB_PATH,
                args=(activity_to_payload(activity),),
                retry=self._retry,
                on_failure=self._on_failure,
                job_timeout=self._config.job_timeout_seconds,
                result_ttl=self._config.result_ttl_seconds,
                description=f"record_activity:{activity.action.value}",
            )
        except Exception as exc:
            raise QueueEnqueueError(
                "No se pudo encolar el registro de actividad",
                queue_name=self._config.queue_name,
                original_error=exc,
            ) from exc

        logger.debug(
            "Actividad encolada",
            extra={
                "job_id": str(getattr(job, "id", "") or ""),
                "action": activity.action.value,
                "queue": self._config.queue_name,
            },
        )


# -----------------------------------------------------------------------------
# Helpers privados (módulo)
# -----------------------------------------------------------------------------


def _validate_config(config: RQQueueConfig) -> RQQueueConfig:
    """Valida y normaliza configuración (fail-fast)."""
    queue_name = (config.queue_name or "").strip() or ACTIVITY_QUEUE_NAME
    retry_max_attempts = int(config.retry_max_attempts)
    job_timeout_seconds = int(config.job_timeout_seconds)
    result_ttl_seconds = int(config.result_ttl_seconds)

    if retry_max_attempts < 0:
        raise QueueConfigurationError("retry_max_attempts no puede ser negativo")
    if job_timeout_seconds <= 0:
        raise QueueConfigurationError("job_timeout_seconds debe ser > 0")
    if result_ttl_seconds < 0:
        raise QueueConfigurationError("result_ttl_seconds no puede ser negativo")

    return RQQueueConfig(
        queue_name=queue_name,
        retry_max_attempts=retry_max_attempts,
        job_timeout_seconds=job_timeout_seconds,
        result_ttl_seconds=result_ttl_seconds,
    )


def _lazy_import_rq():
    """Importa RQ al construir el adapter (el error queda acotado a la cola)."""
    try:
        import rq
    except ImportError as exc:
        raise QueueConfigurationError(
            "RQ no está disponible. Instalar dependencia 'rq' para usar colas."
        ) from exc
    return rq

"""
===============================================================================
TARJETA CRC — worker/jobs.py (Jobs RQ: actividad de documentos)
===============================================================================

Responsabilidades:
  - Definir entrypoints de jobs ejecutados por RQ.
  - Validar el payload de forma fail-fast y registrable.
  - Persistir la actividad con el repositorio del contenedor.
  - Supervisar jobs fallidos (callback on_failure): log + métrica.
  - Garantizar limpieza de contexto al finalizar (éxito o fallo).

Colaboradores:
  - app.activity.activity_from_payload
  - container.get_activity_repository
  - crosscutting.metrics (record_worker_processed, observe_worker_duration,
    record_activity_failure)
  - context (set_request_context, clear_context)
===============================================================================
"""

from __future__ import annotations

import time
from typing import Any

from rq import get_current_job

from ..activity import activity_from_payload
from ..context import clear_context, set_request_context
from ..crosscutting.logger import logger
from ..crosscutting.metrics import (
    observe_worker_duration,
    record_activity_failure,
    record_worker_processed,
)

_JOB_NAME = "record_activity"


def record_activity_job(payload: dict[str, Any]) -> None:
    """
    Job RQ: persiste un registro de actividad.

    Contrato:
      - payload es el dict de app.activity.activity_to_payload.
      - Payload inválido: se descarta (sin reintento) con log + métrica.
      - Falla de DB: se relanza para que RQ aplique reintentos.
    """
    job = get_current_job()
    job_id = getattr(job, "id", None) or ""

    set_request_context(request_id=job_id, method="WORKER", path=f"rq.{_JOB_NAME}")

    start = time.perf_counter()
    status = "UNKNOWN"
    try:
        try:
            activity = activity_from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            status = "INVALID"
            record_activity_failure("job")
            logger.error(
                "Job inválido: payload de actividad malformado",
                extra={"job_id": job_id, "error": str(exc)},
            )
            return

        from ..container import get_activity_repository

        get_activity_repository().append(activity)
        status = "OK"

    except Exception as exc:
        # R: Marcamos FAILED y relanzamos para que RQ gestione retries.
        status = "FAILED"
        logger.exception(
            "Worker job falló con excepción",
            extra={"job_id": job_id, "error": str(exc)},
        )
        raise

    finally:
        duration = time.perf_counter() - start
        record_worker_processed(_JOB_NAME, status)
        observe_worker_duration(_JOB_NAME, duration)
        logger.info(
            "Worker job finalizado",
            extra={
                "job_id": job_id,
                "status": status,
                "duration_seconds": round(duration, 3),
            },
        )
        clear_context()


def on_activity_job_failure(job, connection, exc_type, exc_value, traceback) -> None:
    """
    Callback on_failure de RQ.

    Se ejecuta en el worker cada vez que el job termina en fallo; la actividad
    se pierde pero queda registrada en logs y métricas.
    """
    record_activity_failure("job")
    args = getattr(job, "args", None) or ()
    payload = args[0] if args and isinstance(args[0], dict) else {}
    logger.error(
        "Activity job failed",
        extra={
            "job_id": getattr(job, "id", None),
            "action": payload.get("action"),
            "document_id": payload.get("document_id"),
            "error_type": getattr(exc_type, "__name__", str(exc_type)),
            "error": str(exc_value),
        },
    )


__all__ = ["record_activity_job", "on_activity_job_failure"]

"""
===============================================================================
SUBSISTEMA: Infraestructura / Queue
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Rutas y Constantes de Jobs

Responsabilidades:
    - Centralizar nombres de colas y rutas "importables" de jobs.
    - Evitar strings mágicos dispersos (anti-drift).

Colaboradores:
    - rq_queue.RQActivityRecorder
    - worker.jobs.record_activity_job / on_activity_job_failure

Notas:
    - Las rutas deben ser importables por el worker de RQ.
    - Si se renombra/mueve un job, se actualiza acá y se valida en runtime.
===============================================================================
"""

from __future__ import annotations

# Nombre por defecto de la cola de actividad.
ACTIVITY_QUEUE_NAME: str = "activity"

# Job que persiste un registro de actividad.
RECORD_ACTIVITY_JOB_PATH: str = "app.worker.jobs.record_activity_job"

# Callback on_failure: se ejecuta cuando el job agota sus reintentos o falla.
ACTIVITY_FAILURE_CALLBACK_PATH: str = "app.worker.jobs.on_activity_job_failure"

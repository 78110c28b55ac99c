"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus) — Observabilidad de bajo acoplamiento

Responsabilidades:
    - Definir métricas Prometheus sobre un registry propio.
    - Proveer funciones pequeñas y estables para registrar eventos/duraciones.
    - Cuidar cardinalidad (NO user_id, NO document_id, NO SQL completo).
    - Exponer helpers para generar la respuesta /metrics.

Colaboradores:
    - crosscutting.middleware: registra latencia y conteo HTTP.
    - application/usecases/documents: transiciones y denegaciones.
    - app/activity.py: fallas del sink de actividad.
    - infrastructure/db/instrumentation: observa duración de queries.
    - worker/jobs: registra métricas de jobs de actividad.

Decisiones de diseño:
    - Registry propio (no el global) para aislar tests.
    - Registro único global: Prometheus requiere singletons.
    - Normalización de paths: UUIDs -> {id}. Los workspaces son un enum
      cerrado, por eso se conservan en el label.
===============================================================================
"""

from __future__ import annotations

import re
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# R: registry propio; evita colisiones con el REGISTRY global en tests.
_registry = CollectorRegistry()


# -----------------------------------------------------------------------------
# Métricas (variables globales)
# -----------------------------------------------------------------------------

_requests_total: Optional["Counter"] = None
_request_latency: Optional["Histogram"] = None

_db_query_duration: Optional["Histogram"] = None

_worker_processed_total: Optional["Counter"] = None
_worker_duration: Optional["Histogram"] = None

_status_transitions_total: Optional["Counter"] = None
_permission_denied_total: Optional["Counter"] = None
_activity_failures_total: Optional["Counter"] = None
_storage_operations_total: Optional["Counter"] = None


def _init_metrics() -> None:
    """Inicializa métricas (una sola vez)."""
    global _requests_total, _request_latency
    global _db_query_duration
    global _worker_processed_total, _worker_duration
    global _status_transitions_total, _permission_denied_total
    global _activity_failures_total, _storage_operations_total

    if _requests_total is not None:
        return

    # ------------------------
    # HTTP
    # ------------------------
    _requests_total = Counter(
        "lisadocs_requests_total",
        "Total de requests HTTP",
        ["endpoint", "method", "status"],
        registry=_registry,
    )

    _request_latency = Histogram(
        "lisadocs_request_latency_seconds",
        "Latencia de requests HTTP (segundos)",
        ["endpoint", "method"],
        buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        registry=_registry,
    )

    # ------------------------
    # DB
    # ------------------------
    _db_query_duration = Histogram(
        "lisadocs_db_query_duration_seconds",
        "Duración de queries DB (segundos)",
        ["kind"],
        buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
        registry=_registry,
    )

    # ------------------------
    # Worker (jobs de actividad)
    # ------------------------
    _worker_processed_total = Counter(
        "lisadocs_worker_processed_total",
        "Jobs procesados por el worker",
        ["job", "status"],
        registry=_registry,
    )

    _worker_duration = Histogram(
        "lisadocs_worker_duration_seconds",
        "Duración de jobs del worker (segundos)",
        ["job"],
        buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
        registry=_registry,
    )

    # ------------------------
    # Dominio documental
    # ------------------------
    _status_transitions_total = Counter(
        "lisadocs_document_status_transitions_total",
        "Transiciones de estado de documentos",
        ["from_status", "to_status", "outcome"],
        registry=_registry,
    )

    _permission_denied_total = Counter(
        "lisadocs_permission_denied_total",
        "Operaciones rechazadas por permisos",
        ["operation"],
        registry=_registry,
    )

    _activity_failures_total = Counter(
        "lisadocs_activity_log_failures_total",
        "Registros de actividad que no pudieron persistirse/encolarse",
        ["stage"],
        registry=_registry,
    )

    _storage_operations_total = Counter(
        "lisadocs_storage_operations_total",
        "Operaciones contra object storage",
        ["operation", "outcome"],
        registry=_registry,
    )


# Inicialización al importar el módulo
_init_metrics()


# -----------------------------------------------------------------------------
# API pública (helpers de registro)
# -----------------------------------------------------------------------------


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Registra métricas HTTP.

    - endpoint se normaliza para no explotar cardinalidad.
    - status se agrupa por 2xx/4xx/5xx.
    """

    normalized = _normalize_endpoint(endpoint)
    status_bucket = _status_bucket(status_code)

    if _requests_total:
        _requests_total.labels(
            endpoint=normalized,
            method=method,
            status=status_bucket,
        ).inc()

    if _request_latency:
        _request_latency.labels(endpoint=normalized, method=method).observe(
            latency_seconds
        )


def observe_db_query_duration(kind: str, seconds: float) -> None:
    """Observa duración de una query DB.

    Reglas:
      - `kind` debe ser baja cardinalidad (SELECT/INSERT/UPDATE/...).
      - NO incluir SQL completo.
    """
    if _db_query_duration:
        _db_query_duration.labels(kind=(kind or "UNKNOWN").upper()).observe(seconds)


def record_worker_processed(job: str, status: str) -> None:
    """Cuenta jobs procesados por nombre y resultado."""
    if _worker_processed_total:
        _worker_processed_total.labels(job=job, status=status).inc()


def observe_worker_duration(job: str, duration_seconds: float) -> None:
    """Observa duración de un job del worker."""
    if _worker_duration:
        _worker_duration.labels(job=job).observe(duration_seconds)


def record_status_transition(from_status: str, to_status: str, outcome: str) -> None:
    """outcome: applied | rejected | conflict | forbidden."""
    if _status_transitions_total:
        _status_transitions_total.labels(
            from_status=from_status, to_status=to_status, outcome=outcome
        ).inc()


def record_permission_denied(operation: str) -> None:
    if _permission_denied_total:
        _permission_denied_total.labels(operation=operation).inc()


def record_activity_failure(stage: str) -> None:
    """stage: enqueue | persist | job."""
    if _activity_failures_total:
        _activity_failures_total.labels(stage=stage).inc()


def record_storage_operation(operation: str, outcome: str) -> None:
    if _storage_operations_total:
        _storage_operations_total.labels(operation=operation, outcome=outcome).inc()


# -----------------------------------------------------------------------------
# Helpers internos
# -----------------------------------------------------------------------------

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    flags=re.IGNORECASE,
)


def _normalize_endpoint(path: str) -> str:
    """Normaliza paths: UUIDs e IDs numéricos -> `{id}`."""
    path = _UUID_RE.sub("{id}", path)
    path = re.sub(r"/\d+(?=/|$)", "/{id}", path)
    return path


def _status_bucket(code: int) -> str:
    """Agrupa status code para baja cardinalidad."""
    if 200 <= code < 300:
        return "2xx"
    if 300 <= code < 400:
        return "3xx"
    if 400 <= code < 500:
        return "4xx"
    if 500 <= code < 600:
        return "5xx"
    return "other"


# -----------------------------------------------------------------------------
# Exposición del endpoint /metrics
# -----------------------------------------------------------------------------


def get_metrics_response() -> tuple[bytes, str]:
    """Genera el body y content-type para /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST

"""app.infrastructure.services.retry

Name: Retry Helper with Exponential Backoff + Jitter

Qué es
------
Utilidad de **resiliencia** para llamadas a servicios externos (object storage).
Implementa:
  - Clasificación de errores: **transient** (reintentar) vs **permanent** (fail-fast)
  - Decorator de `tenacity` para aplicar **exponential backoff + jitter**
  - Logging estructurado de intentos de retry

CRC (Component Card)
--------------------
Component: retry helper
Responsibilities:
  - Decidir qué errores son reintentables
  - Proveer un decorator estándar (tenacity) con backoff+jitter
  - Loguear intentos y contexto útil para debugging/observabilidad
Collaborators:
  - tenacity (motor de retry)
  - crosscutting.config.get_settings (config de attempts/delays)
  - infrastructure.storage.errors (errores tipados del storage)
Constraints:
  - Reintentar SOLO errores transitorios (StorageUnavailableError, 5xx, timeouts)
  - No reintentar errores permanentes (not found, permisos, 4xx)
  - Jitter para evitar thundering herd
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.logger import logger
from ..storage.errors import (
    StorageNotFoundError,
    StoragePermissionError,
    StorageUnavailableError,
)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# HTTP code policies
# ---------------------------------------------------------------------------

# R: HTTP status codes que indican fallas transitorias (reintentables)
TRANSIENT_HTTP_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

# R: HTTP status codes que indican fallas permanentes (no reintentar)
PERMANENT_HTTP_CODES: frozenset[int] = frozenset({400, 401, 403, 404})


def get_http_status_code(exception: BaseException) -> int | None:
    """R: Extrae un status code HTTP (best-effort).

    Soporta:
      - botocore ClientError (response["ResponseMetadata"]["HTTPStatusCode"])
      - excepciones que expongan `status_code`
    """
    response = getattr(exception, "response", None)
    if isinstance(response, dict):
        status_code = (response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
        if isinstance(status_code, int):
            return status_code

    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    return None


def is_transient_error(exception: BaseException) -> bool:
    """R: Decide si un error es transitorio (reintentar) o permanente (fail-fast).

    Reglas (en orden):
      1) Errores tipados de storage: Unavailable → True; NotFound/Permission → False.
      2) Si hay status code HTTP: permanent → False, transient → True.
      3) Timeouts / connection (built-in): True.
      4) Default: fail-fast (False).
    """
    if isinstance(exception, StorageUnavailableError):
        return True
    if isinstance(exception, (StorageNotFoundError, StoragePermissionError)):
        return False

    status_code = get_http_status_code(exception)
    if status_code is not None:
        if status_code in PERMANENT_HTTP_CODES:
            return False
        if status_code in TRANSIENT_HTTP_CODES:
            return True

    if isinstance(exception, (TimeoutError, ConnectionError)):
        return True

    return False


def _log_retry(retry_state: RetryCallState) -> None:
    """R: Loguea cada intento antes de dormir (before_sleep)."""
    fn = getattr(retry_state, "fn", None)
    fn_name = getattr(fn, "__name__", "unknown")
    wait_time = (
        retry_state.next_action.sleep
        if getattr(retry_state, "next_action", None) is not None
        else 0
    )

    exc: Optional[BaseException] = None
    if getattr(retry_state, "outcome", None) is not None:
        exc = retry_state.outcome.exception()

    logger.warning(
        "Retrying external call",
        extra={
            "function": fn_name,
            "attempt": retry_state.attempt_number,
            "wait_seconds": round(float(wait_time), 2),
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """R: Crea un decorator `tenacity` con exponential backoff + jitter.

    Los parámetros omitidos se leen de Settings (retry_*).
    """
    if max_attempts is None or base_delay is None or max_delay is None:
        from ...crosscutting.config import get_settings

        settings = get_settings()
        max_attempts = (
            settings.retry_max_attempts if max_attempts is None else max_attempts
        )
        base_delay = (
            settings.retry_base_delay_seconds if base_delay is None else base_delay
        )
        max_delay = settings.retry_max_delay_seconds if max_delay is None else max_delay

    if max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if max_delay <= 0:
        raise ValueError("max_delay must be > 0")

    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(
            initial=float(base_delay),
            max=float(max_delay),
            jitter=float(base_delay),
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_retry,
        reraise=True,
    )

"""
===============================================================================
TARJETA CRC — app/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir excepciones de la aplicación a respuestas HTTP RFC7807.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Patrones aplicados:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: cualquier excepción no tipada -> INTERNAL_ERROR (con logging).

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, handlers
  - crosscutting.exceptions: LisaDocsError y derivadas (Database/Storage)
  - crosscutting.config.get_settings (para decidir nivel de detalle)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    request_validation_handler,
)
from ..crosscutting.exceptions import DatabaseError, LisaDocsError, StorageFailureError
from ..crosscutting.logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_service_error(
    request: Request,
    *,
    exc: LisaDocsError,
    code: ErrorCode,
    status_code: int,
) -> JSONResponse:
    """Helper común para errores tipados de servicios."""
    request_id = _request_id_from(request)

    logger.error(
        "Error de servicio",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "error_message": exc.message,
            "request_id": request_id,
        },
    )

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id}],
    )
    return await app_exception_handler(request, app_exc)


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.DATABASE_ERROR, status_code=503
    )


async def storage_error_handler(
    request: Request, exc: StorageFailureError
) -> JSONResponse:
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.SERVICE_UNAVAILABLE, status_code=503
    )


async def lisadocs_error_handler(request: Request, exc: LisaDocsError) -> JSONResponse:
    # R: Errores base: tratamos como INTERNAL_ERROR por defecto.
    return await _handle_service_error(
        request, exc=exc, code=ErrorCode.INTERNAL_ERROR, status_code=500
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica en producción.
    """
    request_id = _request_id_from(request)

    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = "Error interno."
    try:
        if not get_settings().is_production():
            detail = str(exc) or detail
    except Exception:
        # Settings inválidos: respuesta genérica.
        pass

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - Subclases antes que LisaDocsError (Starlette resuelve por MRO, pero el
        orden explícito documenta la intención).
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(StorageFailureError, storage_error_handler)
    app.add_exception_handler(LisaDocsError, lisadocs_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]

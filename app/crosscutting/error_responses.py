# app/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Respuestas de error estándar (RFC 7807 / Problem Details)
===============================================================================

Objetivo
--------
Uniformar TODOS los errores HTTP para que:
- El frontend pueda manejar por "code"
- El backend pueda correlacionar por request_id / error_id
- Los motivos de denegación (reason) lleguen intactos al cliente

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + handlers

Responsabilidades:
  - Definir catálogo de códigos de error (ErrorCode)
  - Construir payload RFC7807 (ErrorDetail)
  - Proveer factories de errores frecuentes
  - Proveer handlers (FastAPI) para devolver JSON problem+json

Colaboradores:
  - crosscutting/middleware.py (request_id)
  - api/exception_handlers.py (mapea errores internos)
  - interfaces/api/http/error_mapping.py (mapea errores de use cases)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    # 4xx
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNSUPPORTED_MEDIA = "UNSUPPORTED_MEDIA"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorDetail(BaseModel):
    """
    Modelo RFC 7807 (Problem Details).

    Campos extra:
    - code: error code estable para clientes
    - errors: lista opcional de detalles (ej: [{"field":"x","msg":"..."}])
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

_OPENAPI_ERROR_SCHEMA = {"$ref": "#/components/schemas/ErrorDetail"}
_OPENAPI_ERROR_CONTENT = {PROBLEM_JSON_MEDIA_TYPE: {"schema": _OPENAPI_ERROR_SCHEMA}}

_OPENAPI_ERROR_TITLES: dict[str, str] = {
    "400": "Bad Request",
    "401": "Unauthorized",
    "403": "Forbidden",
    "404": "Not Found",
    "409": "Conflict",
    "413": "Payload Too Large",
    "415": "Unsupported Media",
    "422": "Validation Error",
    "503": "Service Unavailable",
    "default": "Error",
}

OPENAPI_ERROR_RESPONSES = {
    status: {
        "description": f"{title} (RFC7807)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    }
    for status, title in _OPENAPI_ERROR_TITLES.items()
}


class AppHTTPException(HTTPException):
    """
    Excepción HTTP con ErrorCode estable y errores de detalle opcionales.

    Colaboradores:
      - app_exception_handler()
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Factories de error (helpers)
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(422, ErrorCode.VALIDATION_ERROR, detail, errors)


def not_found(resource: str, identifier: str) -> AppHTTPException:
    return AppHTTPException(
        404, ErrorCode.NOT_FOUND, f"{resource} '{identifier}' no encontrado"
    )


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(409, ErrorCode.CONFLICT, detail)


def unauthorized(detail: str = "Autenticación requerida") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Acceso denegado") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def payload_too_large(max_size: str) -> AppHTTPException:
    return AppHTTPException(
        413,
        ErrorCode.PAYLOAD_TOO_LARGE,
        f"El payload excede el máximo permitido ({max_size})",
    )


def unsupported_media(detail: str) -> AppHTTPException:
    return AppHTTPException(415, ErrorCode.UNSUPPORTED_MEDIA, detail)


def internal_error(detail: str = "Ocurrió un error inesperado") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


def service_unavailable(service: str) -> AppHTTPException:
    return AppHTTPException(
        503,
        ErrorCode.SERVICE_UNAVAILABLE,
        f"Servicio no disponible temporalmente: {service}",
    )


def database_error(
    detail: str = "Falla en operación de base de datos",
) -> AppHTTPException:
    return AppHTTPException(503, ErrorCode.DATABASE_ERROR, detail)


# ---------------------------------------------------------------------------
# Handlers FastAPI
# ---------------------------------------------------------------------------
def _problem_response(
    request: Request,
    *,
    status_code: int,
    code: ErrorCode,
    detail: str,
    errors: list[dict[str, Any]] | None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    request_id = getattr(getattr(request, "state", None), "request_id", None)
    all_errors = list(errors or [])
    if request_id:
        all_errors.append({"request_id": request_id})

    error = ErrorDetail(
        type=f"about:blank/{code.value.lower()}",
        title=code.value.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        code=code,
        instance=str(request.url),
        errors=all_errors or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json", exclude_none=True),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Handler para AppHTTPException (incluye instance y headers opcionales)."""
    return _problem_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        detail=str(exc.detail),
        errors=exc.errors,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Errores de validación de FastAPI/pydantic como problem+json (422)."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _problem_response(
        request,
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Datos de entrada inválidos",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler de fallback para excepciones no manejadas.
    (No expone detalles internos al cliente.)
    """
    return _problem_response(
        request,
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail="Ocurrió un error inesperado",
        errors=None,
    )

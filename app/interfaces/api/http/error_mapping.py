"""
===============================================================================
TARJETA CRC — error_mapping.py (UseCase Error -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir códigos de error de casos de uso a HTTP Exceptions RFC7807.
  - Centralizar el mapeo para evitar duplicación en routers.
  - Mantener el dominio libre de HTTP.

Reglas:
  - FORBIDDEN -> 403 (lleva la razón del gate).
  - NOT_FOUND -> 404, CONFLICT -> 409, VALIDATION_ERROR -> 422.
  - SERVICE_UNAVAILABLE -> 503.

Colaboradores:
  - application.usecases.documents (DocumentError)
  - application.usecases.users (UserError)
  - crosscutting.error_responses (validation_error, forbidden, etc.)
===============================================================================
"""

from __future__ import annotations

from typing import NoReturn

from app.application.usecases.documents import DocumentError, DocumentErrorCode
from app.application.usecases.users import UserError, UserErrorCode
from app.crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    conflict,
    forbidden,
    service_unavailable,
    validation_error,
)


def _not_found(message: str) -> AppHTTPException:
    return AppHTTPException(404, ErrorCode.NOT_FOUND, message)


def raise_document_error(error: DocumentError) -> NoReturn:
    """Traduce DocumentError -> HTTP."""
    if error.code == DocumentErrorCode.FORBIDDEN:
        raise forbidden(error.message)
    if error.code == DocumentErrorCode.CONFLICT:
        raise conflict(error.message)
    if error.code == DocumentErrorCode.VALIDATION_ERROR:
        raise validation_error(error.message)
    if error.code == DocumentErrorCode.SERVICE_UNAVAILABLE:
        # 503 (dependencia externa caída / degradada)
        raise service_unavailable(error.resource or "storage")
    if error.code == DocumentErrorCode.NOT_FOUND:
        raise _not_found(error.message)

    # Fallback seguro: si aparece un código nuevo, lo tratamos como 422
    raise validation_error(error.message)


def raise_user_error(error: UserError) -> NoReturn:
    """Traduce UserError -> HTTP."""
    if error.code == UserErrorCode.FORBIDDEN:
        raise forbidden(error.message)
    if error.code == UserErrorCode.CONFLICT:
        raise conflict(error.message)
    if error.code == UserErrorCode.NOT_FOUND:
        raise _not_found(error.message)
    if error.code == UserErrorCode.SERVICE_UNAVAILABLE:
        raise service_unavailable(error.resource or "users")
    raise validation_error(error.message)

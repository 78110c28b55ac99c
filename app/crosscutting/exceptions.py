# app/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message legible (sin filtrar secretos)

Los resultados de negocio (permiso denegado, transición inválida, no
encontrado) NO son excepciones: viajan como DocumentError/UserError en los
Result de cada use case. Acá viven solo las fallas de infraestructura.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  LisaDocsError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - infrastructure/repositories/postgres/* (DatabaseError)
  - app/activity.py (ActivityLogError)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class LisaDocsError(Exception):
    """
    Base para errores internos del sistema.

    Provee error_code (estable) + error_id (correlación) + message.
    """

    error_code: str = "LISADOCS_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class DatabaseError(LisaDocsError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class StorageFailureError(LisaDocsError):
    """Falla del object storage que no pudo resolverse en el use case."""

    error_code: str = "STORAGE_FAILURE"


class ActivityLogError(LisaDocsError):
    """Falla al registrar actividad (nunca se propaga a la operación)."""

    error_code: str = "ACTIVITY_LOG_FAILURE"

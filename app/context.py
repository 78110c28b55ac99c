"""
===============================================================================
TARJETA CRC — app/context.py (Contexto por request / job)
===============================================================================

Responsabilidades:
  - Mantener contexto "request-scoped" usando ContextVars (async-safe).
  - Permitir correlación de logs/métricas sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), clear_context().

Colaboradores:
  - app.crosscutting.middleware: setea request_id/method/path al inicio del request.
  - app.identity.auth_users: setea user_id/workspace al resolver el Principal.
  - app.crosscutting.logger: enriquece logs leyendo get_context_dict().
  - app.worker.jobs: setea request_id por job y limpia contexto al finalizar.

Patrones aplicados:
  - Ambient Context (controlado y explícito) SOLO para observabilidad:
    las decisiones de acceso reciben el Principal como parámetro.

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

# =============================================================================
# ContextVars
# =============================================================================

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Metadatos HTTP básicos para logs (método y path).
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

# Identidad autenticada (solo para correlación).
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
workspace_var: ContextVar[str] = ContextVar("workspace", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"
_CTX_USER_ID: Final[str] = "user_id"
_CTX_WORKSPACE: Final[str] = "workspace"


# =============================================================================
# API pública
# =============================================================================


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    """
    Setea el contexto mínimo del request.

    Regla:
      - Strings vacíos significan "no disponible".
    """
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def set_user_context(*, user_id: str = "", workspace: str = "") -> None:
    user_id_var.set(user_id or "")
    workspace_var.set(workspace or "")


def get_context_dict() -> dict[str, str]:
    """Devuelve el contexto actual como dict, omitiendo claves vacías."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := http_method_var.get():
        ctx[_CTX_METHOD] = val
    if val := http_path_var.get():
        ctx[_CTX_PATH] = val
    if val := user_id_var.get():
        ctx[_CTX_USER_ID] = val
    if val := workspace_var.get():
        ctx[_CTX_WORKSPACE] = val

    return ctx


def clear_context() -> None:
    """
    Limpia el contexto al final del request/job.

    Importante:
      - Evita "filtración de contexto" entre requests cuando hay workers async.
    """
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
    user_id_var.set("")
    workspace_var.set("")

# app/crosscutting/security.py
"""
===============================================================================
MÓDULO: Security headers (OWASP hardening)
===============================================================================

Objetivo
--------
Agregar headers de seguridad a todas las respuestas:
- CSP (estricta en producción, relajada en dev para /docs)
- HSTS (solo producción + HTTPS)
- Anti-clickjacking y anti-sniffing
- Cache-Control no-store en la API: metadata y URLs presignadas de
  documentos no deben quedar en caches intermedios.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  SecurityHeadersMiddleware

Colaboradores:
  - crosscutting.config.get_settings
===============================================================================
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_NO_STORE_PREFIXES: tuple[str, ...] = ("/v1/", "/auth/")

_STATIC_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": (
        "accelerometer=(), camera=(), geolocation=(), gyroscope=(), "
        "magnetometer=(), microphone=(), payment=(), usb=()"
    ),
}


def _build_csp(is_production: bool) -> str:
    # Swagger UI necesita inline en dev.
    inline = "" if is_production else " 'unsafe-inline'"
    return (
        "default-src 'self'; "
        f"script-src 'self'{inline}; "
        f"style-src 'self'{inline}; "
        "img-src 'self' data:; "
        "font-src 'self'; "
        "connect-src 'self'"
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Agrega headers OWASP; HSTS solo si producción y request por HTTPS."""

    def __init__(self, app, *, is_production: bool | None = None):
        super().__init__(app)
        if is_production is None:
            from .config import get_settings

            is_production = get_settings().is_production()
        self._is_production = is_production
        self._csp = _build_csp(is_production)

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        for name, value in _STATIC_HEADERS.items():
            response.headers[name] = value
        response.headers["Content-Security-Policy"] = self._csp

        if request.url.path.startswith(_NO_STORE_PREFIXES):
            response.headers.setdefault("Cache-Control", "no-store")

        if self._is_production:
            proto = (
                request.headers.get("x-forwarded-proto") or request.url.scheme or ""
            ).lower()
            if proto == "https":
                response.headers["Strict-Transport-Security"] = (
                    "max-age=31536000; includeSubDomains"
                )

        return response

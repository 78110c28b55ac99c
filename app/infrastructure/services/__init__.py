"""
Infrastructure Services (Infrastructure Layer)

Qué es este módulo
------------------
Facade/Barrel del paquete `infrastructure.services`: expone una API pública
estable para que la composición (container) importe desde un único lugar.

Contenido
---------
- Retry / Resilience: decorator `tenacity` con exponential backoff + jitter,
  aplicado por el adapter de storage.

CRC (Component Card)
--------------------
Component: infrastructure.services (Facade)
Responsibilities:
  - Publicar los exports canónicos del paquete
Collaborators:
  - container (inyecta el decorator en S3FileStorageAdapter)
  - infrastructure.storage (consume el decorator)
Constraints:
  - No contener lógica (solo re-export y documentación)
"""

from .retry import (  # noqa: F401
    PERMANENT_HTTP_CODES,
    TRANSIENT_HTTP_CODES,
    create_retry_decorator,
    is_transient_error,
)

__all__ = [
    "is_transient_error",
    "create_retry_decorator",
    "TRANSIENT_HTTP_CODES",
    "PERMANENT_HTTP_CODES",
]

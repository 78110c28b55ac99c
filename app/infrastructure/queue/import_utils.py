"""
===============================================================================
SUBSISTEMA: Infraestructura / Queue
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Validación de dotted paths

Responsabilidades:
    - Verificar que los jobs/callbacks referenciados por string existan y sean
      callables, para detectar paths rotos al construir la cola y no recién
      en el worker.

Colaboradores:
    - rq_queue.RQActivityRecorder
    - importlib (carga dinámica)
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache
from importlib import import_module

from .errors import QueueConfigurationError


@lru_cache(maxsize=64)
def is_importable_dotted_path(dotted_path: str) -> bool:
    """True si "modulo.attr" importa y es callable (no valida la firma)."""
    module_name, _, attr_name = (dotted_path or "").rpartition(".")
    if not module_name or not attr_name:
        return False
    try:
        module = import_module(module_name)
    except ModuleNotFoundError:
        return False
    return callable(getattr(module, attr_name, None))


def ensure_importable(*dotted_paths: str) -> None:
    """Lanza QueueConfigurationError listando todos los paths inválidos."""
    broken = [p for p in dotted_paths if not is_importable_dotted_path(p)]
    if broken:
        raise QueueConfigurationError(
            "Job paths no importables para RQ: " + ", ".join(broken)
        )

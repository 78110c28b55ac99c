"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los puntos de entrada estables de la capa de aplicación:
  - ensure_dev_admin: seed de administrador para desarrollo/E2E

Nota:
  - Los casos de uso se importan desde `usecases/` subdirectories.
===============================================================================
"""

from .dev_seed_admin import ensure_dev_admin

__all__ = ["ensure_dev_admin"]

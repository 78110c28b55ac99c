"""
===============================================================================
SUBSISTEMA: Infraestructura / Queue
===============================================================================

CRC CARD (Package)
-------------------------------------------------------------------------------
Nombre:
    infrastructure.queue

Responsabilidades:
    - Exponer el adaptador de cola utilizado por DI (RQActivityRecorder).
    - Exponer el contrato de configuración (RQQueueConfig).

Colaboradores:
    - rq_queue.RQActivityRecorder
    - rq_queue.RQQueueConfig
===============================================================================
"""

from .errors import QueueConfigurationError, QueueEnqueueError, QueueError
from .rq_queue import RQActivityRecorder, RQQueueConfig

__all__ = [
    "QueueConfigurationError",
    "QueueEnqueueError",
    "QueueError",
    "RQActivityRecorder",
    "RQQueueConfig",
]

"""
===============================================================================
TARJETA CRC — worker/worker.py (Entrypoint del proceso Worker)
===============================================================================

Responsabilidades:
  - Levantar un proceso RQ Worker consumiendo la cola de actividad.
  - Inicializar dependencias del proceso: Redis + pool de BD.
  - Apagar recursos de forma segura y consistente.

Patrones aplicados:
  - Process Bootstrap: inicializa recursos del proceso antes de trabajar.
  - Fail-fast: si Redis/BD no están disponibles al inicio, no arrancar “a medias”.

Colaboradores:
  - crosscutting.config.get_settings
  - infrastructure.db.pool.init_pool / close_pool
  - redis.Redis + rq.Worker
===============================================================================
"""

from __future__ import annotations

from redis import Redis
from rq import Queue, Worker

from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..infrastructure.db.pool import close_pool, init_pool


def build_redis_connection(redis_url: str) -> Redis:
    """
    Crea conexión Redis con timeouts acotados.

    Compartida por el worker y por el productor (container).
    """
    return Redis.from_url(
        redis_url,
        socket_connect_timeout=2,
        socket_timeout=5,
        health_check_interval=30,
    )


def main() -> None:
    settings = get_settings()

    redis_url = (settings.redis_url or "").strip()
    if not redis_url:
        raise SystemExit("REDIS_URL es requerido para ejecutar el worker.")

    queue_name = settings.activity_queue_name

    # R: Redis (fail-fast si no responde).
    redis_conn = build_redis_connection(redis_url)
    try:
        redis_conn.ping()
    except Exception as exc:
        logger.error("Redis no disponible para worker", extra={"error": str(exc)})
        raise SystemExit("Redis no disponible.") from exc

    # R: Pool DB (fail-fast si no inicializa).
    init_pool(
        database_url=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )

    try:
        logger.info(
            "Worker arrancando",
            extra={
                "queue": queue_name,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        queue = Queue(name=queue_name, connection=redis_conn)
        worker = Worker([queue], connection=redis_conn)

        # R: Loop principal del worker.
        worker.work(with_scheduler=False)

    except KeyboardInterrupt:
        logger.info("Worker detenido por señal (KeyboardInterrupt)")
    finally:
        close_pool()
        logger.info("Worker apagado")


if __name__ == "__main__":
    main()

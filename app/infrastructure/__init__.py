"""
============================================================
TARJETA CRC — app/infrastructure/__init__.py
============================================================
Module: infrastructure (Adapters)

Responsibilities:
  - Agrupar los adapters concretos de LisaDocs:
      db/            pool psycopg + instrumentación
      repositories/  Postgres e InMemory (documentos, usuarios, actividad)
      storage/       S3/MinIO e InMemory
      queue/         encolado RQ del log de actividad
      services/      retry (tenacity)

Policy:
  - Sin side effects al importar: cada subpaquete se importa explícitamente
    (evita cargar boto3/psycopg cuando no se usan).
============================================================
"""

"""
Name: Integration Test DB Setup

Responsibilities:
  - Ensure database schema exists before integration tests run
  - Run Alembic migrations once per test session
  - Initialize the shared connection pool for Postgres repositories

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from app.crosscutting.config import get_settings
from app.infrastructure.db.pool import close_pool, init_pool

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT = os.getenv("POSTGRES_HOST_PORT", "5432")
DB_NAME = os.getenv("POSTGRES_DB", "lisadocs")
DEFAULT_DATABASE_URL = (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)


if os.getenv("RUN_INTEGRATION") == "1":
    os.environ["APP_ENV"] = "integration"
    if not os.getenv("DATABASE_URL") or os.environ["DATABASE_URL"].endswith(
        "/lisadocs_test"
    ):
        os.environ["DATABASE_URL"] = DEFAULT_DATABASE_URL
    get_settings.cache_clear()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations() -> None:
    """Run Alembic migrations for integration tests."""
    if os.getenv("RUN_INTEGRATION") != "1":
        return

    root_dir = Path(__file__).resolve().parents[2]
    config = Config(str(root_dir / "alembic.ini"))
    config.set_main_option("script_location", str(root_dir / "alembic"))

    command.upgrade(config, "head")


@pytest.fixture(scope="session", autouse=True)
def init_db_pool(apply_migrations):
    if os.getenv("RUN_INTEGRATION") != "1":
        yield
        return

    settings = get_settings()
    init_pool(
        database_url=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    yield
    close_pool()

"""
PostgreSQL Repository Implementations.

Production implementations over psycopg 3 (raw parameterized SQL).
"""

from .activity import PostgresActivityRepository
from .document import PostgresDocumentRepository
from .user import PostgresUserRepository

__all__ = [
    "PostgresActivityRepository",
    "PostgresDocumentRepository",
    "PostgresUserRepository",
]

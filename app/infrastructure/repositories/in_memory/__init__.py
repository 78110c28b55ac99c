"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .activity import InMemoryActivityRepository
from .document import InMemoryDocumentRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryActivityRepository",
    "InMemoryDocumentRepository",
    "InMemoryUserRepository",
]

"""
Job Store Persistence module.

This module contains the storage adapters for job definitions.
Currently supports SQLite and an in-memory store, but can be extended to
PostgreSQL, MySQL, etc.

The persistence layer depends on jobstore_common for domain models and
interfaces, and can be used by both jobstore_server and jobstore_admin.
"""

from .memory_repository import InMemoryJobRepository
from .sqlite_repository import SQLiteJobRepository

__all__ = ["InMemoryJobRepository", "SQLiteJobRepository"]

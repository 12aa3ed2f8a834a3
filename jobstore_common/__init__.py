"""
Job Store Common module.

This module contains the shared domain model, error type and repository
interface used across the job store components (server, admin, persistence).

The common module has no dependencies on other jobstore_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .errors import DataAccessException
from .models import JobData
from .repository import JobRepository

__all__ = ["DataAccessException", "JobData", "JobRepository"]

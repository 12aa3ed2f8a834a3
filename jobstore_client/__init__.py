"""
Job Store Client module.

Python client for the job store HTTP API.
"""

from .client import JobStoreClient

__all__ = ["JobStoreClient"]

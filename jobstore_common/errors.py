"""
Error types for the job store.

Absence of a record is never an error; lookups return None instead.
DataAccessException is the single failure kind for the storage layer.
"""

from typing import Any


class DataAccessException(Exception):
    """
    Raised when a storage operation fails.

    Covers constraint violations (duplicate uuid), records that vanished
    before an update, and connectivity or transactional failures of the
    underlying store. The original error, when there is one, is chained
    as __cause__.
    """

    def __init__(
        self,
        message: str,
        uuid: str | None = None,
        job_id: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.uuid = uuid
        self.job_id = job_id

    def __str__(self) -> str:
        details = []
        if self.job_id is not None:
            details.append(f"id={self.job_id}")
        if self.uuid is not None:
            details.append(f"uuid={self.uuid}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"

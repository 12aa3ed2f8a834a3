"""
Abstract repository interface for job definition persistence.

This module defines the contract that any storage implementation must follow,
allowing easy swapping between SQLite, in-memory, PostgreSQL, etc.
"""

from abc import ABC, abstractmethod

from .models import JobData, JobId


class JobRepository(ABC):
    """
    Abstract base class for job definition storage operations.

    Jobs are addressed either by their internal id (assigned by the store)
    or by their uuid (unique across all stored jobs). Lookups return None
    when nothing matches; mutating operations raise DataAccessException
    on failure.

    Implementations must provide async-safe access to job data, enforce
    uuid uniqueness atomically with respect to concurrent saves, and handle
    their own connection management.
    """

    @abstractmethod
    async def get(self, job_id: JobId) -> JobData | None:
        """
        Retrieve a job by its internal id.

        Args:
            job_id: Internal id of the job

        Returns:
            JobData if found, None otherwise

        Raises:
            ValueError: If job_id is None
        """
        pass

    @abstractmethod
    async def find_by_uuid(self, uuid: str) -> JobData | None:
        """
        Retrieve a job by its uuid.

        Args:
            uuid: External unique identifier of the job

        Returns:
            JobData if found, None otherwise

        Raises:
            ValueError: If uuid is None
        """
        pass

    @abstractmethod
    async def exists_by_uuid(self, uuid: str) -> bool:
        """
        Check whether a job with the given uuid is stored.

        Equivalent to `await find_by_uuid(uuid) is not None` without
        loading the record.

        Raises:
            ValueError: If uuid is None
        """
        pass

    @abstractmethod
    async def save(self, data: JobData) -> JobData:
        """
        Insert a new job or overwrite an existing one.

        A job without an id is inserted and gets a fresh id (and a uuid if
        it has none). A job with an id replaces the attributes of the stored
        record with that id; its uuid cannot change. The caller's instance is
        left untouched.

        Args:
            data: Job attributes

        Returns:
            The job as stored, with id, uuid and timestamps populated

        Raises:
            DataAccessException: If the uuid is already used by another job,
                an update carries a different uuid than the stored one, the
                job being updated no longer exists, or the store fails
        """
        pass

    @abstractmethod
    async def delete(self, job_id: JobId) -> None:
        """
        Remove a job.

        Deleting an id that is not stored is a no-op.

        Args:
            job_id: Internal id of the job

        Raises:
            ValueError: If job_id is None
            DataAccessException: If the store fails
        """
        pass

    @abstractmethod
    async def list_jobs(self, project: str | None = None) -> list[JobData]:
        """
        List stored jobs ordered by project, group path and name.

        Args:
            project: Only return jobs of this project when given

        Returns:
            List of JobData objects
        """
        pass

    @abstractmethod
    async def count_jobs(self) -> int:
        """Return the number of stored jobs."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the store (create tables, etc.).

        Called once at application startup; safe to call again.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close connections and cleanup resources.

        Called at application shutdown.
        """
        pass


def require_id(job_id: JobId | None) -> JobId:
    """Reject a missing job id before it reaches the store."""
    if job_id is None:
        raise ValueError("job_id must not be None")
    return job_id


def require_uuid(uuid: str | None) -> str:
    """Reject a missing uuid before it reaches the store."""
    if uuid is None:
        raise ValueError("uuid must not be None")
    return uuid

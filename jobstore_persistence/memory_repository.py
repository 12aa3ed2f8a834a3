"""
In-memory implementation of the job repository.

Keeps job definitions in process memory. Useful for tests and for embedding
the job store where durability is not required.
"""

import asyncio
import copy
import logging
import uuid as uuid_lib
from dataclasses import replace

from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData, JobId, utcnow
from jobstore_common.repository import JobRepository, require_id, require_uuid

logger = logging.getLogger(__name__)


class InMemoryJobRepository(JobRepository):
    """
    Dictionary-backed job definition storage.

    Records are stored and returned as deep copies, so callers never share
    state with the store. A lock serializes writes, making the uuid
    check-then-insert atomic.
    """

    def __init__(self) -> None:
        self._jobs: dict[JobId, JobData] = {}
        self._ids_by_uuid: dict[str, JobId] = {}
        self._next_id = 1
        self._write_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Nothing to prepare for an in-memory store."""
        pass

    async def close(self) -> None:
        """Nothing to release; stored jobs are kept until the object is dropped."""
        pass

    async def get(self, job_id: JobId) -> JobData | None:
        require_id(job_id)
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job is not None else None

    async def find_by_uuid(self, uuid: str) -> JobData | None:
        require_uuid(uuid)
        job_id = self._ids_by_uuid.get(uuid)
        if job_id is None:
            return None
        return await self.get(job_id)

    async def exists_by_uuid(self, uuid: str) -> bool:
        require_uuid(uuid)
        return uuid in self._ids_by_uuid

    async def save(self, data: JobData) -> JobData:
        """
        Insert a new job or overwrite the stored job with the same id.

        Raises:
            DataAccessException: On duplicate uuid or missing job on update
        """
        async with self._write_lock:
            now = utcnow()

            if data.is_new:
                job_uuid = data.uuid or str(uuid_lib.uuid4())
                if job_uuid in self._ids_by_uuid:
                    logger.error(f"Cannot save job {data.job_name}: uuid {job_uuid} already in use")
                    raise DataAccessException(
                        "A job with this uuid already exists", uuid=job_uuid
                    )
                job_id = self._next_id
                self._next_id += 1
                stored = replace(
                    copy.deepcopy(data),
                    id=job_id,
                    uuid=job_uuid,
                    date_created=now,
                    last_updated=now,
                )
            else:
                job_id = data.id
                existing = self._jobs.get(job_id)
                if existing is None:
                    logger.error(f"Cannot update job {job_id}: not found")
                    raise DataAccessException(
                        "Job to update no longer exists", uuid=data.uuid, job_id=job_id
                    )
                if data.uuid is not None and data.uuid != existing.uuid:
                    logger.error(
                        f"Cannot update job {job_id}: uuid is {existing.uuid}, got {data.uuid}"
                    )
                    raise DataAccessException(
                        "The uuid of a stored job cannot be changed",
                        uuid=data.uuid,
                        job_id=job_id,
                    )
                job_uuid = existing.uuid
                stored = replace(
                    copy.deepcopy(data),
                    uuid=job_uuid,
                    date_created=existing.date_created,
                    last_updated=now,
                )

            self._jobs[job_id] = stored
            self._ids_by_uuid[job_uuid] = job_id

        logger.info(f"Saved job {job_id} ({job_uuid}) {stored.full_name}")
        return copy.deepcopy(stored)

    async def delete(self, job_id: JobId) -> None:
        """Remove a job by its internal id. Absent ids are ignored."""
        require_id(job_id)
        async with self._write_lock:
            job = self._jobs.pop(job_id, None)
            if job is not None:
                self._ids_by_uuid.pop(job.uuid, None)

        if job is not None:
            logger.info(f"Deleted job {job_id}")
        else:
            logger.debug(f"Delete of job {job_id} ignored: not found")

    async def list_jobs(self, project: str | None = None) -> list[JobData]:
        jobs = [
            job
            for job in self._jobs.values()
            if project is None or job.project == project
        ]
        jobs.sort(key=lambda j: (j.project, j.group_path or "", j.job_name, j.id))
        return [copy.deepcopy(job) for job in jobs]

    async def count_jobs(self) -> int:
        return len(self._jobs)

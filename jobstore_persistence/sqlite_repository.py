"""
SQLite implementation of the job repository.

Uses aiosqlite for async operations. Writes are serialized through a lock
and run inside a single transaction; uuid uniqueness is enforced by a
UNIQUE constraint. Can be easily replaced with PostgreSQL/MySQL
implementations.
"""

import asyncio
import json
import logging
import sqlite3
import uuid as uuid_lib
from datetime import datetime
from typing import Any

import aiosqlite

from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData, JobId, utcnow
from jobstore_common.repository import JobRepository, require_id, require_uuid

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, uuid, job_name, project, group_path, description, user, log_level, "
    "timeout, retry, schedule_enabled, execution_enabled, multiple_executions, "
    "server_node_uuid, options, workflow, date_created, last_updated"
)


def _row_to_job(row: Any) -> JobData:
    """Build a JobData from a row selected with _COLUMNS."""
    (
        job_id,
        job_uuid,
        job_name,
        project,
        group_path,
        description,
        user,
        log_level,
        timeout,
        retry,
        schedule_enabled,
        execution_enabled,
        multiple_executions,
        server_node_uuid,
        options_json,
        workflow_json,
        date_created_str,
        last_updated_str,
    ) = row
    return JobData(
        id=job_id,
        uuid=job_uuid,
        job_name=job_name,
        project=project,
        group_path=group_path,
        description=description,
        user=user,
        log_level=log_level,
        timeout=timeout,
        retry=retry,
        schedule_enabled=bool(schedule_enabled),
        execution_enabled=bool(execution_enabled),
        multiple_executions=bool(multiple_executions),
        server_node_uuid=server_node_uuid,
        options=json.loads(options_json) if options_json else {},
        workflow=json.loads(workflow_json) if workflow_json else {},
        date_created=datetime.fromisoformat(date_created_str)
        if date_created_str
        else None,
        last_updated=datetime.fromisoformat(last_updated_str)
        if last_updated_str
        else None,
    )


def _attribute_params(data: JobData) -> tuple[Any, ...]:
    """Domain attribute values in the column order used by INSERT and UPDATE."""
    return (
        data.job_name,
        data.project,
        data.group_path,
        data.description,
        data.user,
        data.log_level,
        data.timeout,
        data.retry,
        1 if data.schedule_enabled else 0,
        1 if data.execution_enabled else 0,
        1 if data.multiple_executions else 0,
        data.server_node_uuid,
        json.dumps(data.options),
        json.dumps(data.workflow),
    )


class SQLiteJobRepository(JobRepository):
    """
    SQLite-based job definition storage.

    Uses a single database file with one table:
    - jobs: Job definitions, integer primary key and unique uuid
    """

    def __init__(self, db_path: str = "jobstore.db"):
        """
        Initialize the SQLite repository.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._connect_lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        async with self._connect_lock:
            if self._connection is None:
                try:
                    self._connection = await aiosqlite.connect(self.db_path)
                except (sqlite3.Error, OSError) as e:
                    logger.error(f"Cannot open job database {self.db_path}: {e}")
                    raise DataAccessException(
                        f"Cannot open job database {self.db_path}"
                    ) from e
        return self._connection

    async def initialize(self) -> None:
        """
        Create database tables if they don't exist.

        Schema:
        - jobs table: Job definitions with a unique index on uuid and an
          index on project for listings
        """
        conn = await self._get_connection()

        try:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS jobs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    uuid TEXT UNIQUE NOT NULL,
                    job_name TEXT NOT NULL,
                    project TEXT NOT NULL,
                    group_path TEXT,
                    description TEXT,
                    user TEXT,
                    log_level TEXT NOT NULL DEFAULT 'INFO',
                    timeout TEXT,
                    retry INTEGER,
                    schedule_enabled INTEGER NOT NULL DEFAULT 1,
                    execution_enabled INTEGER NOT NULL DEFAULT 1,
                    multiple_executions INTEGER NOT NULL DEFAULT 0,
                    server_node_uuid TEXT,
                    options TEXT,
                    workflow TEXT,
                    date_created TEXT NOT NULL,
                    last_updated TEXT NOT NULL
                )
            """)

            # Create index on project for faster listings
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_project
                ON jobs(project)
            """)

            await conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize job database: {e}")
            raise DataAccessException("Failed to initialize job database") from e

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> Any:
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, params)
            return await cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Job query failed: {e}")
            raise DataAccessException("Job query failed") from e

    async def get(self, job_id: JobId) -> JobData | None:
        """
        Retrieve a job by its internal id.

        Args:
            job_id: Integer id of the job

        Returns:
            JobData if found, None otherwise
        """
        require_id(job_id)
        row = await self._fetch_one(
            f"SELECT {_COLUMNS} FROM jobs WHERE id = ?", (job_id,)
        )
        return _row_to_job(row) if row is not None else None

    async def find_by_uuid(self, uuid: str) -> JobData | None:
        """
        Retrieve a job by its uuid (served by the unique index).

        Args:
            uuid: External identifier of the job

        Returns:
            JobData if found, None otherwise
        """
        require_uuid(uuid)
        row = await self._fetch_one(
            f"SELECT {_COLUMNS} FROM jobs WHERE uuid = ?", (uuid,)
        )
        return _row_to_job(row) if row is not None else None

    async def exists_by_uuid(self, uuid: str) -> bool:
        """Check for a job with the given uuid without loading it."""
        require_uuid(uuid)
        row = await self._fetch_one(
            "SELECT 1 FROM jobs WHERE uuid = ? LIMIT 1", (uuid,)
        )
        return row is not None

    async def save(self, data: JobData) -> JobData:
        """
        Insert a new job or overwrite the stored job with the same id.

        Args:
            data: Job attributes

        Returns:
            The job as stored

        Raises:
            DataAccessException: On duplicate uuid, missing job on update,
                or database failure
        """
        conn = await self._get_connection()

        async with self._write_lock:
            now = utcnow()
            try:
                if data.is_new:
                    job_uuid = data.uuid or str(uuid_lib.uuid4())
                    cursor = await conn.execute(
                        """
                        INSERT INTO jobs (uuid, job_name, project, group_path, description, user,
                                          log_level, timeout, retry, schedule_enabled,
                                          execution_enabled, multiple_executions,
                                          server_node_uuid, options, workflow,
                                          date_created, last_updated)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (job_uuid, *_attribute_params(data), now.isoformat(), now.isoformat()),
                    )
                    job_id = cursor.lastrowid
                else:
                    job_uuid = data.uuid
                    job_id = data.id
                    cursor = await conn.execute(
                        "SELECT uuid FROM jobs WHERE id = ?", (job_id,)
                    )
                    current = await cursor.fetchone()
                    if current is None:
                        logger.error(f"Cannot update job {job_id}: not found")
                        raise DataAccessException(
                            "Job to update no longer exists",
                            uuid=job_uuid,
                            job_id=job_id,
                        )
                    if job_uuid is not None and job_uuid != current[0]:
                        logger.error(
                            f"Cannot update job {job_id}: uuid is {current[0]}, got {job_uuid}"
                        )
                        raise DataAccessException(
                            "The uuid of a stored job cannot be changed",
                            uuid=job_uuid,
                            job_id=job_id,
                        )

                    # uuid is immutable, only the attributes are rewritten
                    await conn.execute(
                        """
                        UPDATE jobs
                        SET job_name = ?, project = ?, group_path = ?,
                            description = ?, user = ?, log_level = ?, timeout = ?, retry = ?,
                            schedule_enabled = ?, execution_enabled = ?,
                            multiple_executions = ?, server_node_uuid = ?, options = ?,
                            workflow = ?, last_updated = ?
                        WHERE id = ?
                        """,
                        (*_attribute_params(data), now.isoformat(), job_id),
                    )

                cursor = await conn.execute(
                    f"SELECT {_COLUMNS} FROM jobs WHERE id = ?", (job_id,)
                )
                row = await cursor.fetchone()
                await conn.commit()
            except sqlite3.IntegrityError as e:
                await conn.rollback()
                if "jobs.uuid" not in str(e):
                    logger.error(f"Cannot save job {data.job_name}: {e}")
                    raise DataAccessException(
                        f"Job violates a store constraint: {e}",
                        uuid=job_uuid,
                        job_id=data.id,
                    ) from e
                logger.error(f"Cannot save job {data.job_name}: uuid {job_uuid} already in use")
                raise DataAccessException(
                    "A job with this uuid already exists",
                    uuid=job_uuid,
                    job_id=data.id,
                ) from e
            except sqlite3.Error as e:
                await conn.rollback()
                logger.error(f"Failed to save job {data.job_name}: {e}")
                raise DataAccessException(
                    "Failed to save job", uuid=data.uuid, job_id=data.id
                ) from e

        saved = _row_to_job(row)
        logger.info(f"Saved job {saved.id} ({saved.uuid}) {saved.full_name}")
        return saved

    async def delete(self, job_id: JobId) -> None:
        """
        Remove a job by its internal id. Absent ids are ignored.

        Args:
            job_id: Integer id of the job

        Raises:
            DataAccessException: If the deletion cannot be committed
        """
        require_id(job_id)
        conn = await self._get_connection()

        async with self._write_lock:
            try:
                cursor = await conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
                deleted = cursor.rowcount
                await conn.commit()
            except sqlite3.Error as e:
                await conn.rollback()
                logger.error(f"Failed to delete job {job_id}: {e}")
                raise DataAccessException("Failed to delete job", job_id=job_id) from e

        if deleted:
            logger.info(f"Deleted job {job_id}")
        else:
            logger.debug(f"Delete of job {job_id} ignored: not found")

    async def list_jobs(self, project: str | None = None) -> list[JobData]:
        """
        List stored jobs ordered by project, group path and name.

        Args:
            project: Only return jobs of this project when given

        Returns:
            List of JobData objects
        """
        conn = await self._get_connection()

        sql = f"SELECT {_COLUMNS} FROM jobs"
        params: tuple[Any, ...] = ()
        if project is not None:
            sql += " WHERE project = ?"
            params = (project,)
        sql += " ORDER BY project, COALESCE(group_path, ''), job_name, id"

        try:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list jobs: {e}")
            raise DataAccessException("Failed to list jobs") from e

        return [_row_to_job(row) for row in rows]

    async def count_jobs(self) -> int:
        """Return the number of stored jobs."""
        row = await self._fetch_one("SELECT COUNT(*) FROM jobs", ())
        return row[0] if row else 0

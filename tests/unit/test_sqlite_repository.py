"""
Unit tests specific to the SQLite job repository.

Covers durability across connections and failures of the database itself.
"""

import os
import tempfile

import pytest

from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData
from jobstore_persistence.sqlite_repository import SQLiteJobRepository


@pytest.fixture
def db_path():
    """Create a temporary database file path."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield path

    if os.path.exists(path):
        os.unlink(path)


@pytest.mark.asyncio
async def test_jobs_survive_reopen(db_path):
    """Test that saved jobs are visible through a new repository instance."""
    repo = SQLiteJobRepository(db_path)
    await repo.initialize()
    saved = await repo.save(JobData(job_name="report", project="finance", uuid="durable"))
    await repo.close()

    reopened = SQLiteJobRepository(db_path)
    await reopened.initialize()
    try:
        assert await reopened.get(saved.id) == saved
        assert await reopened.exists_by_uuid("durable") is True
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_close_is_idempotent(db_path):
    """Test that closing twice is harmless and the repository can reconnect."""
    repo = SQLiteJobRepository(db_path)
    await repo.initialize()
    await repo.close()
    await repo.close()

    assert await repo.count_jobs() == 0
    await repo.close()


@pytest.mark.asyncio
async def test_unreachable_database_raises():
    """Test that a database that cannot be opened surfaces DataAccessException."""
    repo = SQLiteJobRepository("/nonexistent-dir/for/sure/jobs.db")

    with pytest.raises(DataAccessException) as exc_info:
        await repo.save(JobData(job_name="x", project="y"))

    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_missing_schema_raises_on_save(db_path):
    """Test that store failures on save are wrapped with their cause."""
    repo = SQLiteJobRepository(db_path)
    try:
        with pytest.raises(DataAccessException) as exc_info:
            await repo.save(JobData(job_name="x", project="y", uuid="no-table"))

        assert "no such table" in str(exc_info.value.__cause__)
        assert exc_info.value.uuid == "no-table"
    finally:
        await repo.close()


@pytest.mark.asyncio
async def test_missing_schema_raises_on_delete(db_path):
    """Test that store failures on delete are wrapped with the job id."""
    repo = SQLiteJobRepository(db_path)
    try:
        with pytest.raises(DataAccessException) as exc_info:
            await repo.delete(7)

        assert exc_info.value.job_id == 7
    finally:
        await repo.close()


@pytest.mark.asyncio
async def test_not_null_violation_is_not_reported_as_duplicate(db_path):
    """Test that other constraint failures are not mistaken for uuid clashes."""
    repo = SQLiteJobRepository(db_path)
    await repo.initialize()
    try:
        with pytest.raises(DataAccessException) as exc_info:
            await repo.save(JobData(job_name=None, project="ops"))

        assert "already exists" not in str(exc_info.value)
        assert await repo.count_jobs() == 0
    finally:
        await repo.close()

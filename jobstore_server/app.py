import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Response

from jobstore_common.errors import DataAccessException
from jobstore_common.repository import JobRepository
from jobstore_persistence.sqlite_repository import SQLiteJobRepository

from .schemas import JobDefinitionRequest

logger = logging.getLogger(__name__)

# Global instance (initialized at startup)
repository: JobRepository | None = None


def get_database_path() -> str:
    """
    Get the database path from environment or use default.

    Returns:
        Path to the SQLite database file

    Environment variables:
    - JOBSTORE_DB_PATH: Custom database path (useful for testing)
    """
    return os.environ.get("JOBSTORE_DB_PATH", "jobstore.db")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI app.

    Handles startup and shutdown events:
    - Startup: Connect to database and create the schema if needed
    - Shutdown: Close database connections
    """
    global repository

    db_path = get_database_path()
    repository = SQLiteJobRepository(db_path)
    await repository.initialize()
    logger.info(f"Job store using database {db_path}")

    yield

    # Shutdown: Close repository connections
    if repository:
        await repository.close()
        repository = None


app = FastAPI(lifespan=lifespan)


def get_repository() -> JobRepository:
    """
    Get the global repository instance.

    Returns:
        The initialized JobRepository

    Raises:
        RuntimeError: If repository is not initialized
    """
    if repository is None:
        raise RuntimeError("Repository not initialized")
    return repository


@app.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dictionary with status="ok" if server is running
    """
    return {"status": "ok"}


@app.get("/jobs")
async def list_jobs(
    project: str | None = None,
    repo: JobRepository = Depends(get_repository),
) -> list[dict[str, Any]]:
    """
    List job definitions, optionally restricted to one project.

    Returns:
        List of job summary dictionaries
    """
    jobs = await repo.list_jobs(project=project)
    return [job.to_summary_dict() for job in jobs]


@app.post("/jobs", status_code=201)
async def create_job(
    body: JobDefinitionRequest,
    repo: JobRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Store a new job definition.

    Returns:
        The stored job, including its assigned id and uuid

    Raises:
        HTTPException: 409 if the uuid is taken or the store rejects the job
    """
    try:
        saved = await repo.save(body.to_job())
    except DataAccessException as e:
        raise HTTPException(status_code=409, detail=str(e))
    return saved.to_dict()


@app.get("/jobs/uuid/{uuid:path}")
async def get_job_by_uuid(
    uuid: str,
    repo: JobRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Get a job definition by its uuid.

    Raises:
        HTTPException: 404 if no job has this uuid
    """
    job = await repo.find_by_uuid(uuid)

    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return job.to_dict()


@app.head("/jobs/uuid/{uuid:path}")
async def job_exists(
    uuid: str,
    repo: JobRepository = Depends(get_repository),
) -> Response:
    """Answer 200 if a job with this uuid exists, 404 otherwise (no body)."""
    exists = await repo.exists_by_uuid(uuid)
    return Response(status_code=200 if exists else 404)


@app.get("/jobs/{job_id}")
async def get_job(
    job_id: int,
    repo: JobRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Get a job definition by its internal id.

    Raises:
        HTTPException: 404 if job_id not found
    """
    job = await repo.get(job_id)

    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return job.to_dict()


@app.put("/jobs/{job_id}")
async def update_job(
    job_id: int,
    body: JobDefinitionRequest,
    repo: JobRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Replace a stored job definition.

    Raises:
        HTTPException: 404 if job_id not found
        HTTPException: 409 if the uuid differs from the stored one or the
            store rejects the job
    """
    try:
        saved = await repo.save(body.to_job(job_id))
    except DataAccessException as e:
        # save reports a vanished job the same way as other failures
        if await repo.get(job_id) is None:
            raise HTTPException(status_code=404, detail="Job not found")
        raise HTTPException(status_code=409, detail=str(e))
    return saved.to_dict()


@app.delete("/jobs/{job_id}", status_code=204)
async def delete_job(
    job_id: int,
    repo: JobRepository = Depends(get_repository),
) -> Response:
    """
    Delete a job definition. Deleting an unknown id succeeds.

    Raises:
        HTTPException: 500 if the store cannot complete the deletion
    """
    try:
        await repo.delete(job_id)
    except DataAccessException as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)

"""
Request bodies accepted by the job store HTTP API.
"""

from typing import Any

from pydantic import BaseModel, Field

from jobstore_common.models import JobData, JobId


class JobDefinitionRequest(BaseModel):
    """Job definition as submitted by API callers (no store-managed fields)."""

    job_name: str = Field(min_length=1)
    project: str = Field(min_length=1)
    uuid: str | None = None
    group_path: str | None = None
    description: str | None = None
    user: str | None = None
    log_level: str = "INFO"
    timeout: str | None = None
    retry: int | None = None
    schedule_enabled: bool = True
    execution_enabled: bool = True
    multiple_executions: bool = False
    server_node_uuid: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)
    workflow: dict[str, Any] = Field(default_factory=dict)

    def to_job(self, job_id: JobId | None = None) -> JobData:
        """Build the domain object, bound to job_id for updates."""
        return JobData(id=job_id, **self.model_dump())

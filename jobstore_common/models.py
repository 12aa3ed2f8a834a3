"""
Data models for job definition storage.

These models represent the domain objects used throughout the application,
independent of the underlying storage mechanism.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Internal identifier assigned by the store. Adapters pick the concrete type
# (SQLite and in-memory use integers); callers treat it as opaque.
JobId = int | str


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() + "Z" if value else None


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.removesuffix("Z"))


@dataclass
class JobData:
    """
    Represents one stored Job definition.

    A JobData is created transiently by a caller with no id, becomes
    persistent through JobRepository.save (which assigns the id), and is
    removed with JobRepository.delete. Apart from id and uuid the attributes
    are opaque to the repository and persisted verbatim.
    """

    job_name: str
    project: str
    uuid: str | None = None  # External identifier, assigned on save if missing
    id: JobId | None = None  # Internal identifier, assigned by the store
    group_path: str | None = None
    description: str | None = None
    user: str | None = None
    log_level: str = "INFO"
    timeout: str | None = None  # e.g. "30m", interpreted by the execution engine
    retry: int | None = None
    schedule_enabled: bool = True
    execution_enabled: bool = True
    multiple_executions: bool = False
    server_node_uuid: str | None = None
    options: dict[str, Any] = field(default_factory=dict)
    workflow: dict[str, Any] = field(default_factory=dict)
    date_created: datetime | None = None  # Set by the store on insert
    last_updated: datetime | None = None  # Set by the store on every save

    @property
    def is_new(self) -> bool:
        """True while the job has not been persisted yet."""
        return self.id is None

    @property
    def full_name(self) -> str:
        """Job name prefixed with its group path, e.g. "ops/nightly/backup"."""
        if self.group_path:
            return f"{self.group_path}/{self.job_name}"
        return self.job_name

    def to_dict(self) -> dict[str, Any]:
        """Convert job to dictionary format (for JSON serialization)."""
        return {
            "id": self.id,
            "uuid": self.uuid,
            "job_name": self.job_name,
            "project": self.project,
            "group_path": self.group_path,
            "description": self.description,
            "user": self.user,
            "log_level": self.log_level,
            "timeout": self.timeout,
            "retry": self.retry,
            "schedule_enabled": self.schedule_enabled,
            "execution_enabled": self.execution_enabled,
            "multiple_executions": self.multiple_executions,
            "server_node_uuid": self.server_node_uuid,
            "options": self.options,
            "workflow": self.workflow,
            "date_created": _format_time(self.date_created),
            "last_updated": _format_time(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobData":
        """Create job from dictionary format."""
        return cls(
            id=data.get("id"),
            uuid=data.get("uuid"),
            job_name=data["job_name"],
            project=data["project"],
            group_path=data.get("group_path"),
            description=data.get("description"),
            user=data.get("user"),
            log_level=data.get("log_level") or "INFO",
            timeout=data.get("timeout"),
            retry=data.get("retry"),
            schedule_enabled=data.get("schedule_enabled", True),
            execution_enabled=data.get("execution_enabled", True),
            multiple_executions=data.get("multiple_executions", False),
            server_node_uuid=data.get("server_node_uuid"),
            options=dict(data.get("options") or {}),
            workflow=dict(data.get("workflow") or {}),
            date_created=_parse_time(data.get("date_created")),
            last_updated=_parse_time(data.get("last_updated")),
        )

    def to_summary_dict(self) -> dict[str, Any]:
        """Convert job to summary format (without options/workflow, for listings)."""
        return {
            "id": self.id,
            "uuid": self.uuid,
            "name": self.full_name,
            "project": self.project,
            "schedule_enabled": self.schedule_enabled,
            "execution_enabled": self.execution_enabled,
        }

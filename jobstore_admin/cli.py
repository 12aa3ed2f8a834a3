"""
Admin CLI for managing job definitions.

Works directly against the job database, without going through the server.
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import click

from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData
from jobstore_persistence.sqlite_repository import SQLiteJobRepository


def get_db_path() -> str:
    """Get the database path from environment variable or default."""
    return os.environ.get(
        "JOBSTORE_DB_PATH", str(Path.home() / ".jobstore" / "jobs.db")
    )


def get_repository() -> SQLiteJobRepository:
    """Get the repository instance."""
    db_path = Path(get_db_path())
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteJobRepository(str(db_path))


def run_async(coro):
    """
    Helper to run async functions in CLI commands.

    Storage failures end the command with an error message and exit code 1.
    """
    try:
        return asyncio.run(coro)
    except DataAccessException as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def print_job(job: JobData) -> None:
    click.echo(f"  ID:          {job.id}")
    click.echo(f"  UUID:        {job.uuid}")
    click.echo(f"  Name:        {job.full_name}")
    click.echo(f"  Project:     {job.project}")
    if job.description:
        click.echo(f"  Description: {job.description}")
    click.echo(f"  Scheduled:   {'yes' if job.schedule_enabled else 'no'}")
    click.echo(f"  Executable:  {'yes' if job.execution_enabled else 'no'}")


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level (default: WARNING)",
)
def cli(log_level: str):
    """Job Store Admin - Manage stored job definitions."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.group()
def job():
    """Manage job definitions."""
    pass


@job.command("create")
@click.option("--name", required=True, help="Job name")
@click.option("--project", required=True, help="Project the job belongs to")
@click.option("--group", "group_path", help="Group path, e.g. ops/nightly")
@click.option("--description", help="Job description")
@click.option("--uuid", "job_uuid", help="Job uuid (generated when omitted)")
def job_create(
    name: str,
    project: str,
    group_path: str | None,
    description: str | None,
    job_uuid: str | None,
):
    """Create a new job definition."""

    async def create():
        repo = get_repository()
        try:
            await repo.initialize()
            saved = await repo.save(
                JobData(
                    job_name=name,
                    project=project,
                    group_path=group_path,
                    description=description,
                    uuid=job_uuid,
                )
            )
        finally:
            await repo.close()

        click.echo("✓ Job created successfully")
        print_job(saved)

    run_async(create())


@job.command("get")
@click.argument("job_id", type=int)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def job_get(job_id: int, json_output: bool):
    """Show a job by its internal id."""

    async def get():
        repo = get_repository()
        try:
            await repo.initialize()
            found = await repo.get(job_id)
        finally:
            await repo.close()

        if found is None:
            click.echo(f"Error: Job not found: {job_id}", err=True)
            sys.exit(1)

        if json_output:
            click.echo(json.dumps(found.to_dict(), indent=2))
        else:
            print_job(found)

    run_async(get())


@job.command("find")
@click.argument("job_uuid")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def job_find(job_uuid: str, json_output: bool):
    """Show a job by its uuid."""

    async def find():
        repo = get_repository()
        try:
            await repo.initialize()
            found = await repo.find_by_uuid(job_uuid)
        finally:
            await repo.close()

        if found is None:
            click.echo(f"Error: Job not found with uuid: {job_uuid}", err=True)
            sys.exit(1)

        if json_output:
            click.echo(json.dumps(found.to_dict(), indent=2))
        else:
            print_job(found)

    run_async(find())


@job.command("exists")
@click.argument("job_uuid")
def job_exists(job_uuid: str):
    """Exit 0 if a job with this uuid exists, 1 otherwise."""

    async def exists():
        repo = get_repository()
        try:
            await repo.initialize()
            return await repo.exists_by_uuid(job_uuid)
        finally:
            await repo.close()

    if run_async(exists()):
        click.echo(f"Job {job_uuid} exists")
    else:
        click.echo(f"Job {job_uuid} does not exist")
        sys.exit(1)


@job.command("delete")
@click.argument("job_id", type=int)
def job_delete(job_id: int):
    """Delete a job by its internal id."""

    async def delete():
        repo = get_repository()
        try:
            await repo.initialize()
            await repo.delete(job_id)
        finally:
            await repo.close()

        click.echo(f"✓ Job deleted: {job_id}")

    run_async(delete())


@job.command("list")
@click.option("--project", help="Only list jobs of this project")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def job_list(project: str | None, json_output: bool):
    """List job definitions."""

    async def list_jobs():
        repo = get_repository()
        try:
            await repo.initialize()
            jobs = await repo.list_jobs(project=project)
        finally:
            await repo.close()

        if json_output:
            click.echo(json.dumps([j.to_summary_dict() for j in jobs], indent=2))
            return

        if not jobs:
            click.echo("No jobs found.")
            return

        click.echo(f"\n{'ID':<8} {'UUID':<38} {'Project':<20} {'Name':<30}")
        click.echo("-" * 98)
        for j in jobs:
            click.echo(f"{j.id:<8} {j.uuid:<38} {j.project:<20} {j.full_name:<30}")
        click.echo()

    run_async(list_jobs())


if __name__ == "__main__":
    cli()

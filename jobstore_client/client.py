import os
from typing import Any
from urllib.parse import quote

import requests

from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData, JobId


def get_server_url() -> str:
    """Get the server URL from environment variable or default."""
    return os.environ.get("JOBSTORE_SERVER_URL", "http://localhost:8000")


class JobStoreClient:
    """
    HTTP client for the job store API.

    Mirrors the repository contract: lookups return None (or False) when the
    server answers 404, and any other failure raises DataAccessException
    with the requests exception chained.
    """

    def __init__(self, server_url: str | None = None, timeout: float = 30):
        self.server_url = (server_url or get_server_url()).rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        try:
            return requests.request(
                method, f"{self.server_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise DataAccessException(f"Error contacting job store: {e}") from e

    @staticmethod
    def _raise_for_status(response: requests.Response, **context: Any) -> None:
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise DataAccessException(f"Job store error: {detail}", **context) from e

    def get(self, job_id: JobId) -> JobData | None:
        """Fetch a job by internal id, or None if it does not exist."""
        response = self._request("GET", f"/jobs/{job_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response, job_id=job_id)
        return JobData.from_dict(response.json())

    def find_by_uuid(self, uuid: str) -> JobData | None:
        """Fetch a job by uuid, or None if it does not exist."""
        response = self._request("GET", f"/jobs/uuid/{quote(uuid, safe='')}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response, uuid=uuid)
        return JobData.from_dict(response.json())

    def exists_by_uuid(self, uuid: str) -> bool:
        """Check whether a job with this uuid is stored."""
        response = self._request("HEAD", f"/jobs/uuid/{quote(uuid, safe='')}")
        if response.status_code == 404:
            return False
        self._raise_for_status(response, uuid=uuid)
        return True

    def save(self, data: JobData) -> JobData:
        """
        Create the job if it has no id, replace it otherwise.

        Returns:
            The job as stored by the server

        Raises:
            DataAccessException: If the server rejects the job (duplicate
                uuid, missing job) or cannot be reached
        """
        body = data.to_dict()
        for key in ("id", "date_created", "last_updated"):
            body.pop(key)

        if data.is_new:
            response = self._request("POST", "/jobs", json=body)
        else:
            response = self._request("PUT", f"/jobs/{data.id}", json=body)
        self._raise_for_status(response, uuid=data.uuid, job_id=data.id)
        return JobData.from_dict(response.json())

    def delete(self, job_id: JobId) -> None:
        """Delete a job. Unknown ids are accepted by the server."""
        response = self._request("DELETE", f"/jobs/{job_id}")
        self._raise_for_status(response, job_id=job_id)

    def list_jobs(self, project: str | None = None) -> list[dict[str, Any]]:
        """List job summaries, optionally for one project."""
        params = {"project": project} if project else {}
        response = self._request("GET", "/jobs", params=params)
        self._raise_for_status(response)
        return response.json()

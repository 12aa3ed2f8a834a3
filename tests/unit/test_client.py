"""
Unit tests for jobstore_client.client module.

Tests the HTTP client against mocked requests responses.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from jobstore_client.client import JobStoreClient
from jobstore_common.errors import DataAccessException
from jobstore_common.models import JobData

STORED_JOB = {
    "id": 1,
    "uuid": "abc-123",
    "job_name": "backup",
    "project": "ops",
    "group_path": None,
    "description": None,
    "user": None,
    "log_level": "INFO",
    "timeout": None,
    "retry": None,
    "schedule_enabled": True,
    "execution_enabled": True,
    "multiple_executions": False,
    "server_node_uuid": None,
    "options": {},
    "workflow": {},
    "date_created": "2024-01-15T10:30:00Z",
    "last_updated": "2024-01-15T10:30:00Z",
}


def mock_response(status_code=200, json_data=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = ""
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error"
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def client():
    return JobStoreClient("http://jobstore.test:8000/", timeout=5)


class TestJobStoreClient:
    """Test suite for JobStoreClient."""

    def test_server_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("JOBSTORE_SERVER_URL", "http://example.test:9000")

        assert JobStoreClient().server_url == "http://example.test:9000"

    def test_get_returns_job(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(200, STORED_JOB)

            job = client.get(1)

        mock_request.assert_called_once_with(
            "GET", "http://jobstore.test:8000/jobs/1", timeout=5
        )
        assert job.id == 1
        assert job.uuid == "abc-123"
        assert job.date_created is not None

    def test_get_missing_returns_none(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(404, {"detail": "Job not found"})

            assert client.get(99) is None

    def test_find_by_uuid(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(200, STORED_JOB)

            job = client.find_by_uuid("abc-123")

        assert mock_request.call_args[0][1] == "http://jobstore.test:8000/jobs/uuid/abc-123"
        assert job.id == 1

    def test_uuid_is_quoted_in_path(self, client):
        """Test that reserved characters in a uuid are percent-encoded."""
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.side_effect = [mock_response(200, STORED_JOB), mock_response(200)]

            client.find_by_uuid("ops/backup?x#1")
            client.exists_by_uuid("ops/backup?x#1")

        expected = "http://jobstore.test:8000/jobs/uuid/ops%2Fbackup%3Fx%231"
        assert mock_request.call_args_list[0][0] == ("GET", expected)
        assert mock_request.call_args_list[1][0] == ("HEAD", expected)

    def test_exists_by_uuid(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.side_effect = [mock_response(200), mock_response(404)]

            assert client.exists_by_uuid("abc-123") is True
            assert client.exists_by_uuid("other") is False

        assert mock_request.call_args_list[0][0][0] == "HEAD"

    def test_save_new_job_posts(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(201, STORED_JOB)

            saved = client.save(JobData(job_name="backup", project="ops", uuid="abc-123"))

        args, kwargs = mock_request.call_args
        assert args == ("POST", "http://jobstore.test:8000/jobs")
        assert kwargs["json"]["uuid"] == "abc-123"
        assert "id" not in kwargs["json"]
        assert "date_created" not in kwargs["json"]
        assert saved.id == 1

    def test_save_existing_job_puts(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(200, STORED_JOB)

            client.save(JobData(job_name="backup", project="ops", id=1))

        assert mock_request.call_args[0] == ("PUT", "http://jobstore.test:8000/jobs/1")

    def test_save_conflict_raises(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(
                409, {"detail": "A job with this uuid already exists (uuid=dup)"}
            )

            with pytest.raises(DataAccessException) as exc_info:
                client.save(JobData(job_name="backup", project="ops", uuid="dup"))

        assert "already exists" in str(exc_info.value)
        assert exc_info.value.uuid == "dup"
        assert isinstance(exc_info.value.__cause__, requests.exceptions.HTTPError)

    def test_delete(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(204)

            client.delete(1)

        assert mock_request.call_args[0] == ("DELETE", "http://jobstore.test:8000/jobs/1")

    def test_connection_error_raises(self, client):
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.side_effect = requests.exceptions.ConnectionError("refused")

            with pytest.raises(DataAccessException) as exc_info:
                client.delete(1)

        assert "Error contacting job store" in str(exc_info.value)

    def test_list_jobs_with_project(self, client):
        summaries = [{"id": 1, "uuid": "abc-123", "name": "backup", "project": "ops"}]
        with patch("jobstore_client.client.requests.request") as mock_request:
            mock_request.return_value = mock_response(200, summaries)

            result = client.list_jobs(project="ops")

        assert mock_request.call_args[1]["params"] == {"project": "ops"}
        assert result == summaries

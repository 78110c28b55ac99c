"""
Name: Worker Job Tests

Responsibilities:
  - Validate record_activity_job persists valid payloads
  - Validate malformed payloads are dropped without retry
  - Validate DB failures propagate (RQ retries) and context is cleared
  - Validate the on_failure callback never raises

Notes:
  - get_current_job and the container repository are patched (no Redis/DB)
"""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from app.activity import activity_to_payload, build_activity
from app.context import get_context_dict
from app.crosscutting.exceptions import DatabaseError
from app.domain.entities import ActivityAction
from app.domain.workspaces import WorkspaceType
from app.worker.jobs import on_activity_job_failure, record_activity_job

pytestmark = pytest.mark.unit


@pytest.fixture
def current_job():
    job = MagicMock()
    job.id = "job-123"
    with patch("app.worker.jobs.get_current_job", return_value=job):
        yield job


@pytest.fixture
def repository():
    repo = MagicMock()
    with patch("app.container.get_activity_repository", return_value=repo):
        yield repo


def _payload():
    activity = build_activity(
        user_id=uuid4(),
        action=ActivityAction.DOWNLOADED,
        document_id=uuid4(),
        workspace=WorkspaceType.AMPP,
    )
    return activity, activity_to_payload(activity)


class TestRecordActivityJob:
    def test_valid_payload_is_appended(self, current_job, repository):
        activity, payload = _payload()

        record_activity_job(payload)

        repository.append.assert_called_once_with(activity)

    def test_invalid_payload_is_dropped(self, current_job, repository):
        record_activity_job({"action": "teleported"})

        repository.append.assert_not_called()

    def test_database_failure_is_reraised(self, current_job, repository):
        repository.append.side_effect = DatabaseError("db down")
        _, payload = _payload()

        with pytest.raises(DatabaseError):
            record_activity_job(payload)

    def test_context_is_cleared_after_job(self, current_job, repository):
        _, payload = _payload()

        record_activity_job(payload)

        assert get_context_dict() == {}

    def test_runs_outside_worker(self, repository):
        _, payload = _payload()

        with patch("app.worker.jobs.get_current_job", return_value=None):
            record_activity_job(payload)

        repository.append.assert_called_once()


def test_failure_callback_tolerates_unexpected_job_shape():
    job = MagicMock()
    job.args = ("not-a-dict",)

    on_activity_job_failure(job, None, RuntimeError, RuntimeError("boom"), None)


def test_failure_callback_reads_payload():
    _, payload = _payload()
    job = MagicMock()
    job.id = "job-9"
    job.args = (payload,)

    with patch("app.worker.jobs.logger") as mock_logger:
        on_activity_job_failure(job, None, DatabaseError, DatabaseError("x"), None)

    extra = mock_logger.error.call_args.kwargs["extra"]
    assert extra["action"] == "downloaded"
    assert extra["error_type"] == "DatabaseError"

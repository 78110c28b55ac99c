"""
Name: Activity Recording Tests

Responsibilities:
  - Validate record_activity is best-effort (never raises)
  - Validate queue payload serialization keeps every field
  - Validate RQActivityRecorder enqueue contract (mocked rq)
"""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from app.activity import (
    RequestMeta,
    activity_from_payload,
    activity_to_payload,
    build_activity,
    record_activity,
)
from app.domain.entities import ActivityAction
from app.domain.value_objects import ActivityQuery
from app.domain.workspaces import WorkspaceType
from app.infrastructure.queue import (
    QueueConfigurationError,
    QueueEnqueueError,
    RQActivityRecorder,
    RQQueueConfig,
)
from app.infrastructure.queue.job_paths import (
    ACTIVITY_FAILURE_CALLBACK_PATH,
    RECORD_ACTIVITY_JOB_PATH,
)

pytestmark = pytest.mark.unit


class TestRecordActivity:
    def test_without_recorder_returns_false(self):
        assert record_activity(None, user_id=uuid4(), action=ActivityAction.VIEWED) is False

    def test_recorder_failure_is_swallowed(self):
        recorder = MagicMock()
        recorder.record.side_effect = ConnectionError("redis down")

        accepted = record_activity(
            recorder, user_id=uuid4(), action=ActivityAction.DOWNLOADED
        )

        assert accepted is False
        recorder.record.assert_called_once()

    def test_request_meta_is_attached(self, activity_repo, activity_recorder):
        document_id = uuid4()

        accepted = record_activity(
            activity_recorder,
            user_id=uuid4(),
            action=ActivityAction.UPDATED,
            document_id=document_id,
            workspace=WorkspaceType.AMPP,
            details={"fields": ["title"]},
            meta=RequestMeta(ip_address="10.0.0.1", user_agent="pytest"),
        )

        assert accepted is True
        (stored,) = activity_repo.list_activities(ActivityQuery(document_id=document_id))
        assert stored.ip_address == "10.0.0.1"
        assert stored.user_agent == "pytest"
        assert stored.details == {"fields": ["title"]}


def test_payload_roundtrip_keeps_all_fields():
    activity = build_activity(
        user_id=uuid4(),
        action=ActivityAction.STATUS_CHANGED,
        document_id=uuid4(),
        workspace=WorkspaceType.CAM,
        details={"from": "draft", "to": "stored"},
        meta=RequestMeta(ip_address="127.0.0.1"),
    )

    restored = activity_from_payload(activity_to_payload(activity))

    assert restored == activity


def test_payload_without_document_survives():
    activity = build_activity(user_id=uuid4(), action=ActivityAction.DELETED)

    payload = activity_to_payload(activity)

    assert payload["document_id"] is None
    assert payload["workspace"] is None
    assert activity_from_payload(payload).document_id is None


class TestRQActivityRecorder:
    @pytest.fixture
    def fake_rq(self):
        rq = MagicMock()
        with patch(
            "app.infrastructure.queue.rq_queue._lazy_import_rq", return_value=rq
        ):
            yield rq

    def test_enqueue_uses_job_path_and_payload(self, fake_rq):
        redis = MagicMock()
        recorder = RQActivityRecorder(
            redis=redis, config=RQQueueConfig(retry_max_attempts=2)
        )
        activity = build_activity(user_id=uuid4(), action=ActivityAction.CREATED)

        recorder.record(activity)

        fake_rq.Queue.assert_called_once_with(name="activity", connection=redis)
        fake_rq.Retry.assert_called_once_with(max=2)
        fake_rq.Callback.assert_called_once_with(ACTIVITY_FAILURE_CALLBACK_PATH)
        queue = fake_rq.Queue.return_value
        args, kwargs = queue.enqueue.call_args
        assert args == (RECORD_ACTIVITY_JOB_PATH,)
        assert kwargs["args"] == (activity_to_payload(activity),)
        assert kwargs["job_timeout"] == 60
        assert kwargs["description"] == "record_activity:created"

    def test_zero_retries_disables_retry(self, fake_rq):
        recorder = RQActivityRecorder(
            redis=MagicMock(), config=RQQueueConfig(retry_max_attempts=0)
        )

        recorder.record(build_activity(user_id=uuid4(), action=ActivityAction.VIEWED))

        fake_rq.Retry.assert_not_called()
        assert fake_rq.Queue.return_value.enqueue.call_args.kwargs["retry"] is None

    def test_enqueue_failure_is_typed(self, fake_rq):
        fake_rq.Queue.return_value.enqueue.side_effect = ConnectionError("boom")
        recorder = RQActivityRecorder(redis=MagicMock(), config=RQQueueConfig())

        with pytest.raises(QueueEnqueueError) as exc_info:
            recorder.record(build_activity(user_id=uuid4(), action=ActivityAction.VIEWED))

        assert exc_info.value.queue_name == "activity"
        assert isinstance(exc_info.value.original_error, ConnectionError)
        assert exc_info.value.code == "QUEUE_ENQUEUE_ERROR"

    @pytest.mark.parametrize(
        "config",
        [
            RQQueueConfig(retry_max_attempts=-1),
            RQQueueConfig(job_timeout_seconds=0),
            RQQueueConfig(result_ttl_seconds=-5),
        ],
    )
    def test_invalid_config_fails_fast(self, fake_rq, config):
        with pytest.raises(QueueConfigurationError):
            RQActivityRecorder(redis=MagicMock(), config=config)

    def test_blank_queue_name_falls_back_to_default(self, fake_rq):
        RQActivityRecorder(redis=MagicMock(), config=RQQueueConfig(queue_name="  "))

        assert fake_rq.Queue.call_args.kwargs["name"] == "activity"

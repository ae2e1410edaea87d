"""Unit tests for HistoryRecorder."""

import pytest

from infrastructure.notifications import DeliveryResult, NotificationStatus
from tests.factories.notifications import make_event


@pytest.mark.unit
class TestHistoryRecorder:
    def test_record_successful_delivery(self, history, store, clock):
        entry = history.record_delivery(
            make_event(), "c1", DeliveryResult.ok("sent"), recipients=["ops@example.com"]
        )

        assert entry.status == NotificationStatus.SENT
        assert entry.sent_at == clock.now
        assert entry.retry_count == 0
        assert entry.recipients == ["ops@example.com"]
        assert store.get_history(entry.id) == entry

    def test_record_failed_delivery(self, history):
        entry = history.record_delivery(
            make_event(), "c1", DeliveryResult.failure("failed", "Slack server error (503)")
        )

        assert entry.status == NotificationStatus.FAILED
        assert entry.error == "Slack server error (503)"
        assert entry.sent_at is None

    def test_record_missing_channel(self, history):
        entry = history.record_missing_channel(make_event(), "gone", "Channel not found: gone")

        assert entry.status == NotificationStatus.FAILED
        assert entry.channel_id == "gone"

    def test_retry_failure_marks_retrying_until_final(self, history):
        entry = history.record_delivery(
            make_event(), "c1", DeliveryResult.failure("failed", "503", retryable=True)
        )
        failure = DeliveryResult.failure("failed", "503 again", retryable=True)

        retrying = history.record_retry(entry.id, 1, failure, final=False)
        failed = history.record_retry(entry.id, 2, failure, final=True)

        assert retrying.status == NotificationStatus.RETRYING
        assert retrying.retry_count == 1
        assert failed.status == NotificationStatus.FAILED
        assert failed.retry_count == 2
        assert failed.error == "503 again"

    def test_retry_success_marks_sent(self, history, clock):
        entry = history.record_delivery(
            make_event(), "c1", DeliveryResult.failure("failed", "503", retryable=True)
        )

        updated = history.record_retry(entry.id, 2, DeliveryResult.ok("sent"), final=False)

        assert updated.status == NotificationStatus.SENT
        assert updated.retry_count == 2
        assert updated.error is None
        assert updated.sent_at == clock.now

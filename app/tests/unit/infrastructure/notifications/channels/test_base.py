"""Unit tests for behavior shared by every ChannelAdapter."""

import pytest
import requests

from infrastructure.notifications.channels import SendOptions, SlackAdapter
from infrastructure.notifications.channels.base import require_http_url
from tests.factories.notifications import SLACK_WEBHOOK_URL, make_http_response


@pytest.fixture
def adapter(adapter_kwargs):
    return SlackAdapter(**adapter_kwargs)


@pytest.mark.unit
class TestRequireHttpUrl:
    @pytest.mark.parametrize("url", ["https://example.com/hook", "http://localhost:8080/x"])
    def test_accepts_http_urls(self, url):
        assert require_http_url(url) == url

    @pytest.mark.parametrize("url", ["ftp://example.com", "not a url", "https://"])
    def test_rejects_other_values(self, url):
        with pytest.raises(ValueError):
            require_http_url(url)


@pytest.mark.unit
class TestSendOptions:
    def test_single_recipient_normalized_to_list(self):
        assert SendOptions(to="ops@example.com").to == ["ops@example.com"]

    def test_blank_recipient_dropped(self):
        assert SendOptions(to="  ").to == []

    def test_defaults(self):
        options = SendOptions()

        assert options.subject == "Notification"
        assert options.silent is False


@pytest.mark.unit
class TestChannelAdapterBase:
    def test_validate_rejects_non_mapping(self, adapter):
        assert adapter.validate(None) is False
        assert adapter.validate("webhook") is False

    def test_send_with_invalid_config_makes_no_request(self, adapter, session):
        result = adapter.send("hello", {"config": {}})

        assert result.success is False
        assert result.error == "Configuration validation failed"
        assert result.error_code == "INVALID_CONFIG"
        assert result.retryable is False
        session.post.assert_not_called()

    def test_server_error_retried_then_reported(self, adapter, session, sleep_calls):
        session.post.return_value = make_http_response(503, {"message": "unavailable"})

        result = adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert result.success is False
        assert result.error_code == "SERVER_ERROR"
        assert result.retryable is True
        assert session.post.call_count == 3
        assert sleep_calls == [1.0, 2.0]

    def test_client_error_not_retried(self, adapter, session):
        session.post.return_value = make_http_response(400, {"message": "bad payload"})

        result = adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert result.success is False
        assert result.error_code == "HTTP_ERROR"
        assert result.retryable is False
        assert session.post.call_count == 1

    def test_timeout_is_transient(self, adapter, session):
        session.post.side_effect = [requests.Timeout("read timed out"), make_http_response(200)]

        result = adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert result.success is True
        assert session.post.call_count == 2

    def test_request_timeout_from_settings(self, adapter, session, notification_settings):
        adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert session.post.call_args.kwargs["timeout"] == notification_settings.http_timeout_seconds

    def test_unexpected_exception_contained(self, adapter, session):
        session.post.side_effect = KeyError("payload")

        result = adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert result.success is False
        assert result.error_code == "UNEXPECTED_ERROR"
        assert result.retryable is True

    def test_failure_error_is_redacted(self, adapter, session):
        session.post.side_effect = requests.ConnectionError(
            f"Max retries exceeded with url: {SLACK_WEBHOOK_URL}"
        )

        result = adapter.send("hello", {"config": {"webhookUrl": SLACK_WEBHOOK_URL}})

        assert result.error_code == "CONNECTION_ERROR"
        assert "XXXXXXXXXXXXXXXX" not in result.error

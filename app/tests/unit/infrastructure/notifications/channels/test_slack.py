"""Unit tests for SlackAdapter."""

import pytest

from infrastructure.notifications import NotificationProvider
from infrastructure.notifications.channels import SlackAdapter
from tests.factories.notifications import (
    SLACK_WEBHOOK_URL,
    make_channel_config,
    make_http_response,
)


@pytest.fixture
def adapter(adapter_kwargs):
    return SlackAdapter(**adapter_kwargs)


@pytest.fixture
def config():
    return make_channel_config(NotificationProvider.SLACK)


@pytest.mark.unit
class TestSlackConfig:
    def test_valid_config(self, adapter, config):
        assert adapter.validate(config) is True

    def test_snake_case_keys_accepted(self, adapter):
        assert adapter.validate({"webhook_url": SLACK_WEBHOOK_URL}) is True

    @pytest.mark.parametrize(
        "config", [{}, {"webhookUrl": ""}, {"webhookUrl": "hooks.slack.com/services/x"}]
    )
    def test_invalid_config(self, adapter, config):
        assert adapter.validate(config) is False


@pytest.mark.unit
class TestSlackSend:
    def test_posts_message_payload(self, adapter, session, config):
        result = adapter.send("Container nginx crashed", {"config": config})

        assert result.success is True
        assert result.message == "Message sent to Slack"
        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == SLACK_WEBHOOK_URL
        assert payload == {
            "text": "Container nginx crashed",
            "username": "DockPilot",
            "icon_emoji": ":rocket:",
        }

    def test_username_and_icon_overrides(self, adapter, session, config):
        config["username"] = "Ops Bot"
        adapter.send("hi", {"config": config, "icon_emoji": ":fire:"})

        payload = session.post.call_args.kwargs["json"]
        assert payload["username"] == "Ops Bot"
        assert payload["icon_emoji"] == ":fire:"

    def test_rate_limit_waits_then_retries(self, adapter, session, sleep_calls, config):
        session.post.side_effect = [
            make_http_response(429, {}),
            make_http_response(200),
        ]

        result = adapter.send("hi", {"config": config})

        assert result.success is True
        assert session.post.call_count == 2
        assert sleep_calls[0] == 1.0

    def test_rate_limit_honors_retry_after(self, adapter, session, sleep_calls, config):
        session.post.side_effect = [
            make_http_response(429, {}, headers={"Retry-After": "3"}),
            make_http_response(200),
        ]

        adapter.send("hi", {"config": config})

        assert sleep_calls[0] == 3.0


@pytest.mark.unit
class TestSlackTest:
    def test_self_test_message(self, adapter, session, config):
        result = adapter.test(config)

        assert result.success is True
        payload = session.post.call_args.kwargs["json"]
        assert payload["username"] == "DockPilot Test"
        assert payload["icon_emoji"] == ":test_tube:"
        assert "This is a test notification from your DockPilot instance." in payload["text"]

    def test_invalid_config_not_sent(self, adapter, session):
        result = adapter.test({"webhookUrl": "nope"})

        assert result.error_code == "INVALID_CONFIG"
        session.post.assert_not_called()

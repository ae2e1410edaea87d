"""Unit tests for AdapterRegistry."""

from unittest.mock import MagicMock

import pytest

from infrastructure.notifications import AdapterRegistry, NotificationProvider
from infrastructure.notifications.channels import ChannelAdapter, SlackConfig
from tests.factories.notifications import (
    SLACK_WEBHOOK_URL,
    make_channel_config,
    make_delivery_success,
)


@pytest.fixture
def slack_adapter():
    adapter = MagicMock(spec=ChannelAdapter)
    adapter.send.return_value = make_delivery_success("Message sent to Slack")
    adapter.test.return_value = make_delivery_success("Test message sent to Slack")
    adapter.validate.return_value = True
    adapter.default_recipients.return_value = []
    return adapter


@pytest.fixture
def registry(slack_adapter):
    return AdapterRegistry({NotificationProvider.SLACK: slack_adapter})


@pytest.mark.unit
class TestAdapterRegistry:
    def test_providers(self, registry):
        assert registry.providers == [NotificationProvider.SLACK]

    def test_get_accepts_string_provider(self, registry, slack_adapter):
        assert registry.get("slack") is slack_adapter

    def test_get_unknown_provider(self, registry):
        assert registry.get("pager") is None
        assert registry.get(NotificationProvider.DISCORD) is None

    def test_send_delegates_to_adapter(self, registry, slack_adapter):
        options = {"config": {"webhookUrl": SLACK_WEBHOOK_URL}}

        result = registry.send(NotificationProvider.SLACK, "hello", options)

        assert result.success is True
        slack_adapter.send.assert_called_once_with("hello", options)

    def test_send_without_adapter(self, registry):
        result = registry.send(NotificationProvider.DISCORD, "hello")

        assert result.success is False
        assert result.message == "No adapter registered for provider: discord"
        assert result.error == "Adapter not found"
        assert result.error_code == "ADAPTER_NOT_FOUND"

    def test_send_adapter_exception_is_contained(self, registry, slack_adapter):
        slack_adapter.send.side_effect = RuntimeError("socket closed")

        result = registry.send(NotificationProvider.SLACK, "hello")

        assert result.success is False
        assert result.error_code == "UNEXPECTED_ERROR"
        assert result.retryable is True

    def test_test_validates_config_first(self, registry, slack_adapter):
        slack_adapter.validate.return_value = False

        result = registry.test(NotificationProvider.SLACK, {})

        assert result.success is False
        assert result.message == "Invalid configuration"
        assert result.error == "Configuration validation failed"
        assert result.error_code == "INVALID_CONFIG"
        slack_adapter.test.assert_not_called()

    def test_test_runs_adapter_self_test(self, registry, slack_adapter):
        config = make_channel_config(NotificationProvider.SLACK)

        result = registry.test(NotificationProvider.SLACK, config, "ops@example.com")

        assert result.success is True
        slack_adapter.test.assert_called_once_with(config, "ops@example.com")

    def test_test_without_adapter(self, registry):
        result = registry.test(NotificationProvider.SMTP, {})

        assert result.error_code == "ADAPTER_NOT_FOUND"

    def test_validate(self, registry, slack_adapter):
        assert registry.validate(NotificationProvider.SLACK, {}) is True
        slack_adapter.validate.return_value = False
        assert registry.validate(NotificationProvider.SLACK, {}) is False
        assert registry.validate(NotificationProvider.TELEGRAM, {}) is False

    def test_default_recipients_uses_parsed_config(self, registry, slack_adapter):
        parsed = SlackConfig(webhook_url=SLACK_WEBHOOK_URL)
        slack_adapter.parse_config.return_value = parsed
        slack_adapter.default_recipients.return_value = ["ops@example.com"]

        recipients = registry.default_recipients(
            NotificationProvider.SLACK, {"webhookUrl": SLACK_WEBHOOK_URL}
        )

        assert recipients == ["ops@example.com"]
        slack_adapter.default_recipients.assert_called_once_with(parsed)

    def test_default_recipients_invalid_config(self, registry, slack_adapter):
        slack_adapter.parse_config.side_effect = TypeError("not a mapping")

        assert registry.default_recipients(NotificationProvider.SLACK, None) == []

    def test_default_recipients_without_adapter(self, registry):
        assert registry.default_recipients(NotificationProvider.SMTP, {}) == []

"""Unit tests for logging formatters and text redaction."""

import pytest

from infrastructure.logging.formatters import (
    mask_sensitive_data,
    redact_text,
    truncate_large_values,
)


@pytest.mark.unit
class TestRedactText:
    """Tests for redact_text()."""

    def test_redacts_email_addresses(self):
        assert redact_text("Recipient ops@example.com refused") == (
            "Recipient [EMAIL] refused"
        )

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("password=hunter2 rejected", "password=*** rejected"),
            ("token: abc123", "token=***"),
            ("api_key=re_123456", "api_key=***"),
            ("Secret = shh", "Secret=***"),
        ],
    )
    def test_redacts_key_value_credentials(self, text, expected):
        assert redact_text(text) == expected

    def test_redacts_telegram_bot_token_in_url(self):
        text = "Max retries exceeded with url: /bot123456:ABC-DEF_ghi/sendMessage"

        redacted = redact_text(text)

        assert "ABC-DEF_ghi" not in redacted
        assert "/bot***/sendMessage" in redacted

    def test_redacts_webhook_paths(self):
        slack = redact_text("url: /services/T000/B000/XXXX (Caused by timeout)")
        discord = redact_text("url: /api/webhooks/123/secret-part")

        assert slack == "url: /services/*** (Caused by timeout)"
        assert discord == "url: /api/webhooks/***"

    def test_handles_non_strings(self):
        assert redact_text(None) == ""
        assert redact_text(ValueError("token=abc")) == "token=***"

    def test_plain_text_unchanged(self):
        assert redact_text("Slack server error (503)") == "Slack server error (503)"


@pytest.mark.unit
class TestMaskSensitiveData:
    """Tests for the mask_sensitive_data processor."""

    def test_masks_sensitive_keys(self):
        processor = mask_sensitive_data()

        result = processor(
            None,
            "info",
            {
                "event": "adapter_send_started",
                "password": "hunter2",
                "webhook_url": "https://hooks.slack.com/services/x",
                "bot_token": "123:abc",
                "channel_id": "c1",
            },
        )

        assert result["password"] == "***REDACTED***"
        assert result["webhook_url"] == "***REDACTED***"
        assert result["bot_token"] == "***REDACTED***"
        assert result["channel_id"] == "c1"
        assert result["event"] == "adapter_send_started"

    def test_masks_nested_provider_config(self):
        processor = mask_sensitive_data()

        result = processor(
            None,
            "info",
            {"config": {"webhookUrl": "https://x", "username": "bot"}},
        )

        assert result["config"]["webhookUrl"] == "***REDACTED***"
        assert result["config"]["username"] == "bot"

    def test_none_values_not_masked(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"token": None})

        assert result["token"] is None

    def test_additional_patterns(self):
        processor = mask_sensitive_data(additional_patterns=frozenset({"chat_id"}))

        result = processor(None, "info", {"chat_id": "-100"})

        assert result["chat_id"] == "***REDACTED***"


@pytest.mark.unit
class TestTruncateLargeValues:
    """Tests for the truncate_large_values processor."""

    def test_truncates_long_strings(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"body": "x" * 25})

        assert result["body"].startswith("x" * 10)
        assert "25 chars total" in result["body"]

    def test_short_strings_unchanged(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"body": "short"})

        assert result["body"] == "short"

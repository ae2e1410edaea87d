"""Unit tests for notification models and the event catalog."""

import pytest
from pydantic import ValidationError

from infrastructure.notifications import (
    NOTIFICATION_EVENTS,
    Channel,
    DeliveryResult,
    NotificationEvent,
    NotificationProvider,
    Rule,
    Severity,
    event_label,
    list_events,
)


@pytest.mark.unit
class TestSeverity:
    @pytest.mark.parametrize(
        "severity,minimum,expected",
        [
            (Severity.INFO, Severity.INFO, True),
            (Severity.INFO, Severity.WARNING, False),
            (Severity.WARNING, Severity.INFO, True),
            (Severity.WARNING, Severity.CRITICAL, False),
            (Severity.CRITICAL, Severity.WARNING, True),
            (Severity.CRITICAL, Severity.CRITICAL, True),
        ],
    )
    def test_at_least(self, severity, minimum, expected):
        assert severity.at_least(minimum) is expected

    def test_at_least_accepts_strings(self):
        assert Severity.CRITICAL.at_least("warning")

    def test_rank_order(self):
        assert Severity.INFO.rank < Severity.WARNING.rank < Severity.CRITICAL.rank


@pytest.mark.unit
class TestNotificationProvider:
    def test_email_providers(self):
        assert NotificationProvider.SMTP.is_email
        assert NotificationProvider.RESEND.is_email
        assert not NotificationProvider.SLACK.is_email

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError):
            NotificationProvider("pagerduty")


@pytest.mark.unit
class TestChannel:
    def test_accepts_serialized_config(self):
        channel = Channel.model_validate(
            {
                "provider": "slack",
                "name": "Ops",
                "encryptedConfig": '{"webhookUrl": "enc:a:b:c"}',
            }
        )

        assert channel.config == {"webhookUrl": "enc:a:b:c"}
        assert channel.enabled is True

    def test_camel_case_aliases(self):
        channel = Channel(
            provider=NotificationProvider.SMTP,
            name="Mail",
            from_address="alerts@example.com",
        )

        dumped = channel.model_dump(by_alias=True)
        assert dumped["fromAddress"] == "alerts@example.com"
        assert "encryptedConfig" in dumped


@pytest.mark.unit
class TestRule:
    def test_defaults(self):
        rule = Rule(event_type="container.crashed", channel_id="c1")

        assert rule.enabled is True
        assert rule.min_severity == Severity.INFO
        assert rule.cooldown_minutes == 0

    @pytest.mark.parametrize("cooldown", [-1, 1441])
    def test_cooldown_bounds(self, cooldown):
        with pytest.raises(ValidationError):
            Rule(event_type="container.crashed", channel_id="c1", cooldown_minutes=cooldown)

    def test_cooldown_upper_bound_allowed(self):
        rule = Rule(event_type="e", channel_id="c1", cooldown_minutes=1440)

        assert rule.cooldown_minutes == 1440


@pytest.mark.unit
class TestNotificationEvent:
    def test_rejects_blank_message(self):
        with pytest.raises(ValidationError):
            NotificationEvent(event_type="system.startup", severity="info", message="  ")

    def test_rejects_unknown_severity(self):
        with pytest.raises(ValidationError):
            NotificationEvent(event_type="system.startup", severity="fatal", message="x")

    def test_accepts_camel_case_payload(self):
        event = NotificationEvent.model_validate(
            {"eventType": "repo.deploy.failed", "severity": "critical", "message": "x"}
        )

        assert event.event_type == "repo.deploy.failed"
        assert event.metadata == {}


@pytest.mark.unit
class TestDeliveryResult:
    def test_ok(self):
        result = DeliveryResult.ok("sent", recipients=["a@example.com"])

        assert result.success
        assert result.error is None
        assert result.recipients == ["a@example.com"]

    def test_failure(self):
        result = DeliveryResult.failure("failed", "boom", error_code="X", retryable=True)

        assert not result.success
        assert result.retryable
        assert result.error_code == "X"


@pytest.mark.unit
class TestEventCatalog:
    def test_catalog_contains_known_events(self):
        assert len(NOTIFICATION_EVENTS) == 18
        assert NOTIFICATION_EVENTS["container.crashed"].severity == Severity.CRITICAL
        assert NOTIFICATION_EVENTS["auth.login.failed"].category == "auth"

    def test_event_label(self):
        assert event_label("repo.deploy.failed") == "Deployment Failed"

    def test_unknown_event_label_falls_back_to_type(self):
        assert event_label("custom.event") == "custom.event"

    def test_list_events_matches_catalog(self):
        assert {d.event_type for d in list_events()} == set(NOTIFICATION_EVENTS)

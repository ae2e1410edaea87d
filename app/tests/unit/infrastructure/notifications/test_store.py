"""Unit tests for InMemoryNotificationStore."""

from datetime import timedelta

import pytest

from infrastructure.notifications import (
    ChannelNotFoundError,
    DuplicateRuleError,
    HistoryEntry,
    HistoryEntryNotFoundError,
    NotificationProvider,
    NotificationStatus,
    ProviderChangeError,
    RuleNotFoundError,
    Severity,
)
from tests.factories.notifications import make_channel, make_rule


def make_history(channel_id, event_type="container.crashed", **kwargs):
    return HistoryEntry(
        event_type=event_type,
        channel_id=channel_id,
        severity=kwargs.pop("severity", Severity.CRITICAL),
        message=kwargs.pop("message", "Container nginx crashed"),
        **kwargs,
    )


@pytest.mark.unit
class TestChannels:
    def test_save_and_get_channel(self, store):
        saved = store.save_channel(make_channel(NotificationProvider.SLACK))

        fetched = store.get_channel(saved.id)

        assert fetched == saved
        assert fetched is not saved

    def test_get_missing_channel(self, store):
        assert store.get_channel("missing") is None

    def test_returned_channels_are_copies(self, store):
        saved = store.save_channel(make_channel())

        fetched = store.get_channel(saved.id)
        fetched.config["webhookUrl"] = "mutated"

        assert store.get_channel(saved.id).config["webhookUrl"] != "mutated"

    def test_get_channel_by_provider(self, store):
        store.save_channel(make_channel(NotificationProvider.SLACK))
        discord = store.save_channel(make_channel(NotificationProvider.DISCORD))

        assert store.get_channel_by_provider("discord").id == discord.id
        assert store.get_channel_by_provider(NotificationProvider.SMTP) is None

    def test_update_channel(self, store, clock):
        saved = store.save_channel(make_channel())
        clock.advance(timedelta(minutes=1))

        updated = store.update_channel(saved.id, name="Renamed", enabled=False)

        assert updated.name == "Renamed"
        assert updated.enabled is False
        assert updated.updated_at > saved.updated_at
        assert updated.created_at == saved.created_at

    def test_update_channel_rejects_provider_change(self, store):
        saved = store.save_channel(make_channel(NotificationProvider.SLACK))

        with pytest.raises(ProviderChangeError):
            store.update_channel(saved.id, provider=NotificationProvider.DISCORD)

    def test_update_missing_channel(self, store):
        with pytest.raises(ChannelNotFoundError):
            store.update_channel("missing", name="x")

    def test_delete_channel_cascades_rules(self, store):
        channel = store.save_channel(make_channel())
        store.save_rule(make_rule(channel.id))

        assert store.delete_channel(channel.id) is True
        assert store.get_rules() == []
        assert store.delete_channel(channel.id) is False


@pytest.mark.unit
class TestRules:
    def test_save_rule_requires_channel(self, store):
        with pytest.raises(ChannelNotFoundError):
            store.save_rule(make_rule("missing"))

    def test_duplicate_rule_rejected(self, store):
        channel = store.save_channel(make_channel())
        store.save_rule(make_rule(channel.id, event_type="container.crashed"))

        with pytest.raises(DuplicateRuleError):
            store.save_rule(make_rule(channel.id, event_type="container.crashed"))

    def test_get_rules_by_event(self, store):
        slack = store.save_channel(make_channel(NotificationProvider.SLACK))
        discord = store.save_channel(make_channel(NotificationProvider.DISCORD))
        store.save_rule(make_rule(slack.id, event_type="container.crashed"))
        store.save_rule(make_rule(discord.id, event_type="container.crashed"))
        store.save_rule(make_rule(slack.id, event_type="auth.login.failed"))

        rules = store.get_rules_by_event("container.crashed")

        assert {r.channel_id for r in rules} == {slack.id, discord.id}
        assert store.get_rules_by_event("unknown") == []

    def test_rules_matrix_groups_by_event(self, store):
        channel = store.save_channel(make_channel())
        store.save_rule(make_rule(channel.id, event_type="container.crashed"))
        store.save_rule(make_rule(channel.id, event_type="repo.deploy.failed"))

        matrix = store.get_rules_matrix()

        assert set(matrix) == {"container.crashed", "repo.deploy.failed"}
        assert matrix["container.crashed"][0].channel_id == channel.id

    def test_update_rule(self, store):
        channel = store.save_channel(make_channel())
        rule = store.save_rule(make_rule(channel.id))

        updated = store.update_rule(rule.id, min_severity=Severity.CRITICAL, cooldown_minutes=15)

        assert updated.min_severity == Severity.CRITICAL
        assert updated.cooldown_minutes == 15

    def test_update_rule_rejects_collision(self, store):
        channel = store.save_channel(make_channel())
        store.save_rule(make_rule(channel.id, event_type="a"))
        other = store.save_rule(make_rule(channel.id, event_type="b"))

        with pytest.raises(DuplicateRuleError):
            store.update_rule(other.id, event_type="a")

    def test_update_missing_rule(self, store):
        with pytest.raises(RuleNotFoundError):
            store.update_rule("missing", enabled=False)

    def test_delete_rule(self, store):
        channel = store.save_channel(make_channel())
        rule = store.save_rule(make_rule(channel.id))

        assert store.delete_rule(rule.id) is True
        assert store.get_rule(rule.id) is None
        assert store.delete_rule(rule.id) is False


@pytest.mark.unit
class TestHistory:
    def test_add_history_assigns_id_and_timestamp(self, store, clock):
        entry = store.add_history(make_history("c1"))

        assert entry.id
        assert entry.created_at == clock.now
        assert store.get_history(entry.id) == entry

    def test_update_history(self, store):
        entry = store.add_history(make_history("c1", status=NotificationStatus.FAILED))

        updated = store.update_history(
            entry.id, status=NotificationStatus.RETRYING, retry_count=1
        )

        assert updated.status == NotificationStatus.RETRYING
        assert updated.retry_count == 1
        assert updated.created_at == entry.created_at

    def test_update_missing_history(self, store):
        with pytest.raises(HistoryEntryNotFoundError):
            store.update_history("missing", retry_count=1)

    def test_recent_history_newest_first_with_limit(self, store, clock):
        for i in range(5):
            store.add_history(make_history("c1", message=f"event {i}"))
            clock.advance(timedelta(seconds=1))

        recent = store.get_recent_history(limit=3)

        assert [e.message for e in recent] == ["event 4", "event 3", "event 2"]

    def test_history_by_event(self, store):
        store.add_history(make_history("c1", event_type="a"))
        store.add_history(make_history("c1", event_type="b"))

        assert [e.event_type for e in store.get_history_by_event("a")] == ["a"]


@pytest.mark.unit
class TestWasRecentlyNotified:
    def test_zero_cooldown_is_never_recent(self, store, clock):
        store.add_history(
            make_history("c1", status=NotificationStatus.SENT, sent_at=clock.now)
        )

        assert store.was_recently_notified("container.crashed", "c1", 0) is False

    def test_sent_inside_window(self, store, clock):
        store.add_history(
            make_history("c1", status=NotificationStatus.SENT, sent_at=clock.now)
        )
        clock.advance(timedelta(minutes=9))

        assert store.was_recently_notified("container.crashed", "c1", 10) is True

    def test_sent_outside_window(self, store, clock):
        store.add_history(
            make_history("c1", status=NotificationStatus.SENT, sent_at=clock.now)
        )
        clock.advance(timedelta(minutes=11))

        assert store.was_recently_notified("container.crashed", "c1", 10) is False

    def test_failed_entries_do_not_count(self, store):
        store.add_history(make_history("c1", status=NotificationStatus.FAILED))

        assert store.was_recently_notified("container.crashed", "c1", 10) is False

    def test_scoped_to_event_and_channel(self, store, clock):
        store.add_history(
            make_history("c1", status=NotificationStatus.SENT, sent_at=clock.now)
        )

        assert store.was_recently_notified("container.crashed", "c2", 10) is False
        assert store.was_recently_notified("repo.deploy.failed", "c1", 10) is False

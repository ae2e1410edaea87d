"""Notification storage collaborator.

The engine only depends on the ``NotificationStore`` protocol. The
in-memory implementation backs tests, local development and single-process
deployments; persistent backends implement the same protocol.
"""

import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

import structlog

from infrastructure.notifications.errors import (
    ChannelNotFoundError,
    DuplicateRuleError,
    HistoryEntryNotFoundError,
    ProviderChangeError,
    RuleNotFoundError,
)
from infrastructure.notifications.models import (
    Channel,
    HistoryEntry,
    NotificationProvider,
    NotificationStatus,
    Rule,
    new_id,
    utc_now,
)

logger = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 50


class NotificationStore(Protocol):
    """Storage interface for channels, rules and delivery history.

    Implementations must offer read-after-write consistency for history
    writes; the cooldown gate relies on it.

    Methods used by the dispatch path:
        get_rules_by_event: Rules bound to an event type
        get_channel: Channel by id
        add_history / update_history: Append and mutate delivery records
        was_recently_notified: Cooldown lookback query
    """

    def save_channel(self, channel: Channel) -> Channel: ...

    def get_channel(self, channel_id: str) -> Optional[Channel]: ...

    def get_channel_by_provider(
        self, provider: Union[NotificationProvider, str]
    ) -> Optional[Channel]: ...

    def get_channels(self) -> List[Channel]: ...

    def update_channel(self, channel_id: str, **fields: Any) -> Channel: ...

    def delete_channel(self, channel_id: str) -> bool: ...

    def save_rule(self, rule: Rule) -> Rule: ...

    def get_rule(self, rule_id: str) -> Optional[Rule]: ...

    def get_rules(self) -> List[Rule]: ...

    def get_rules_by_event(self, event_type: str) -> List[Rule]: ...

    def get_rules_matrix(self) -> Dict[str, List[Rule]]: ...

    def update_rule(self, rule_id: str, **fields: Any) -> Rule: ...

    def delete_rule(self, rule_id: str) -> bool: ...

    def add_history(self, entry: HistoryEntry) -> HistoryEntry: ...

    def update_history(self, entry_id: str, **fields: Any) -> HistoryEntry: ...

    def get_history(self, entry_id: str) -> Optional[HistoryEntry]: ...

    def get_recent_history(
        self, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[HistoryEntry]: ...

    def get_history_by_event(
        self, event_type: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[HistoryEntry]: ...

    def was_recently_notified(
        self, event_type: str, channel_id: str, cooldown_minutes: int
    ) -> bool: ...


class InMemoryNotificationStore:
    """Thread-safe in-memory implementation of NotificationStore.

    Returned records are copies; mutate them through the update methods.

    Args:
        clock: Returns the current UTC time. Injectable for cooldown tests.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._channels: Dict[str, Channel] = {}
        self._rules: Dict[str, Rule] = {}
        self._history: Dict[str, HistoryEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    # Channels

    def save_channel(self, channel: Channel) -> Channel:
        now = self._clock()
        with self._lock:
            stored = channel.model_copy(
                update={
                    "id": channel.id or new_id(),
                    "created_at": now,
                    "updated_at": now,
                },
                deep=True,
            )
            self._channels[stored.id] = stored
        logger.info(
            "notification_channel_saved",
            channel_id=stored.id,
            provider=stored.provider.value,
        )
        return stored.model_copy(deep=True)

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        with self._lock:
            channel = self._channels.get(channel_id)
            return channel.model_copy(deep=True) if channel else None

    def get_channel_by_provider(
        self, provider: Union[NotificationProvider, str]
    ) -> Optional[Channel]:
        """First channel configured for ``provider``, oldest first."""
        provider = NotificationProvider(provider)
        with self._lock:
            matches = sorted(
                (c for c in self._channels.values() if c.provider == provider),
                key=lambda c: c.created_at,
            )
            return matches[0].model_copy(deep=True) if matches else None

    def get_channels(self) -> List[Channel]:
        with self._lock:
            channels = sorted(self._channels.values(), key=lambda c: c.created_at)
            return [c.model_copy(deep=True) for c in channels]

    def update_channel(self, channel_id: str, **fields: Any) -> Channel:
        """Update mutable channel fields.

        Raises:
            ChannelNotFoundError: If the channel does not exist.
            ProviderChangeError: If ``provider`` would change.
        """
        with self._lock:
            current = self._channels.get(channel_id)
            if current is None:
                raise ChannelNotFoundError(channel_id)
            provider = fields.get("provider")
            if provider and NotificationProvider(provider) != current.provider:
                raise ProviderChangeError(
                    f"Channel {channel_id} provider cannot change "
                    f"from {current.provider.value}"
                )
            fields.pop("id", None)
            fields.pop("created_at", None)
            data = current.model_dump()
            data.update(fields)
            data["updated_at"] = self._clock()
            updated = Channel.model_validate(data)
            self._channels[channel_id] = updated
            return updated.model_copy(deep=True)

    def delete_channel(self, channel_id: str) -> bool:
        """Delete a channel and the rules that reference it."""
        with self._lock:
            if self._channels.pop(channel_id, None) is None:
                return False
            orphaned = [
                r.id for r in self._rules.values() if r.channel_id == channel_id
            ]
            for rule_id in orphaned:
                del self._rules[rule_id]
        logger.info(
            "notification_channel_deleted",
            channel_id=channel_id,
            rules_removed=len(orphaned),
        )
        return True

    # Rules

    def _find_rule(self, event_type: str, channel_id: str) -> Optional[Rule]:
        for rule in self._rules.values():
            if rule.event_type == event_type and rule.channel_id == channel_id:
                return rule
        return None

    def save_rule(self, rule: Rule) -> Rule:
        """Persist a new rule.

        Raises:
            ChannelNotFoundError: If the rule references an unknown channel.
            DuplicateRuleError: If a rule for the same pair already exists.
        """
        now = self._clock()
        with self._lock:
            if rule.channel_id not in self._channels:
                raise ChannelNotFoundError(rule.channel_id)
            if self._find_rule(rule.event_type, rule.channel_id) is not None:
                raise DuplicateRuleError(
                    f"Rule for {rule.event_type} on channel {rule.channel_id} "
                    "already exists"
                )
            stored = rule.model_copy(
                update={
                    "id": rule.id or new_id(),
                    "created_at": now,
                    "updated_at": now,
                },
                deep=True,
            )
            self._rules[stored.id] = stored
            return stored.model_copy(deep=True)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        with self._lock:
            rule = self._rules.get(rule_id)
            return rule.model_copy(deep=True) if rule else None

    def get_rules(self) -> List[Rule]:
        with self._lock:
            rules = sorted(
                self._rules.values(), key=lambda r: (r.event_type, r.created_at)
            )
            return [r.model_copy(deep=True) for r in rules]

    def get_rules_by_event(self, event_type: str) -> List[Rule]:
        with self._lock:
            rules = sorted(
                (r for r in self._rules.values() if r.event_type == event_type),
                key=lambda r: r.created_at,
            )
            return [r.model_copy(deep=True) for r in rules]

    def get_rules_matrix(self) -> Dict[str, List[Rule]]:
        """Rules grouped by event type."""
        matrix: Dict[str, List[Rule]] = {}
        for rule in self.get_rules():
            matrix.setdefault(rule.event_type, []).append(rule)
        return matrix

    def update_rule(self, rule_id: str, **fields: Any) -> Rule:
        """Update a rule.

        Raises:
            RuleNotFoundError: If the rule does not exist.
            ChannelNotFoundError: If ``channel_id`` points to an unknown channel.
            DuplicateRuleError: If the new pair collides with another rule.
        """
        with self._lock:
            current = self._rules.get(rule_id)
            if current is None:
                raise RuleNotFoundError(rule_id)
            fields.pop("id", None)
            fields.pop("created_at", None)
            data = current.model_dump()
            data.update(fields)
            data["updated_at"] = self._clock()
            updated = Rule.model_validate(data)

            if updated.channel_id not in self._channels:
                raise ChannelNotFoundError(updated.channel_id)
            existing = self._find_rule(updated.event_type, updated.channel_id)
            if existing is not None and existing.id != rule_id:
                raise DuplicateRuleError(
                    f"Rule for {updated.event_type} on channel {updated.channel_id} "
                    "already exists"
                )
            self._rules[rule_id] = updated
            return updated.model_copy(deep=True)

    def delete_rule(self, rule_id: str) -> bool:
        with self._lock:
            return self._rules.pop(rule_id, None) is not None

    # History

    def add_history(self, entry: HistoryEntry) -> HistoryEntry:
        """Append a history entry, assigning its id and creation time."""
        with self._lock:
            stored = entry.model_copy(
                update={"id": new_id(), "created_at": self._clock()}, deep=True
            )
            self._history[stored.id] = stored
            return stored.model_copy(deep=True)

    def update_history(self, entry_id: str, **fields: Any) -> HistoryEntry:
        """Apply partial updates to a history entry.

        Raises:
            HistoryEntryNotFoundError: If the entry does not exist.
        """
        with self._lock:
            current = self._history.get(entry_id)
            if current is None:
                raise HistoryEntryNotFoundError(entry_id)
            fields.pop("id", None)
            fields.pop("created_at", None)
            data = current.model_dump()
            data.update(fields)
            updated = HistoryEntry.model_validate(data)
            self._history[entry_id] = updated
            return updated.model_copy(deep=True)

    def get_history(self, entry_id: str) -> Optional[HistoryEntry]:
        with self._lock:
            entry = self._history.get(entry_id)
            return entry.model_copy(deep=True) if entry else None

    def get_recent_history(
        self, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[HistoryEntry]:
        """Most recent history entries, newest first."""
        with self._lock:
            entries = sorted(
                self._history.values(), key=lambda e: e.created_at, reverse=True
            )
            return [e.model_copy(deep=True) for e in entries[: max(limit, 0)]]

    def get_history_by_event(
        self, event_type: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[HistoryEntry]:
        with self._lock:
            entries = sorted(
                (e for e in self._history.values() if e.event_type == event_type),
                key=lambda e: e.created_at,
                reverse=True,
            )
            return [e.model_copy(deep=True) for e in entries[: max(limit, 0)]]

    def was_recently_notified(
        self, event_type: str, channel_id: str, cooldown_minutes: int
    ) -> bool:
        """True when a SENT entry for the pair has ``sent_at`` inside the window.

        A cooldown of zero (or less) disables the check.
        """
        if cooldown_minutes <= 0:
            return False
        cutoff = self._clock() - timedelta(minutes=cooldown_minutes)
        with self._lock:
            return any(
                e.event_type == event_type
                and e.channel_id == channel_id
                and e.status == NotificationStatus.SENT
                and e.sent_at is not None
                and e.sent_at >= cutoff
                for e in self._history.values()
            )

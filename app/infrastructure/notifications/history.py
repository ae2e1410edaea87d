"""Delivery history recording."""

from datetime import datetime
from typing import Any, Callable, List, Optional

import structlog

from infrastructure.notifications.models import (
    DeliveryResult,
    HistoryEntry,
    NotificationEvent,
    NotificationStatus,
    utc_now,
)
from infrastructure.notifications.store import NotificationStore

logger = structlog.get_logger()


class HistoryRecorder:
    """Appends and updates delivery-attempt records.

    One entry is created per (event, rule) delivery group and updated in
    place by every retry, so the final entry reflects the final outcome.
    Only entries with status SENT count for the cooldown lookback.
    """

    def __init__(
        self, store: NotificationStore, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self._store = store
        self._clock = clock

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        return self._store.add_history(entry)

    def update(self, entry_id: str, **fields: Any) -> HistoryEntry:
        return self._store.update_history(entry_id, **fields)

    def record_delivery(
        self,
        event: NotificationEvent,
        channel_id: str,
        result: DeliveryResult,
        recipients: Optional[List[str]] = None,
    ) -> HistoryEntry:
        """Record the outcome of the first delivery attempt."""
        entry = HistoryEntry(
            event_type=event.event_type,
            channel_id=channel_id,
            severity=event.severity,
            message=event.message,
            recipients=result.recipients or recipients,
            status=(
                NotificationStatus.SENT if result.success else NotificationStatus.FAILED
            ),
            error=None if result.success else result.error,
            retry_count=0,
            sent_at=self._clock() if result.success else None,
        )
        stored = self.append(entry)
        logger.debug(
            "history_entry_recorded",
            history_id=stored.id,
            channel_id=channel_id,
            status=stored.status.value,
        )
        return stored

    def record_missing_channel(
        self, event: NotificationEvent, channel_id: str, error: str
    ) -> HistoryEntry:
        return self.append(
            HistoryEntry(
                event_type=event.event_type,
                channel_id=channel_id,
                severity=event.severity,
                message=event.message,
                status=NotificationStatus.FAILED,
                error=error,
            )
        )

    def record_retry(
        self,
        entry_id: str,
        attempt: int,
        result: DeliveryResult,
        final: bool,
    ) -> HistoryEntry:
        """Update an entry after retry ``attempt``.

        Success sets SENT and ``sent_at``; a failure sets RETRYING while
        attempts remain and FAILED once ``final`` is reached.
        """
        if result.success:
            fields: dict[str, Any] = {
                "status": NotificationStatus.SENT,
                "retry_count": attempt,
                "error": None,
                "sent_at": self._clock(),
            }
            if result.recipients:
                fields["recipients"] = result.recipients
        else:
            fields = {
                "status": (
                    NotificationStatus.FAILED if final else NotificationStatus.RETRYING
                ),
                "retry_count": attempt,
                "error": result.error,
            }
        return self.update(entry_id, **fields)

    def was_recently_notified(
        self, event_type: str, channel_id: str, cooldown_minutes: int
    ) -> bool:
        return self._store.was_recently_notified(
            event_type, channel_id, cooldown_minutes
        )

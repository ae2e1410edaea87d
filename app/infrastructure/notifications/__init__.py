"""Event-driven notification dispatch.

Routes platform events (container crashes, deploys, logins, upgrades) to
the channels an operator configured, through five providers (SMTP, Resend,
Slack, Telegram, Discord) with:
- Per-rule enabled, severity and cooldown gates
- Encrypted channel secrets decrypted at dispatch time
- Bounded exponential-backoff retries
- Delivery history for every attempt group

Usage:
    from infrastructure.notifications import NotificationService

    service = NotificationService.from_settings(settings, store)
    result = service.emit_notification_event(
        "container.crashed",
        "critical",
        "Container nginx crashed",
        {"exitCode": 137},
    )
    logger.info("dispatched", sent=result.sent, failed=result.failed)
"""

# Models
from infrastructure.notifications.models import (
    Channel,
    DeliveryResult,
    DispatchResult,
    HistoryEntry,
    NotificationEvent,
    NotificationProvider,
    NotificationStatus,
    Rule,
    RuleOutcome,
    Severity,
)

# Errors
from infrastructure.notifications.errors import (
    ChannelNotFoundError,
    DeliveryError,
    DuplicateRuleError,
    HistoryEntryNotFoundError,
    NotificationError,
    PermanentDeliveryError,
    ProviderChangeError,
    RuleNotFoundError,
    TransientDeliveryError,
)

# Components
from infrastructure.notifications.catalog import (
    NOTIFICATION_EVENTS,
    EventDefinition,
    event_label,
    list_events,
)
from infrastructure.notifications.dispatcher import EventDispatcher
from infrastructure.notifications.events import NotificationEmitter
from infrastructure.notifications.history import HistoryRecorder
from infrastructure.notifications.registry import AdapterRegistry
from infrastructure.notifications.rules import RuleEvaluator
from infrastructure.notifications.secrets import SecretResolver, sensitive_fields
from infrastructure.notifications.service import NotificationService
from infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)

__all__ = [
    # Models
    "Channel",
    "DeliveryResult",
    "DispatchResult",
    "HistoryEntry",
    "NotificationEvent",
    "NotificationProvider",
    "NotificationStatus",
    "Rule",
    "RuleOutcome",
    "Severity",
    # Errors
    "ChannelNotFoundError",
    "DeliveryError",
    "DuplicateRuleError",
    "HistoryEntryNotFoundError",
    "NotificationError",
    "PermanentDeliveryError",
    "ProviderChangeError",
    "RuleNotFoundError",
    "TransientDeliveryError",
    # Components
    "NOTIFICATION_EVENTS",
    "EventDefinition",
    "event_label",
    "list_events",
    "AdapterRegistry",
    "EventDispatcher",
    "HistoryRecorder",
    "InMemoryNotificationStore",
    "NotificationEmitter",
    "NotificationService",
    "NotificationStore",
    "RuleEvaluator",
    "SecretResolver",
    "sensitive_fields",
]

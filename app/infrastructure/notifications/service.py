"""Notification service for dependency injection.

Provides a class-based interface to the notification system for easier DI
and testing: event emission, channel tests and history queries.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

import structlog
from pydantic import ValidationError

from infrastructure.configuration import NotificationSettings
from infrastructure.logging import redact_text
from infrastructure.notifications.dispatcher import EventDispatcher
from infrastructure.notifications.errors import ChannelNotFoundError
from infrastructure.notifications.models import (
    DeliveryResult,
    DispatchResult,
    HistoryEntry,
    NotificationEvent,
    Rule,
    Severity,
)
from infrastructure.notifications.registry import AdapterRegistry
from infrastructure.notifications.secrets import SecretResolver
from infrastructure.notifications.store import DEFAULT_HISTORY_LIMIT, NotificationStore

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


class NotificationService:
    """Class-based notification service.

    Thin facade over the EventDispatcher and AdapterRegistry, wired from one
    store and one settings object.

    Usage:
        # Via dependency injection
        from infrastructure.services import NotificationServiceDep

        @router.post("/events")
        def emit(service: NotificationServiceDep, body: EventRequest):
            result = service.emit_notification_event(
                body.event_type, body.severity, body.message, body.metadata
            )
            return result.model_dump(by_alias=True)

        # Direct instantiation
        service = NotificationService.from_settings(settings, store)
        service.emit_notification_event(
            "container.crashed", "critical", "Container nginx crashed"
        )
    """

    def __init__(
        self,
        store: NotificationStore,
        registry: AdapterRegistry,
        secrets: SecretResolver,
        settings: Optional[NotificationSettings] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ):
        """Initialize notification service.

        Args:
            store: Channel, rule and history store.
            registry: Adapter per provider.
            secrets: Resolver decrypting channel configs.
            settings: Notification settings. Defaults load from environment.
            dispatcher: Optional pre-configured EventDispatcher instance.
        """
        self.settings = settings or NotificationSettings()
        self.store = store
        self.registry = registry
        self.secrets = secrets
        self._dispatcher = dispatcher or EventDispatcher(
            store=store,
            registry=registry,
            secrets=secrets,
            settings=self.settings,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        store: NotificationStore,
        registry: Optional[AdapterRegistry] = None,
    ) -> "NotificationService":
        """Build the service with the default adapter set."""
        from infrastructure.notifications.channels import build_default_adapters

        registry = registry or AdapterRegistry(build_default_adapters(settings))
        return cls(
            store=store,
            registry=registry,
            secrets=SecretResolver(settings.security.MASTER_KEY),
            settings=settings.notifications,
        )

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    def emit_notification_event(
        self,
        event_type: str,
        severity: Severity | str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> DispatchResult:
        """Route a platform event to its channels.

        Never raises: an invalid event or a disabled notification system
        yields an empty aggregate.

        Args:
            event_type: Event identifier, e.g. "container.crashed".
            severity: "info", "warning" or "critical".
            message: Human-readable event text.
            metadata: Optional key/value details appended to the message.

        Returns:
            DispatchResult with sent, failed and skipped counts.
        """
        if not self.settings.enabled:
            logger.info("notifications_disabled", event_type=event_type)
            return DispatchResult(event_type=event_type)

        try:
            event = NotificationEvent(
                event_type=event_type,
                severity=severity,
                message=message,
                metadata=metadata or {},
            )
        except ValidationError as e:
            logger.warning(
                "notification_event_invalid",
                event_type=event_type,
                error=redact_text(e),
            )
            return DispatchResult(event_type=event_type)

        return self._dispatcher.dispatch(event)

    def test_channel(
        self, channel_id: str, recipient: Optional[str] = None
    ) -> DeliveryResult:
        """Send the provider's test message through a stored channel.

        Raises:
            ChannelNotFoundError: If no channel has ``channel_id``.
        """
        channel = self.store.get_channel(channel_id)
        if channel is None:
            raise ChannelNotFoundError(f"Channel not found: {channel_id}")
        if not channel.enabled:
            return DeliveryResult.failure(
                "Channel is disabled",
                "Channel is disabled",
                error_code="CHANNEL_DISABLED",
            )

        config = self.secrets.resolve(channel)
        result = self.registry.test(channel.provider, config, recipient)
        logger.info(
            "notification_channel_tested",
            channel_id=channel.id,
            provider=channel.provider.value,
            success=result.success,
            error_code=result.error_code,
        )
        return result

    def validate_channel_config(self, provider: str, config: Dict[str, Any]) -> bool:
        return self.registry.validate(provider, config)

    def get_history(
        self, limit: Optional[int] = None, event_type: Optional[str] = None
    ) -> List[HistoryEntry]:
        limit = limit or self.settings.history_default_limit or DEFAULT_HISTORY_LIMIT
        if event_type:
            return self.store.get_history_by_event(event_type, limit)
        return self.store.get_recent_history(limit)

    def get_rules_matrix(self) -> Dict[str, List[Rule]]:
        return self.store.get_rules_matrix()

    def shutdown(self, wait: bool = True) -> None:
        self._dispatcher.shutdown(wait_for_retries=wait)

"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    InMemoryNotificationStore,
    NotificationEmitter,
    NotificationService,
    NotificationStore,
)


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    Cached so every package (server lifespan, routes, notification wiring)
    reads the same environment snapshot. Routes should take ``SettingsDep``
    instead so tests can override it.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_store() -> NotificationStore:
    """
    Get application-scoped notification store singleton.

    Returns:
        NotificationStore: Process-wide store for channels, rules and history.
    """
    return InMemoryNotificationStore()


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    Builds the adapter registry, secret resolver and dispatcher once per
    process. The dispatcher's worker pool is shut down by the server lifespan.

    Returns:
        NotificationService: Cached service wired from application settings.

    Usage:
        @router.post("/events")
        def emit(service: NotificationServiceDep, body: EventRequest):
            return service.emit_notification_event(...)
    """
    return NotificationService.from_settings(get_settings(), get_notification_store())


@lru_cache
def get_notification_emitter() -> NotificationEmitter:
    """Get the application-scoped emitter used by internal event producers."""
    return NotificationEmitter(get_notification_service())

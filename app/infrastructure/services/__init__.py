"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    SettingsDep,
    NotificationStoreDep,
    NotificationServiceDep,
)
from infrastructure.services.providers import (
    get_settings,
    get_notification_emitter,
    get_notification_service,
    get_notification_store,
)

__all__ = [
    "SettingsDep",
    "NotificationStoreDep",
    "NotificationServiceDep",
    "get_settings",
    "get_notification_emitter",
    "get_notification_service",
    "get_notification_store",
]

"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated
from fastapi import Depends
from infrastructure.configuration import Settings
from infrastructure.notifications import NotificationService, NotificationStore
from infrastructure.services.providers import (
    get_settings,
    get_notification_service,
    get_notification_store,
)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Notification store dependency (channels, rules, history)
NotificationStoreDep = Annotated[NotificationStore, Depends(get_notification_store)]

# Notification service dependency - event emission, channel tests, history
NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]

__all__ = [
    "SettingsDep",
    "NotificationStoreDep",
    "NotificationServiceDep",
]

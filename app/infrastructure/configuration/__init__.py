"""Infrastructure configuration module - public API.

Centralized configuration for the notification engine using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    NotificationSettings: Dispatch settings class
    RetrySettings: Adapter retry settings class
    SecuritySettings: Master key settings class
    ProviderEndpointSettings: Provider endpoint settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()
    retry_mode = settings.notifications.retry_mode
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features import NotificationSettings
from infrastructure.configuration.infrastructure import (
    RetrySettings,
    SecuritySettings,
)
from infrastructure.configuration.integrations import ProviderEndpointSettings

__all__ = [
    "Settings",
    "NotificationSettings",
    "RetrySettings",
    "SecuritySettings",
    "ProviderEndpointSettings",
]

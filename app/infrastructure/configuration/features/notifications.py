"""Notification dispatch feature settings."""

from typing import Literal

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class NotificationSettings(FeatureSettings):
    """Notification dispatch configuration.

    Environment Variables:
        NOTIFICATIONS_ENABLED: Master switch for event dispatch (default: True)
        NOTIFICATION_INSTANCE_NAME: Name shown in messages and self-tests
        NOTIFICATION_HTTP_TIMEOUT_SECONDS: Per-request timeout for HTTP providers
        NOTIFICATION_RETRY_MAX_ATTEMPTS: Dispatcher retries after a failed delivery
        NOTIFICATION_RETRY_BASE_DELAY_SECONDS: Base delay for dispatcher retries
        NOTIFICATION_RETRY_MODE: 'background' or 'inline'
        NOTIFICATION_MAX_WORKERS: Thread pool size for per-rule deliveries
        NOTIFICATION_HISTORY_DEFAULT_LIMIT: Default page size for history queries

    Dispatcher Backoff:
        Delay before retry n: base_delay * (2 ^ (n - 1))

        Example with defaults (base=2s, attempts=3):
            Retry 1: 2s
            Retry 2: 4s
            Retry 3: 8s

    Retry Modes:
        - background: dispatch returns after first attempts; retries run on
          supervised worker tasks
        - inline: dispatch waits for retries and reports final outcomes

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.notifications.enabled:
            ...
        ```
    """

    enabled: bool = Field(
        default=True,
        alias="NOTIFICATIONS_ENABLED",
        description="Enable notification event dispatch",
    )
    instance_name: str = Field(
        default="DockPilot",
        alias="NOTIFICATION_INSTANCE_NAME",
        description="Display name used as sender and in self-test messages",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        alias="NOTIFICATION_HTTP_TIMEOUT_SECONDS",
        description="Timeout applied to every provider HTTP request (seconds)",
    )
    retry_max_attempts: int = Field(
        default=3,
        ge=0,
        alias="NOTIFICATION_RETRY_MAX_ATTEMPTS",
        description="Retries attempted after a failed first delivery",
    )
    retry_base_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        alias="NOTIFICATION_RETRY_BASE_DELAY_SECONDS",
        description="Base delay for dispatcher retry backoff (seconds)",
    )
    retry_mode: Literal["background", "inline"] = Field(
        default="background",
        alias="NOTIFICATION_RETRY_MODE",
        description="Whether dispatch waits for retries to finish",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        alias="NOTIFICATION_MAX_WORKERS",
        description="Thread pool size for concurrent per-rule delivery",
    )
    history_default_limit: int = Field(
        default=50,
        ge=1,
        alias="NOTIFICATION_HISTORY_DEFAULT_LIMIT",
        description="Default number of history entries returned by queries",
    )

"""Adapter retry infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class RetrySettings(InfrastructureSettings):
    """Retry configuration for the network exchange inside each channel adapter.

    Every adapter wraps its single request (HTTP POST, SMTP session) in
    ``with_retry``. These values bound that inner loop; the dispatcher's own
    delivery retries are configured by ``NotificationSettings``.

    Environment Variables:
        RETRY_MAX_ATTEMPTS: Total attempts per network exchange (default: 3)
        RETRY_BASE_DELAY_SECONDS: Base exponential backoff delay (default: 1s)

    Exponential Backoff:
        Delay before attempt n+1: base_delay * (2 ^ (n - 1))

        Example with defaults (base=1s):
            After attempt 1: 1s
            After attempt 2: 2s
            Attempt 3 failure is raised to the caller

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        max_attempts = settings.retry.max_attempts
        ```
    """

    max_attempts: int = Field(
        default=3,
        ge=1,
        alias="RETRY_MAX_ATTEMPTS",
        description="Total attempts for one adapter network exchange",
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        alias="RETRY_BASE_DELAY_SECONDS",
        description="Base delay for exponential backoff (seconds)",
    )

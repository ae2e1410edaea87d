"""Notification provider endpoint settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class ProviderEndpointSettings(IntegrationSettings):
    """Base URLs of the HTTP notification providers.

    Overridable so tests and self-hosted gateways can point adapters
    elsewhere.

    Environment Variables:
        RESEND_API_URL: Resend email endpoint
        TELEGRAM_API_URL: Telegram Bot API base URL

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        url = settings.providers.RESEND_API_URL
        ```
    """

    RESEND_API_URL: str = Field(
        default="https://api.resend.com/emails", alias="RESEND_API_URL"
    )
    TELEGRAM_API_URL: str = Field(
        default="https://api.telegram.org", alias="TELEGRAM_API_URL"
    )

"""Resend transactional email adapter."""

from typing import List, Optional

from pydantic import EmailStr, Field

from infrastructure.configuration import ProviderEndpointSettings
from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
)
from infrastructure.notifications.errors import PermanentDeliveryError
from infrastructure.notifications.models import DeliveryResult, NotificationProvider


class ResendConfig(ProviderConfig):
    """Resend API configuration.

    Attributes:
        api_key: Resend API key (encrypted at rest)
        from_address: Verified sender address
        recipients: Default recipients for event notifications
    """

    api_key: str = Field(..., min_length=1)
    from_address: EmailStr
    recipients: List[EmailStr] = Field(default_factory=list)


class ResendAdapter(ChannelAdapter):
    """Email delivery through the Resend HTTP API."""

    provider = NotificationProvider.RESEND
    config_model = ResendConfig

    def __init__(
        self,
        *args,
        endpoints: Optional[ProviderEndpointSettings] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.endpoints = endpoints or ProviderEndpointSettings()

    def default_recipients(self, config: ResendConfig) -> List[str]:
        return [str(r) for r in config.recipients] or [str(config.from_address)]

    def _deliver(
        self, message: str, options: SendOptions, config: ResendConfig
    ) -> DeliveryResult:
        to = options.to or [str(r) for r in config.recipients]
        if not to:
            raise PermanentDeliveryError(
                'Missing "to" parameter', error_code="MISSING_RECIPIENT"
            )

        payload = {
            "from": str(config.from_address),
            "to": to,
            "subject": options.subject,
            "text": message,
        }
        if options.html:
            payload["html"] = options.html

        self.log.info("resend_send_started", recipient_count=len(to))
        result = self._post_json(
            self.endpoints.RESEND_API_URL,
            payload,
            headers={"Authorization": f"Bearer {config.api_key}"},
        )
        email_id = result.data.get("id") if isinstance(result.data, dict) else None
        self.log.info("resend_email_accepted", email_id=email_id)
        return DeliveryResult.ok("Email sent successfully", recipients=to)

    def _run_test(
        self, config: ResendConfig, recipient: Optional[str]
    ) -> DeliveryResult:
        return super()._run_test(config, recipient or str(config.from_address))

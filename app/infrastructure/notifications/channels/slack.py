"""Slack incoming webhook adapter."""

from typing import Optional

from pydantic import Field, field_validator

from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
    require_http_url,
)
from infrastructure.notifications.models import DeliveryResult, NotificationProvider

RATE_LIMIT_DEFAULT_SECONDS = 1.0


class SlackConfig(ProviderConfig):
    """Slack webhook configuration.

    Attributes:
        webhook_url: Incoming webhook URL (encrypted at rest)
        username: Optional display name override
        icon_emoji: Optional icon override
    """

    webhook_url: str = Field(..., min_length=1)
    username: Optional[str] = None
    icon_emoji: Optional[str] = None

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        return require_http_url(v)


class SlackAdapter(ChannelAdapter):
    """Message delivery through a Slack incoming webhook."""

    provider = NotificationProvider.SLACK
    config_model = SlackConfig

    def _deliver(
        self, message: str, options: SendOptions, config: SlackConfig
    ) -> DeliveryResult:
        payload = {
            "text": message,
            "username": (
                options.username or config.username or self.settings.instance_name
            ),
            "icon_emoji": options.icon_emoji or config.icon_emoji or ":rocket:",
        }
        self._post_json(
            config.webhook_url,
            payload,
            rate_limit_delay=RATE_LIMIT_DEFAULT_SECONDS,
        )
        return DeliveryResult.ok("Message sent to Slack")

    def _run_test(
        self, config: SlackConfig, recipient: Optional[str]
    ) -> DeliveryResult:
        return self.send(
            self._test_message(),
            SendOptions(
                config=config.model_dump(by_alias=True, mode="json"),
                username=f"{self.settings.instance_name} Test",
                icon_emoji=":test_tube:",
            ),
        )

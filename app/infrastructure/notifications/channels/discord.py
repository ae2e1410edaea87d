"""Discord webhook adapter."""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
    require_http_url,
)
from infrastructure.notifications.models import DeliveryResult, NotificationProvider

RATE_LIMIT_DEFAULT_SECONDS = 5.0
DISCORD_CONTENT_LIMIT = 2000
TEST_EMBED_COLOR = 0x00FF00


class DiscordConfig(ProviderConfig):
    """Discord webhook configuration.

    Attributes:
        webhook_url: Webhook URL (encrypted at rest)
        username: Optional display name override
    """

    webhook_url: str = Field(..., min_length=1)
    username: Optional[str] = None

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        return require_http_url(v)


class DiscordAdapter(ChannelAdapter):
    """Message delivery through a Discord webhook."""

    provider = NotificationProvider.DISCORD
    config_model = DiscordConfig

    def _deliver(
        self, message: str, options: SendOptions, config: DiscordConfig
    ) -> DeliveryResult:
        payload: Dict[str, Any]
        if options.embed:
            payload = {"embeds": [options.embed]}
        else:
            payload = {"content": message[:DISCORD_CONTENT_LIMIT]}
        username = options.username or config.username
        if username:
            payload["username"] = username

        self._post_json(
            config.webhook_url,
            payload,
            rate_limit_delay=RATE_LIMIT_DEFAULT_SECONDS,
        )
        return DeliveryResult.ok("Message sent to Discord")

    def _run_test(
        self, config: DiscordConfig, recipient: Optional[str]
    ) -> DeliveryResult:
        embed = {
            "title": f"{self.settings.instance_name} Test",
            "description": self._test_message(),
            "color": TEST_EMBED_COLOR,
        }
        return self.send(
            "",
            SendOptions(
                config=config.model_dump(by_alias=True, mode="json"),
                embed=embed,
                username=f"{self.settings.instance_name} Test",
            ),
        )

"""Telegram Bot API adapter."""

import html
import re
from typing import Optional, Union

from pydantic import Field, field_validator

from infrastructure.configuration import ProviderEndpointSettings
from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
)
from infrastructure.notifications.errors import PermanentDeliveryError
from infrastructure.notifications.models import DeliveryResult, NotificationProvider

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"(?<![\w])_(.+?)_(?![\w])")
_CODE_RE = re.compile(r"`(.+?)`")


def format_html_message(text: str) -> str:
    """Escape ``text`` for Telegram's HTML dialect, then apply light markup.

    Markup-significant characters (``&``, ``<``, ``>``) are neutralized
    first, so only ``**bold**``, ``_italic_`` and ```code``` markers can
    produce tags.

    Example:
        >>> format_html_message("**Deploy** <prod> failed")
        '<b>Deploy</b> &lt;prod&gt; failed'
    """
    escaped = html.escape(text, quote=False)
    escaped = _BOLD_RE.sub(r"<b>\1</b>", escaped)
    escaped = _ITALIC_RE.sub(r"<i>\1</i>", escaped)
    escaped = _CODE_RE.sub(r"<code>\1</code>", escaped)
    return escaped


class TelegramConfig(ProviderConfig):
    """Telegram bot configuration.

    Attributes:
        bot_token: Bot API token (encrypted at rest)
        chat_id: Target chat, group or channel identifier
    """

    bot_token: str = Field(..., min_length=1)
    chat_id: str = Field(..., min_length=1)

    @field_validator("chat_id", mode="before")
    @classmethod
    def coerce_chat_id(cls, v: Union[str, int]) -> str:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class TelegramAdapter(ChannelAdapter):
    """Message delivery through the Telegram Bot API ``sendMessage`` method."""

    provider = NotificationProvider.TELEGRAM
    config_model = TelegramConfig

    def __init__(
        self,
        *args,
        endpoints: Optional[ProviderEndpointSettings] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.endpoints = endpoints or ProviderEndpointSettings()

    def _deliver(
        self, message: str, options: SendOptions, config: TelegramConfig
    ) -> DeliveryResult:
        parse_mode = options.parse_mode or "HTML"
        text = format_html_message(message) if parse_mode == "HTML" else message
        base_url = self.endpoints.TELEGRAM_API_URL.rstrip("/")
        url = f"{base_url}/bot{config.bot_token}/sendMessage"

        result = self._post_json(
            url,
            {
                "chat_id": config.chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "disable_notification": options.silent,
            },
        )
        body = result.data if isinstance(result.data, dict) else {}
        if body.get("ok") is False:
            raise PermanentDeliveryError(
                f"Telegram API error: {body.get('description', 'request rejected')}",
                error_code="TELEGRAM_ERROR",
            )
        message_id = (body.get("result") or {}).get("message_id")
        self.log.info("telegram_message_accepted", message_id=message_id)
        return DeliveryResult.ok("Message sent to Telegram")

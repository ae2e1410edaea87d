"""Provider channel adapters.

One adapter per ``NotificationProvider``; ``build_default_adapters`` creates
the fixed set registered at startup.
"""

from typing import Callable, Dict, Optional

import requests

from infrastructure.configuration import Settings
from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
)
from infrastructure.notifications.channels.discord import DiscordAdapter, DiscordConfig
from infrastructure.notifications.channels.resend import ResendAdapter, ResendConfig
from infrastructure.notifications.channels.slack import SlackAdapter, SlackConfig
from infrastructure.notifications.channels.smtp import SmtpAdapter, SmtpConfig
from infrastructure.notifications.channels.telegram import (
    TelegramAdapter,
    TelegramConfig,
    format_html_message,
)
from infrastructure.notifications.models import NotificationProvider


def build_default_adapters(
    settings: Settings,
    session: Optional[requests.Session] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Dict[NotificationProvider, ChannelAdapter]:
    """Instantiate every provider adapter from application settings."""
    common = {
        "settings": settings.notifications,
        "retry_settings": settings.retry,
        "session": session or requests.Session(),
    }
    if sleep is not None:
        common["sleep"] = sleep

    adapters = [
        SmtpAdapter(**common),
        ResendAdapter(endpoints=settings.providers, **common),
        SlackAdapter(**common),
        TelegramAdapter(endpoints=settings.providers, **common),
        DiscordAdapter(**common),
    ]
    return {adapter.provider: adapter for adapter in adapters}


__all__ = [
    "ChannelAdapter",
    "ProviderConfig",
    "SendOptions",
    "DiscordAdapter",
    "DiscordConfig",
    "ResendAdapter",
    "ResendConfig",
    "SlackAdapter",
    "SlackConfig",
    "SmtpAdapter",
    "SmtpConfig",
    "TelegramAdapter",
    "TelegramConfig",
    "build_default_adapters",
    "format_html_message",
]

"""Decryption of sensitive channel configuration fields."""

from typing import Any, Dict, Mapping, Optional, Tuple

import structlog

from infrastructure.notifications.models import Channel, NotificationProvider
from infrastructure.security import (
    CryptoError,
    decrypt,
    encrypt,
    is_encrypted,
)

logger = structlog.get_logger()

SENSITIVE_FIELDS: Mapping[NotificationProvider, Tuple[str, ...]] = {
    NotificationProvider.SMTP: ("password",),
    NotificationProvider.RESEND: ("apiKey",),
    NotificationProvider.SLACK: ("webhookUrl",),
    NotificationProvider.TELEGRAM: ("botToken",),
    NotificationProvider.DISCORD: ("webhookUrl",),
}

_SNAKE_CASE = {
    "apiKey": "api_key",
    "webhookUrl": "webhook_url",
    "botToken": "bot_token",
}


def sensitive_fields(provider: NotificationProvider) -> Tuple[str, ...]:
    """Config keys (camelCase and snake_case) holding secrets for ``provider``."""
    fields = SENSITIVE_FIELDS.get(NotificationProvider(provider), ())
    return fields + tuple(_SNAKE_CASE[f] for f in fields if f in _SNAKE_CASE)


class SecretResolver:
    """Decrypts a channel's sensitive config fields with the master key.

    Decryption is lenient: a field that fails to decrypt is kept as stored
    and a warning is logged, since legacy channels may hold plaintext.

    Args:
        master_key: Process-wide master key, or None when not configured.
    """

    def __init__(self, master_key: Optional[str]):
        self._master_key = master_key
        if not master_key:
            logger.warning("secret_resolver_master_key_missing")

    def resolve(self, channel: Channel) -> Dict[str, Any]:
        """Return the channel's provider config with secrets decrypted.

        Channel-level ``fromName``/``fromAddress`` fill the config of email
        providers when the config lacks them. The channel is not modified.
        """
        config = dict(channel.config)
        provider = NotificationProvider(channel.provider)

        if provider.is_email:
            if channel.from_name and not config.get("fromName"):
                config["fromName"] = channel.from_name
            if channel.from_address and not config.get("fromAddress"):
                config["fromAddress"] = channel.from_address

        for field in sensitive_fields(provider):
            value = config.get(field)
            if not isinstance(value, str) or not is_encrypted(value):
                continue
            if not self._master_key:
                logger.warning(
                    "secret_field_not_decrypted",
                    channel_id=channel.id,
                    provider=provider.value,
                    field=field,
                    reason="master key not configured",
                )
                continue
            try:
                config[field] = decrypt(value, self._master_key)
            except CryptoError as e:
                logger.warning(
                    "secret_field_decryption_failed",
                    channel_id=channel.id,
                    provider=provider.value,
                    field=field,
                    error=str(e),
                )
        return config

    def encrypt_config(
        self, provider: NotificationProvider, config: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Encrypt the sensitive fields of ``config`` for storage.

        Raises:
            InvalidMasterKeyError: If no usable master key is configured.
        """
        encrypted = dict(config)
        for field in sensitive_fields(provider):
            value = encrypted.get(field)
            if isinstance(value, str) and value:
                encrypted[field] = encrypt(value, self._master_key or "")
        return encrypted

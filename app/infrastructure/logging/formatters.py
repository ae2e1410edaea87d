"""Structlog processors and text scrubbers for safe logging.

Provider credentials flow through the notification engine in decrypted form,
so every log entry passes through ``mask_sensitive_data`` and every free-text
error produced by a provider passes through ``redact_text`` before it is
logged or stored in delivery history.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data, redact_text
"""

import re
from typing import Any

# Sensitive field patterns that should be masked in logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "auth",
        "bearer",
        "credential",
        "master_key",
        "webhook_url",
        "webhookurl",
        "bot_token",
        "bottoken",
    }
)

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_KEY_VALUE_RE = re.compile(
    r"(password|pass|pwd|secret|key|token)\s*[:=]\s*\S+", re.IGNORECASE
)
_BOT_TOKEN_RE = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
_WEBHOOK_PATH_RE = re.compile(r"/(services|api/webhooks)/[^\s'\")]+")


def redact_text(text: Any) -> str:
    """Scrub credentials and personal data from free text.

    - email addresses become ``[EMAIL]``
    - ``password=...``, ``token: ...`` and similar pairs become ``name=***``
    - Telegram ``bot<token>`` URL segments become ``bot***``
    - Slack and Discord webhook paths keep only their prefix

    Args:
        text: Any value; non-strings are converted with ``str``.

    Returns:
        The scrubbed string.
    """
    if text is None:
        return ""
    value = str(text)
    value = _EMAIL_RE.sub("[EMAIL]", value)
    value = _KEY_VALUE_RE.sub(lambda m: f"{m.group(1)}=***", value)
    value = _BOT_TOKEN_RE.sub("bot***", value)
    value = _WEBHOOK_PATH_RE.sub(lambda m: f"/{m.group(1)}/***", value)
    return value


def _is_sensitive(key: str, patterns: frozenset[str]) -> bool:
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in patterns)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive data in log entries.

    Values whose key contains a sensitive pattern (case-insensitive) are
    replaced. Nested dictionaries, such as a provider config passed as a
    single field, are masked recursively.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def _mask(data: dict[str, Any]) -> dict[str, Any]:
        masked: dict[str, Any] = {}
        for key, value in data.items():
            if _is_sensitive(key, patterns) and value is not None:
                masked[key] = mask_value
            elif isinstance(value, dict):
                masked[key] = _mask(value)
            else:
                masked[key] = value
        return masked

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        return _mask(event_dict)

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Provider error bodies can be arbitrarily large HTML pages.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor

"""Bounded retry for provider calls and delivery retries.

Usage:
    from infrastructure.resilience.retry import RetryConfig, with_retry

    result = with_retry(
        lambda: session.post(url, json=payload, timeout=30),
        RetryConfig(max_attempts=3, base_delay_seconds=1),
        operation_name="slack_webhook_post",
    )
"""

from infrastructure.resilience.retry.config import RetryConfig
from infrastructure.resilience.retry.executor import with_retry

__all__ = [
    "RetryConfig",
    "with_retry",
]

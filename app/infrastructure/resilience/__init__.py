"""Resilience patterns and implementations."""

from infrastructure.resilience.retry import RetryConfig, with_retry

__all__ = [
    "RetryConfig",
    "with_retry",
]

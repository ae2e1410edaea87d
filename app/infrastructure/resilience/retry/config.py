"""Retry executor configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for bounded exponential-backoff retry.

    Attributes:
        max_attempts: Total number of attempts, including the first one
        base_delay_seconds: Delay after the first failed attempt; doubles for
            every following attempt
        delay_first_attempt: Also wait ``base_delay_seconds`` before the very
            first attempt. Used when the caller has already failed once and
            every call through the executor is itself a retry.

    Example:
        # Adapter-internal default: 1s, 2s between three attempts
        config = RetryConfig()

        # Dispatcher retries: waits 2s, 4s, 8s before retries 1..3
        config = RetryConfig(max_attempts=3, base_delay_seconds=2, delay_first_attempt=True)
    """

    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    delay_first_attempt: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Backoff delay associated with ``attempt`` (1-based)."""
        return self.base_delay_seconds * (2 ** (attempt - 1))

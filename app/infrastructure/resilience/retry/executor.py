"""Bounded exponential-backoff retry for synchronous operations."""

import time
from typing import Callable, Optional, TypeVar

import structlog

from infrastructure.logging import redact_text
from infrastructure.resilience.retry.config import RetryConfig

logger = structlog.get_logger()

T = TypeVar("T")


def _is_retryable(exc: BaseException) -> bool:
    return bool(getattr(exc, "retryable", True))


def with_retry(
    operation: Callable[[], T],
    config: Optional[RetryConfig] = None,
    *,
    operation_name: str = "operation",
    should_retry: Callable[[BaseException], bool] = _is_retryable,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` with bounded exponential-backoff retry.

    Attempts ``operation`` up to ``config.max_attempts`` times. After failed
    attempt ``n`` (when another attempt remains) the executor sleeps
    ``base_delay_seconds * 2 ** (n - 1)``. With ``delay_first_attempt`` the
    same delay is applied before attempt ``n`` instead, including the first.

    Exceptions for which ``should_retry`` returns False are raised
    immediately. By default an exception is retried unless it carries a
    falsy ``retryable`` attribute.

    Args:
        operation: Zero-argument callable to run.
        config: Retry limits. Defaults to ``RetryConfig()``.
        operation_name: Name used in log events.
        should_retry: Predicate deciding whether an exception is transient.
        sleep: Sleep function, injectable for tests.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        The last exception raised by ``operation``.
    """
    config = config or RetryConfig()
    log = logger.bind(operation=operation_name, max_attempts=config.max_attempts)
    started = time.monotonic()

    for attempt in range(1, config.max_attempts + 1):
        if config.delay_first_attempt:
            delay = config.delay_for(attempt)
            if delay > 0:
                sleep(delay)

        log.debug("retry_attempt_started", attempt=attempt)
        try:
            result = operation()
        except Exception as e:
            elapsed_ms = int((time.monotonic() - started) * 1000)
            retryable = should_retry(e)
            if not retryable or attempt == config.max_attempts:
                log.error(
                    "retry_exhausted" if retryable else "retry_aborted",
                    attempt=attempt,
                    elapsed_ms=elapsed_ms,
                    error=redact_text(e),
                    error_type=type(e).__name__,
                )
                raise

            delay = 0.0 if config.delay_first_attempt else config.delay_for(attempt)
            log.warning(
                "retry_attempt_failed",
                attempt=attempt,
                next_delay_seconds=delay if delay else None,
                error=redact_text(e),
                error_type=type(e).__name__,
            )
            if delay > 0:
                sleep(delay)
            continue

        elapsed_ms = int((time.monotonic() - started) * 1000)
        if attempt > 1:
            log.info("retry_succeeded", attempt=attempt, elapsed_ms=elapsed_ms)
        else:
            log.debug("retry_succeeded", attempt=attempt, elapsed_ms=elapsed_ms)
        return result

    # max_attempts >= 1 guarantees the loop returns or raises
    raise RuntimeError("with_retry exited without a result")

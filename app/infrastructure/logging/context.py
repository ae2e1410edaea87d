"""Context binding for structured logging.

Binds correlation ids for inbound requests and dispatch ids for event
processing so every log line emitted while handling one event can be
grouped together.

Usage:
    from infrastructure.logging import bind_dispatch_context

    with bind_dispatch_context(event_type="container.crashed"):
        logger.info("dispatch_started")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind request-scoped context to all logs within the block.

    Args:
        correlation_id: Unique request identifier. Auto-generated if not provided.
        request_path: HTTP request path (e.g., "/notifications/events").
        request_method: HTTP method (e.g., "POST").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id in effect.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if request_path is not None:
        context["request_path"] = request_path
    if request_method is not None:
        context["request_method"] = request_method
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


@contextmanager
def bind_dispatch_context(
    event_type: str, dispatch_id: Optional[str] = None
) -> Generator[str, None, None]:
    """Bind ``event_type`` and ``dispatch_id`` for one event dispatch.

    Yields:
        The dispatch id in effect.
    """
    dispatch_id = dispatch_id or uuid.uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(
        event_type=event_type, dispatch_id=dispatch_id
    )
    try:
        yield dispatch_id
    finally:
        structlog.contextvars.unbind_contextvars("event_type", "dispatch_id")


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")

"""Structured logging infrastructure.

Centralized structlog configuration and utilities.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request-scoped logging
    - bind_dispatch_context(): Context manager for one event dispatch
    - get_correlation_id(): Get current correlation ID from context

Formatters:
    - mask_sensitive_data(): Processor to redact sensitive fields
    - truncate_large_values(): Processor to limit string lengths
    - redact_text(): Scrub credentials and emails from free text
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_dispatch_context,
    bind_request_context,
    get_correlation_id,
)

from infrastructure.logging.formatters import (
    mask_sensitive_data,
    redact_text,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_dispatch_context",
    "bind_request_context",
    "get_correlation_id",
    # Formatters
    "mask_sensitive_data",
    "redact_text",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]

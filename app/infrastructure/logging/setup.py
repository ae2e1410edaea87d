"""Structlog configuration for the dispatch service.

``configure_logging`` is called once by the server lifespan. Modules then
log through ``structlog.get_logger()`` (or ``get_module_logger()`` where the
component name is useful) with snake_case event names:

    logger = structlog.get_logger()
    logger.info("notification_sent", channel_id=channel.id, provider="slack")

Console rendering is used outside production, JSON lines in production.
Secrets are masked and oversized values truncated in both modes.
"""

import inspect
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.configuration import Settings
from infrastructure.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
)

# HTTP client libraries log every provider request at DEBUG/INFO
NOISY_LOGGERS = ("urllib3", "requests", "slowapi")

SUPPRESSED_LEVEL = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _base_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        mask_sensitive_data(),
        truncate_large_values(),
    ]


def _renderer(is_production: bool) -> Any:
    if is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog and the standard library root logger.

    Under pytest every record is dropped so test output stays clean; the
    secret-masking processor still runs so processors are exercised.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to Settings.LOG_LEVEL.
        is_production: JSON output when True, console output otherwise.
            Defaults to Settings.is_production.

    Returns:
        A configured BoundLogger.
    """
    if _is_test_environment():
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                mask_sensitive_data(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SUPPRESSED_LEVEL, force=True)
        logging.root.setLevel(SUPPRESSED_LEVEL)
        return structlog.stdlib.get_logger()

    if log_level is None or is_production is None:
        settings = Settings()
        log_level = log_level or settings.LOG_LEVEL
        if is_production is None:
            is_production = settings.is_production

    structlog.configure(
        processors=_base_processors() + [_renderer(is_production)],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=_resolve_level(log_level))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Logger bound with the calling module's name.

    Example:
        # In api/v1/routes/notifications.py
        logger = get_module_logger()
        # context: {"component": "notifications",
        #           "module_path": "api.v1.routes.notifications"}
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    module = inspect.getmodule(caller) if caller is not None else None
    if module is None:
        return logger.bind(component="unknown")

    module_name = module.__name__
    return logger.bind(component=module_name.split(".")[-1], module_path=module_name)

from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import (
    get_notification_emitter,
    get_notification_service,
    get_settings,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 30.0


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _log_configuration(settings: "Settings", logger: BoundLogger) -> None:
    """Log top-level values and the field names of each nested section."""
    top_level = {}
    for name, value in settings.model_dump().items():
        if isinstance(value, dict):
            logger.info("configuration_loaded", section=name, keys=sorted(value))
        else:
            top_level[name] = value
    logger.info("configuration_initialized", **top_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _log_configuration(settings, logger)

    service = get_notification_service()
    app.state.notification_service = service
    logger.info(
        "notification_service_started",
        enabled=settings.notifications.enabled,
        providers=[p.value for p in service.registry.providers],
        retry_mode=settings.notifications.retry_mode,
    )
    get_notification_emitter().emit_system_startup(settings.GIT_SHA)

    yield

    logger.info("application_shutdown")

    drained = service.dispatcher.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT_SECONDS)
    if not drained:
        logger.warning(
            "notification_retries_abandoned",
            pending=service.dispatcher.pending_retries(),
        )
    service.shutdown(wait=drained)
    logger.info("notification_service_stopped")

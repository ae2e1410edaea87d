from typing import Any, Dict, Optional

from api.dependencies.rate_limits import get_limiter
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    ChannelNotFoundError,
    Severity,
    list_events,
)
from infrastructure.services import NotificationServiceDep

logger = get_module_logger()
router = APIRouter(tags=["Notifications"])
limiter = get_limiter()


class EventRequest(BaseModel):
    """Inbound platform event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_type: str = Field(..., min_length=1)
    severity: Severity
    message: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ChannelTestRequest(BaseModel):
    recipient: Optional[str] = None


@router.post("/notifications/events")
@limiter.limit("30/minute")
def emit_event(
    request: Request,  # pylint: disable=unused-argument
    body: EventRequest,
    service: NotificationServiceDep,
):
    """Forward an event from an internal caller to the dispatch path.

    Unauthenticated: callers are trusted internal services.

    Returns:
        dict: ``{success, message, data}`` where ``data`` is the dispatch
            aggregate (sent, failed, skipped and per-rule results).
    """
    result = service.emit_notification_event(
        body.event_type, body.severity, body.message, body.metadata
    )
    logger.info(
        "notification_event_received",
        event_type=body.event_type,
        sent=result.sent,
        failed=result.failed,
        skipped=result.skipped,
    )
    return {
        "success": True,
        "message": "Event processed successfully",
        "data": result.model_dump(by_alias=True, mode="json"),
    }


@router.get("/notifications/history")
@limiter.limit("60/minute")
def get_history(
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
    limit: int = Query(default=50, ge=1, le=500),
    event_type: Optional[str] = Query(default=None, alias="eventType"),
):
    """Most recent delivery history entries, newest first."""
    history = service.get_history(limit=limit, event_type=event_type)
    return {
        "success": True,
        "data": {
            "history": [
                entry.model_dump(by_alias=True, mode="json") for entry in history
            ]
        },
    }


@router.get("/notifications/rules/matrix")
@limiter.limit("60/minute")
def get_rules_matrix(
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
):
    """Rules grouped by event type, plus the catalog of known events."""
    matrix = service.get_rules_matrix()
    return {
        "success": True,
        "data": {
            "matrix": {
                event_type: [rule.model_dump(by_alias=True, mode="json") for rule in rules]
                for event_type, rules in matrix.items()
            },
            "events": [
                {
                    "eventType": definition.event_type,
                    "label": definition.label,
                    "category": definition.category,
                    "severity": definition.severity.value,
                }
                for definition in list_events()
            ],
        },
    }


@router.post("/notifications/channels/{channel_id}/test")
@limiter.limit("10/minute")
def test_channel(
    channel_id: str,
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
    body: Optional[ChannelTestRequest] = None,
):
    """Run the provider self-test against a stored channel.

    Raises:
        HTTPException: 404 if the channel does not exist.
    """
    recipient = body.recipient if body else None
    try:
        result = service.test_channel(channel_id, recipient)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail="Channel not found") from e

    return {
        "success": result.success,
        "message": result.message,
        "data": result.model_dump(by_alias=True, mode="json"),
    }

"""Notification engine core models.

Channels, rules and delivery history are administrative records owned by the
storage collaborator; events and results are ephemeral values produced while
dispatching.

Uses Pydantic BaseModel for:
- Runtime validation of records coming back from storage
- camelCase serialization for the HTTP layer (``by_alias=True``)
- Consistent error messages for invalid input
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class NotificationProvider(str, Enum):
    """Supported delivery providers.

    The provider of a channel is fixed when the channel is created.
    """

    SMTP = "smtp"
    RESEND = "resend"
    SLACK = "slack"
    TELEGRAM = "telegram"
    DISCORD = "discord"

    @property
    def is_email(self) -> bool:
        return self in (NotificationProvider.SMTP, NotificationProvider.RESEND)


class Severity(str, Enum):
    """Event severity, ordered info < warning < critical."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        """True when this severity is greater than or equal to ``other``."""
        return self.rank >= Severity(other).rank


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
}


class NotificationStatus(str, Enum):
    """Delivery status recorded on a history entry."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    RETRYING = "retrying"


class NotificationModel(BaseModel):
    """Base model accepting snake_case or camelCase input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class Channel(NotificationModel):
    """A configured delivery destination.

    ``config`` holds the provider configuration as stored: sensitive fields
    (password, API key, webhook URL, bot token) are individually encrypted.
    It is accepted either as a mapping or as its serialized JSON form.

    Attributes:
        id: Channel identifier
        provider: Delivery provider (immutable after creation)
        name: Display name
        enabled: Whether the channel is active
        config: Provider configuration with encrypted sensitive fields
        from_name: Optional sender display name for email providers
        from_address: Optional sender address for email providers
    """

    id: str = Field(default_factory=new_id)
    provider: NotificationProvider
    name: str
    enabled: bool = True
    config: Dict[str, Any] = Field(default_factory=dict, alias="encryptedConfig")
    from_name: Optional[str] = None
    from_address: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("config", mode="before")
    @classmethod
    def parse_serialized_config(cls, v: Any) -> Any:
        """Accept the stored JSON blob as well as a mapping."""
        if isinstance(v, (str, bytes)):
            return json.loads(v) if v else {}
        return v


class Rule(NotificationModel):
    """Binds an event type to a channel.

    ``(event_type, channel_id)`` is unique across rules.
    """

    id: str = Field(default_factory=new_id)
    event_type: str = Field(..., min_length=1)
    channel_id: str = Field(..., min_length=1)
    enabled: bool = True
    min_severity: Severity = Severity.INFO
    cooldown_minutes: int = Field(default=0, ge=0, le=1440)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class HistoryEntry(NotificationModel):
    """Audit record for one delivery attempt group.

    Created when the first delivery attempt completes and updated in place
    by every retry. Entries with status SENT are the cooldown lookback source.
    """

    id: str = Field(default_factory=new_id)
    event_type: str
    channel_id: str
    severity: Severity
    message: str
    recipients: Optional[List[str]] = None
    status: NotificationStatus = NotificationStatus.PENDING
    error: Optional[str] = None
    retry_count: int = 0
    sent_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)


class NotificationEvent(NotificationModel):
    """A platform event to be routed to channels.

    Example:
        event = NotificationEvent(
            event_type="container.crashed",
            severity=Severity.CRITICAL,
            message="Container nginx crashed",
            metadata={"container": "nginx", "exit_code": 137},
        )
    """

    event_type: str = Field(..., min_length=1)
    severity: Severity
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is not empty."""
        if not v or not v.strip():
            raise ValueError("Event message cannot be empty")
        return v


class DeliveryResult(NotificationModel):
    """Outcome of one adapter ``send`` or ``test`` call.

    Attributes:
        success: Whether the provider accepted the message
        message: Human-readable outcome
        error: Redacted error description on failure
        error_code: Machine error code on failure
        retryable: Whether a later attempt could succeed
        recipients: Recipients the message was addressed to (email providers)
    """

    success: bool
    message: str
    error: Optional[str] = None
    error_code: Optional[str] = None
    retryable: bool = False
    recipients: Optional[List[str]] = None
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def ok(
        cls, message: str, recipients: Optional[List[str]] = None
    ) -> "DeliveryResult":
        return cls(success=True, message=message, recipients=recipients)

    @classmethod
    def failure(
        cls,
        message: str,
        error: str,
        error_code: Optional[str] = None,
        retryable: bool = False,
    ) -> "DeliveryResult":
        return cls(
            success=False,
            message=message,
            error=error,
            error_code=error_code,
            retryable=retryable,
        )


class RuleOutcome(NotificationModel):
    """Per-rule entry of a dispatch aggregate."""

    channel_id: str
    success: bool
    error: Optional[str] = None
    rule_id: Optional[str] = None
    history_id: Optional[str] = None
    retry_scheduled: bool = False


class DispatchResult(NotificationModel):
    """Aggregate outcome of dispatching one event.

    Example:
        DispatchResult(event_type="container.crashed", sent=1, failed=0, skipped=0)
    """

    event_type: str
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    results: List[RuleOutcome] = Field(default_factory=list)

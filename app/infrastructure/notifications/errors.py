"""Notification engine exceptions."""

from typing import Optional

from infrastructure.operations import OperationResult


class NotificationError(Exception):
    """Base class for notification engine errors."""


class ChannelNotFoundError(NotificationError):
    """Referenced channel does not exist."""


class RuleNotFoundError(NotificationError):
    """Referenced rule does not exist."""


class HistoryEntryNotFoundError(NotificationError):
    """Referenced history entry does not exist."""


class DuplicateRuleError(NotificationError):
    """A rule for the same (event type, channel) pair already exists."""


class ProviderChangeError(NotificationError):
    """Attempt to change the provider of an existing channel."""


class DeliveryError(NotificationError):
    """A single delivery attempt failed.

    Attributes:
        retryable: Whether the retry executor should try again
        error_code: Machine error code
        retry_after: Provider-supplied wait hint in seconds
    """

    retryable = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.retry_after = retry_after

    @staticmethod
    def from_result(result: OperationResult) -> "DeliveryError":
        """Build the matching transient or permanent error from a failed result."""
        error_class = (
            TransientDeliveryError if result.is_retryable else PermanentDeliveryError
        )
        return error_class(
            result.message,
            error_code=result.error_code,
            retry_after=result.retry_after,
        )


class TransientDeliveryError(DeliveryError):
    """Network failure, timeout, 5xx or rate limit."""

    retryable = True


class PermanentDeliveryError(DeliveryError):
    """Rejected request, bad credentials or invalid configuration."""

    retryable = False

"""Operation status enumeration.

Classifies the outcome of a provider call so callers can decide whether a
retry is worthwhile.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, 5xx, rate limit)
        PERMANENT_ERROR: Non-retryable error (bad request, invalid config)
        UNAUTHORIZED: Provider rejected the credentials
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"

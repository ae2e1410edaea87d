"""Operation result types and status enums.

Standardized result types for provider calls, including status enums,
the result dataclass and error classifiers for ``requests`` and ``smtplib``.
"""

from infrastructure.operations.classifiers import (
    classify_http_response,
    classify_request_exception,
    classify_smtp_error,
    parse_retry_after,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_response",
    "classify_request_exception",
    "classify_smtp_error",
    "parse_retry_after",
]

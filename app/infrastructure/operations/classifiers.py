"""Error classifiers for notification provider calls.

Converts ``requests`` responses and exceptions, and ``smtplib`` exceptions,
into standardized OperationResult objects so every adapter shares one
transient/permanent policy.

Status Code Mapping (HTTP):
- 2xx: SUCCESS
- 429: TRANSIENT_ERROR with retry_after from the Retry-After header
- 401/403: UNAUTHORIZED
- 5xx: TRANSIENT_ERROR
- other 4xx: PERMANENT_ERROR

Usage:
    from infrastructure.operations import classify_http_response

    response = session.post(url, json=payload, timeout=30)
    result = classify_http_response(response, provider="slack")
    if not result.is_success:
        raise DeliveryError.from_result(result)
"""

import smtplib
import socket
from typing import Optional

import requests

from infrastructure.logging import redact_text
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def parse_retry_after(
    response: requests.Response, default: Optional[float] = None
) -> Optional[float]:
    """Read the Retry-After header as seconds, falling back to ``default``."""
    header_value = response.headers.get("Retry-After")
    if header_value:
        try:
            return max(float(header_value), 0.0)
        except (ValueError, TypeError):
            pass
    return default


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(body, dict):
        for key in ("message", "description", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)


def classify_http_response(
    response: requests.Response, provider: str = "provider"
) -> OperationResult:
    """Classify a provider HTTP response into an OperationResult.

    Args:
        response: Response returned by ``requests``.
        provider: Provider name used in the message.

    Returns:
        OperationResult; the parsed JSON body (when any) is attached as data
        on success.
    """
    status_code = response.status_code

    if 200 <= status_code < 300:
        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None
        return OperationResult.success(data=data)

    detail = redact_text(_error_detail(response))[:200]

    if status_code == 429:
        return OperationResult.transient_error(
            f"{provider} rate limited",
            error_code="RATE_LIMITED",
            retry_after=parse_retry_after(response),
        )

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"{provider} rejected credentials ({status_code}): {detail}",
            error_code="UNAUTHORIZED",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"{provider} server error ({status_code})",
            error_code="SERVER_ERROR",
        )

    return OperationResult.permanent_error(
        f"{provider} request failed ({status_code}): {detail}",
        error_code="HTTP_ERROR",
    )


def classify_request_exception(
    exc: Exception, provider: str = "provider"
) -> OperationResult:
    """Classify an exception raised by ``requests`` before a response arrived.

    Timeouts and connection errors are transient; anything else (invalid
    URL, invalid schema) is permanent.
    """
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"{provider} request timed out", error_code="TIMEOUT"
        )
    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"{provider} connection error: {redact_text(exc)}",
            error_code="CONNECTION_ERROR",
        )
    return OperationResult.permanent_error(
        f"{provider} request error: {type(exc).__name__}: {redact_text(exc)}",
        error_code="REQUEST_ERROR",
    )


def classify_smtp_error(exc: Exception) -> OperationResult:
    """Classify an ``smtplib`` or socket exception into an OperationResult.

    Authentication failures and rejected recipients are permanent. Dropped
    connections, timeouts and 4xx SMTP replies are transient.
    """
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"SMTP authentication failed: {redact_text(exc)}",
            error_code="UNAUTHORIZED",
        )
    if isinstance(exc, (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused)):
        return OperationResult.permanent_error(
            f"SMTP address rejected: {redact_text(exc)}",
            error_code="ADDRESS_REJECTED",
        )
    if isinstance(exc, smtplib.SMTPResponseException):
        detail = exc.smtp_error
        if isinstance(detail, bytes):
            detail = detail.decode("utf-8", errors="replace")
        message = f"SMTP error ({exc.smtp_code}): {redact_text(detail)}"
        if 400 <= exc.smtp_code < 500:
            return OperationResult.transient_error(message, error_code="SMTP_TRANSIENT")
        return OperationResult.permanent_error(message, error_code="SMTP_ERROR")
    if isinstance(exc, (smtplib.SMTPServerDisconnected, socket.timeout)):
        return OperationResult.transient_error(
            f"SMTP connection error: {redact_text(exc)}",
            error_code="CONNECTION_ERROR",
        )
    if isinstance(exc, smtplib.SMTPException):
        return OperationResult.permanent_error(
            f"SMTP error: {type(exc).__name__}: {redact_text(exc)}",
            error_code="SMTP_ERROR",
        )
    if isinstance(exc, OSError):
        return OperationResult.transient_error(
            f"SMTP connection error: {redact_text(exc)}",
            error_code="CONNECTION_ERROR",
        )
    return OperationResult.permanent_error(
        f"SMTP error: {type(exc).__name__}: {redact_text(exc)}",
        error_code="SMTP_ERROR",
    )

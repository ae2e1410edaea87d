"""Channel adapter abstract base class.

Every provider adapter (SMTP, Resend, Slack, Telegram, Discord) implements
this interface. The base class owns the parts shared by all of them:

- strict config validation before any I/O
- the bounded retry around each network exchange
- conversion of failures into redacted ``DeliveryResult`` objects
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Type, Union
from urllib.parse import urlsplit

import requests
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from infrastructure.configuration import NotificationSettings, RetrySettings
from infrastructure.logging import redact_text
from infrastructure.notifications.errors import DeliveryError, TransientDeliveryError
from infrastructure.notifications.models import DeliveryResult, NotificationProvider
from infrastructure.operations import (
    OperationResult,
    classify_http_response,
    classify_request_exception,
    parse_retry_after,
)
from infrastructure.resilience.retry import RetryConfig, with_retry

logger = structlog.get_logger()

CONFIG_VALIDATION_FAILED = "Configuration validation failed"


def require_http_url(value: str) -> str:
    """Validate that ``value`` is an absolute http(s) URL and return it unchanged."""
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError("must be an http or https URL")
    return value


class ProviderConfig(BaseModel):
    """Base for provider configuration schemas.

    Accepts the stored camelCase keys or snake_case keys; unknown keys are
    ignored so that channel-level extras do not break validation.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class SendOptions(BaseModel):
    """Options accepted by ``ChannelAdapter.send``.

    Attributes:
        config: Decrypted provider configuration
        to: Recipient address(es) for email providers
        subject: Email subject
        html: Optional HTML body for email providers
        username: Display name override (Slack, Discord)
        icon_emoji: Icon override (Slack)
        parse_mode: Markup dialect (Telegram)
        silent: Send without notification sound (Telegram)
        embed: Rich embed object (Discord)
    """

    model_config = ConfigDict(extra="ignore")

    config: Dict[str, Any] = Field(default_factory=dict)
    to: List[str] = Field(default_factory=list)
    subject: str = "Notification"
    html: Optional[str] = None
    username: Optional[str] = None
    icon_emoji: Optional[str] = None
    parse_mode: Optional[str] = None
    silent: bool = False
    embed: Optional[Dict[str, Any]] = None

    @field_validator("to", mode="before")
    @classmethod
    def normalize_recipients(cls, v: Any) -> Any:
        """Accept a single address or a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return v


class ChannelAdapter(ABC):
    """Abstract base class for provider adapters.

    Subclasses declare ``provider`` and ``config_model`` and implement
    ``_deliver`` (one message) and ``_test_message`` (canned self-test).
    ``_deliver`` signals failure by raising ``DeliveryError``.

    Example Implementation:
        class SlackAdapter(ChannelAdapter):
            provider = NotificationProvider.SLACK
            config_model = SlackConfig

            def _deliver(self, message, options, config):
                self._post_json(str(config.webhook_url), {"text": message})
                return DeliveryResult.ok("Message sent to Slack")
    """

    provider: ClassVar[NotificationProvider]
    config_model: ClassVar[Type[ProviderConfig]]

    def __init__(
        self,
        settings: Optional[NotificationSettings] = None,
        retry_settings: Optional[RetrySettings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or NotificationSettings()
        retry_settings = retry_settings or RetrySettings()
        self.retry_config = RetryConfig(
            max_attempts=retry_settings.max_attempts,
            base_delay_seconds=retry_settings.base_delay_seconds,
        )
        self._session = session or requests.Session()
        self._sleep = sleep
        self.log = logger.bind(component="channel_adapter", provider=self.name)

    @property
    def name(self) -> str:
        return self.provider.value

    @property
    def display_name(self) -> str:
        return self.provider.value.capitalize()

    def parse_config(self, config: Any) -> ProviderConfig:
        """Parse ``config`` into the provider schema.

        Raises:
            pydantic.ValidationError: If a required field is missing or malformed.
        """
        if isinstance(config, self.config_model):
            return config
        if not isinstance(config, Mapping):
            raise TypeError(f"{self.display_name} configuration must be a mapping")
        return self.config_model.model_validate(dict(config))

    def validate(self, config: Any) -> bool:
        """Check a configuration without performing any network call."""
        try:
            self.parse_config(config)
        except (ValidationError, TypeError):
            return False
        return True

    def send(
        self, message: str, options: Union[SendOptions, Mapping[str, Any], None] = None
    ) -> DeliveryResult:
        """Deliver ``message`` using the configuration in ``options``.

        Never raises: invalid configuration, missing recipients and provider
        failures are all reported through the returned ``DeliveryResult``.
        """
        try:
            send_options = self._coerce_options(options)
            config = self.parse_config(send_options.config)
        except (ValidationError, TypeError):
            self.log.warning("adapter_config_invalid", operation="send")
            return self._invalid_config()

        try:
            result = self._deliver(message, send_options, config)
        except DeliveryError as e:
            error = redact_text(e)
            self.log.error(
                "adapter_send_failed",
                error=error,
                error_code=e.error_code,
                retryable=e.retryable,
            )
            return DeliveryResult.failure(
                f"Failed to send message via {self.display_name}",
                error,
                error_code=e.error_code,
                retryable=e.retryable,
            )
        except Exception as e:
            error = redact_text(e)
            self.log.error("adapter_send_unexpected_error", error=error, exc_info=True)
            return DeliveryResult.failure(
                f"Unexpected error sending via {self.display_name}",
                error,
                error_code="UNEXPECTED_ERROR",
                retryable=True,
            )

        self.log.info("adapter_send_succeeded")
        return result

    def default_recipients(self, config: ProviderConfig) -> List[str]:
        """Recipients for event delivery when none are passed explicitly.

        Only email providers address recipients; chat providers return [].
        """
        return []

    def test(self, config: Any, recipient: Optional[str] = None) -> DeliveryResult:
        """Validate ``config`` and send a canned self-test message."""
        if not self.validate(config):
            self.log.warning("adapter_config_invalid", operation="test")
            return self._invalid_config()
        self.log.info("adapter_test_started")
        return self._run_test(self.parse_config(config), recipient)

    def _run_test(
        self, config: ProviderConfig, recipient: Optional[str]
    ) -> DeliveryResult:
        options: Dict[str, Any] = {
            "config": config.model_dump(by_alias=True, mode="json"),
            "subject": f"{self.settings.instance_name} {self.display_name} Test",
        }
        if recipient:
            options["to"] = recipient
        return self.send(self._test_message(), options)

    def _test_message(self) -> str:
        timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        return (
            f"{self.settings.instance_name} Test\n\n"
            f"This is a test notification from your {self.settings.instance_name} "
            "instance.\n\n"
            f"Instance: {self.settings.instance_name}\n"
            f"Time: {timestamp}\n\n"
            f"If you see this, your {self.display_name} configuration "
            "is working correctly."
        )

    @abstractmethod
    def _deliver(
        self, message: str, options: SendOptions, config: ProviderConfig
    ) -> DeliveryResult:
        """Perform the provider exchange for one message.

        Raises:
            DeliveryError: On any failure; ``retryable`` decides the retry.
        """

    def _invalid_config(self) -> DeliveryResult:
        return DeliveryResult.failure(
            f"Invalid {self.display_name} configuration",
            CONFIG_VALIDATION_FAILED,
            error_code="INVALID_CONFIG",
            retryable=False,
        )

    @staticmethod
    def _coerce_options(options: Any) -> SendOptions:
        if options is None:
            return SendOptions()
        if isinstance(options, SendOptions):
            return options
        return SendOptions.model_validate(dict(options))

    def _with_retry(self, operation: Callable[[], Any], operation_name: str) -> Any:
        return with_retry(
            operation,
            self.retry_config,
            operation_name=operation_name,
            sleep=self._sleep,
        )

    def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        rate_limit_delay: Optional[float] = None,
    ) -> OperationResult:
        """POST ``payload`` as JSON through the retry executor.

        When ``rate_limit_delay`` is set, a 429 response is honored once: the
        adapter sleeps for Retry-After (or the default) and raises a
        transient error so the executor schedules the next attempt.

        Returns:
            Successful OperationResult carrying the parsed response body.
        """

        def attempt() -> OperationResult:
            try:
                response = self._session.post(
                    url,
                    json=payload,
                    headers=headers,
                    timeout=self.settings.http_timeout_seconds,
                )
            except requests.RequestException as e:
                raise DeliveryError.from_result(
                    classify_request_exception(e, self.display_name)
                ) from e

            if response.status_code == 429 and rate_limit_delay is not None:
                delay = parse_retry_after(response, rate_limit_delay)
                self.log.warning("provider_rate_limited", retry_after_seconds=delay)
                self._sleep(delay)
                raise TransientDeliveryError(
                    "Rate limited", error_code="RATE_LIMITED", retry_after=delay
                )

            result = classify_http_response(response, self.display_name)
            if not result.is_success:
                raise DeliveryError.from_result(result)
            return result

        return self._with_retry(attempt, f"{self.name}_send")

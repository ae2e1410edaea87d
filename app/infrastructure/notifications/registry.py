"""Adapter registry keyed by provider."""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from infrastructure.logging import redact_text
from infrastructure.notifications.channels.base import ChannelAdapter, SendOptions
from infrastructure.notifications.models import DeliveryResult, NotificationProvider

logger = structlog.get_logger()


def _provider_name(provider: Any) -> str:
    return str(getattr(provider, "value", provider))


class AdapterRegistry:
    """Maps each provider to its adapter and dispatches calls to it.

    The mapping is fixed at construction. ``send``, ``test`` and
    ``validate`` never raise: a missing adapter or an unexpected adapter
    exception is reported as a failed ``DeliveryResult`` (or ``False``).

    Args:
        adapters: Adapter per provider.
    """

    def __init__(self, adapters: Mapping[NotificationProvider, ChannelAdapter]):
        self._adapters = MappingProxyType(dict(adapters))
        logger.info(
            "adapter_registry_initialized",
            providers=[p.value for p in self._adapters],
        )

    @property
    def providers(self) -> list[NotificationProvider]:
        return list(self._adapters)

    def get(
        self, provider: Union[NotificationProvider, str]
    ) -> Optional[ChannelAdapter]:
        try:
            return self._adapters.get(NotificationProvider(provider))
        except ValueError:
            return None

    def send(
        self,
        provider: Union[NotificationProvider, str],
        message: str,
        options: Union[SendOptions, Mapping[str, Any], None] = None,
    ) -> DeliveryResult:
        adapter = self.get(provider)
        if adapter is None:
            return self._not_found(provider, "send")
        try:
            return adapter.send(message, options)
        except Exception as e:
            return self._unexpected(provider, "send", e)

    def test(
        self,
        provider: Union[NotificationProvider, str],
        config: Dict[str, Any],
        recipient: Optional[str] = None,
    ) -> DeliveryResult:
        """Validate ``config`` and run the adapter self-test."""
        adapter = self.get(provider)
        if adapter is None:
            return self._not_found(provider, "test")
        if not adapter.validate(config):
            logger.warning(
                "adapter_test_config_invalid", provider=_provider_name(provider)
            )
            return DeliveryResult.failure(
                "Invalid configuration",
                "Configuration validation failed",
                error_code="INVALID_CONFIG",
            )
        logger.info("adapter_test_started", provider=_provider_name(provider))
        try:
            result = adapter.test(config, recipient)
        except Exception as e:
            return self._unexpected(provider, "test", e)
        if result.success:
            logger.info("adapter_test_succeeded", provider=_provider_name(provider))
        else:
            logger.warning(
                "adapter_test_failed",
                provider=_provider_name(provider),
                error=result.error,
            )
        return result

    def validate(self, provider: Union[NotificationProvider, str], config: Any) -> bool:
        adapter = self.get(provider)
        if adapter is None:
            logger.warning(
                "adapter_validate_not_found", provider=_provider_name(provider)
            )
            return False
        is_valid = adapter.validate(config)
        logger.debug(
            "adapter_validated", provider=_provider_name(provider), valid=is_valid
        )
        return is_valid

    def default_recipients(
        self, provider: Union[NotificationProvider, str], config: Any
    ) -> List[str]:
        """Event recipients for an email provider config; [] when not applicable."""
        adapter = self.get(provider)
        if adapter is None:
            return []
        try:
            return adapter.default_recipients(adapter.parse_config(config))
        except (ValidationError, TypeError):
            return []

    @staticmethod
    def _not_found(provider: Any, operation: str) -> DeliveryResult:
        name = _provider_name(provider)
        logger.error("adapter_not_found", provider=name, operation=operation)
        return DeliveryResult.failure(
            f"No adapter registered for provider: {name}",
            "Adapter not found",
            error_code="ADAPTER_NOT_FOUND",
        )

    @staticmethod
    def _unexpected(provider: Any, operation: str, error: Exception) -> DeliveryResult:
        name = _provider_name(provider)
        message = redact_text(error)
        logger.error(
            "adapter_unexpected_error",
            provider=name,
            operation=operation,
            error=message,
            exc_info=True,
        )
        return DeliveryResult.failure(
            f"Unexpected error in {operation} for {name}",
            message,
            error_code="UNEXPECTED_ERROR",
            retryable=True,
        )

"""Fixtures for API route tests."""

from unittest.mock import MagicMock

import pytest

from api.dependencies.rate_limits import get_limiter
from infrastructure.notifications import (
    AdapterRegistry,
    EventDispatcher,
    NotificationService,
    SecretResolver,
)
from tests.factories.notifications import make_delivery_success


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    get_limiter().reset()
    yield
    get_limiter().reset()


@pytest.fixture
def mock_registry():
    registry = MagicMock(spec=AdapterRegistry)
    registry.send.return_value = make_delivery_success()
    registry.default_recipients.return_value = []
    return registry


@pytest.fixture
def notification_service(store, mock_registry, master_key, notification_settings, fake_sleep):
    secrets = SecretResolver(master_key)
    dispatcher = EventDispatcher(
        store=store,
        registry=mock_registry,
        secrets=secrets,
        settings=notification_settings,
        sleep=fake_sleep,
    )
    service = NotificationService(
        store=store,
        registry=mock_registry,
        secrets=secrets,
        settings=notification_settings,
        dispatcher=dispatcher,
    )
    yield service
    service.shutdown()

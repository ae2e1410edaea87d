"""Test fixtures for notification infrastructure tests."""

from unittest.mock import MagicMock

import pytest

from infrastructure.notifications import (
    AdapterRegistry,
    EventDispatcher,
    HistoryRecorder,
    NotificationProvider,
    NotificationService,
    SecretResolver,
)
from tests.factories.notifications import (
    make_channel,
    make_delivery_success,
    make_rule,
)


@pytest.fixture
def secrets(master_key):
    return SecretResolver(master_key)


@pytest.fixture
def history(store, clock):
    return HistoryRecorder(store, clock=clock)


@pytest.fixture
def mock_registry():
    """AdapterRegistry mock whose ``send`` succeeds unless reconfigured.

    Example:
        mock_registry.send.side_effect = [make_delivery_failure(), make_delivery_success()]
    """
    registry = MagicMock(spec=AdapterRegistry)
    registry.send.return_value = make_delivery_success()
    registry.default_recipients.return_value = []
    return registry


@pytest.fixture
def channel_factory(store, secrets):
    """Persist a channel with its sensitive fields encrypted.

    Example:
        channel = channel_factory(NotificationProvider.DISCORD, enabled=False)
    """

    def _factory(provider=NotificationProvider.SLACK, **kwargs):
        channel = make_channel(provider, **kwargs)
        channel.config = secrets.encrypt_config(channel.provider, channel.config)
        return store.save_channel(channel)

    return _factory


@pytest.fixture
def rule_factory(store):
    """Persist a rule for an existing channel."""

    def _factory(channel_id, **kwargs):
        return store.save_rule(make_rule(channel_id, **kwargs))

    return _factory


@pytest.fixture
def dispatcher_factory(store, mock_registry, secrets, history, notification_settings, fake_sleep):
    """Build an EventDispatcher; shut down every dispatcher after the test."""
    created = []

    def _factory(settings=None, registry=None):
        dispatcher = EventDispatcher(
            store=store,
            registry=registry or mock_registry,
            secrets=secrets,
            settings=settings or notification_settings,
            history=history,
            sleep=fake_sleep,
        )
        created.append(dispatcher)
        return dispatcher

    yield _factory

    for dispatcher in created:
        dispatcher.shutdown(wait_for_retries=True)


@pytest.fixture
def dispatcher(dispatcher_factory):
    return dispatcher_factory()


@pytest.fixture
def service(store, mock_registry, secrets, notification_settings, dispatcher):
    return NotificationService(
        store=store,
        registry=mock_registry,
        secrets=secrets,
        settings=notification_settings,
        dispatcher=dispatcher,
    )

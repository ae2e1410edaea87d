"""Shared fixtures for the notification engine test suite."""

from datetime import datetime, timezone

import pytest

from infrastructure.configuration import NotificationSettings, RetrySettings
from infrastructure.notifications import InMemoryNotificationStore

TEST_MASTER_KEY = "unit-test-master-key-0123456789"


class FakeClock:
    """Controllable UTC clock for cooldown and ordering tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture
def master_key():
    return TEST_MASTER_KEY


@pytest.fixture
def sleep_calls():
    """Delays requested through the injected sleep function."""
    return []


@pytest.fixture
def fake_sleep(sleep_calls):
    return sleep_calls.append


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notification_settings():
    """Dispatch settings with inline retries so outcomes are final on return."""
    return NotificationSettings(
        instance_name="DockPilot",
        http_timeout_seconds=30,
        retry_max_attempts=3,
        retry_base_delay_seconds=2.0,
        retry_mode="inline",
        max_workers=2,
    )


@pytest.fixture
def retry_settings():
    return RetrySettings(max_attempts=3, base_delay_seconds=1.0)


@pytest.fixture
def store(clock):
    return InMemoryNotificationStore(clock=clock)

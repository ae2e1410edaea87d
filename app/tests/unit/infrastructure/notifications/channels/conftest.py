"""Fixtures for provider adapter tests.

Adapters get a mocked ``requests.Session`` and the shared fake sleep, so no
test touches the network or waits on backoff.
"""

from unittest.mock import MagicMock

import pytest
import requests

from tests.factories.notifications import make_http_response


@pytest.fixture
def session():
    """Mock session whose ``post`` returns 200 with an empty JSON object."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.post.return_value = make_http_response(200, {})
    return mock_session


@pytest.fixture
def adapter_kwargs(notification_settings, retry_settings, session, fake_sleep):
    return {
        "settings": notification_settings,
        "retry_settings": retry_settings,
        "session": session,
        "sleep": fake_sleep,
    }

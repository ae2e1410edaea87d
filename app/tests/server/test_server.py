"""Tests for the FastAPI application factory and lifespan."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from server import server


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.registry.providers = []
    service.dispatcher.drain.return_value = True
    return service


@pytest.fixture
def mock_emitter():
    return MagicMock()


@pytest.fixture
def lifespan_patches(mock_service, mock_emitter):
    with patch(
        "server.lifespan.get_notification_service", return_value=mock_service
    ), patch("server.lifespan.get_notification_emitter", return_value=mock_emitter):
        yield


def test_handler_is_fastapi_app():
    assert server.handler is not None
    assert hasattr(server.handler, "routes")
    assert hasattr(server.handler, "dependency_overrides")


def test_cors_middleware_configured():
    middleware_classes = [m.cls.__name__ for m in server.handler.user_middleware]
    assert "CORSMiddleware" in middleware_classes
    assert "RequestContextMiddleware" in middleware_classes


def test_routes_mounted():
    route_paths = set(server.handler.openapi()["paths"])
    assert "/health" in route_paths
    assert "/version" in route_paths
    assert "/api/v1/notifications/events" in route_paths
    assert "/api/v1/notifications/history" in route_paths
    assert "/api/v1/notifications/rules/matrix" in route_paths
    assert "/api/v1/notifications/channels/{channel_id}/test" in route_paths


def test_request_id_echoed(lifespan_patches):
    with TestClient(server.create_app()) as client:
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_generated_when_missing(lifespan_patches):
    with TestClient(server.create_app()) as client:
        first = client.get("/health")
        second = client.get("/health")

    assert first.headers["X-Request-ID"]
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


def test_rate_limiter_attached():
    assert server.handler.state.limiter is not None


def test_lifespan_emits_startup_event(lifespan_patches, mock_emitter):
    with TestClient(server.create_app()) as client:
        assert client.get("/health").status_code == 200

    mock_emitter.emit_system_startup.assert_called_once()


def test_lifespan_drains_retries_on_shutdown(lifespan_patches, mock_service):
    with TestClient(server.create_app()):
        pass

    mock_service.dispatcher.drain.assert_called_once_with(timeout=30.0)
    mock_service.shutdown.assert_called_once_with(wait=True)


def test_lifespan_abandons_retries_after_timeout(lifespan_patches, mock_service):
    mock_service.dispatcher.drain.return_value = False
    mock_service.dispatcher.pending_retries.return_value = 2

    with TestClient(server.create_app()):
        pass

    mock_service.shutdown.assert_called_once_with(wait=False)

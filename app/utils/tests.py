from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient


def create_test_app(
    routers,
    dependency_overrides: Optional[Dict[Callable[..., Any], Callable[..., Any]]] = None,
) -> FastAPI:
    """
    Create a FastAPI test application with the given routers.

    Args:
        routers: A router or list of routers to include in the app.
        dependency_overrides: Optional mapping of provider -> replacement, e.g.
            ``{get_notification_service: lambda: service}``.

    Returns:
        FastAPI: A configured FastAPI application.

    Example:
        app = create_test_app(router, {get_notification_service: lambda: service})
    """
    # Create a fresh app
    app = FastAPI()

    # Setup rate limiting
    from api.dependencies.rate_limits import setup_rate_limiter

    setup_rate_limiter(app)

    if dependency_overrides:
        app.dependency_overrides.update(dependency_overrides)

    # Include the router
    if not isinstance(routers, list):
        routers = [routers]
    for router in routers:
        app.include_router(router)

    return app


def rate_limiting_helper(
    app: FastAPI,
    endpoint: str,
    request_limit: int,
    method: str = "get",
    expected_status: int = 200,
    json: Optional[dict] = None,
):
    """
    Assert that ``endpoint`` answers ``request_limit`` times, then returns 429.

    Args:
        app: The FastAPI app instance.
        endpoint: The endpoint to test.
        request_limit: Number of requests allowed before rate limiting.
        method: HTTP method to use (e.g., "get", "post").
        expected_status: Expected status code for successful requests.
        json: Optional JSON body sent with every request.
    """
    client = TestClient(app)
    http_method = getattr(client, method.lower())
    kwargs = {"json": json} if json is not None else {}

    for i in range(request_limit):
        response = http_method(endpoint, **kwargs)
        assert (
            response.status_code == expected_status
        ), f"Request {i+1} failed with status {response.status_code}"

    response = http_method(endpoint, **kwargs)
    assert response.status_code == 429, "Expected rate limiting to trigger"
    assert response.json() == {"message": "Rate limit exceeded"}

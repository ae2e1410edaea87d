"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    make_channel,
    make_channel_config,
    make_delivery_failure,
    make_delivery_success,
    make_event,
    make_http_response,
    make_rule,
)

__all__ = [
    "make_channel",
    "make_channel_config",
    "make_delivery_failure",
    "make_delivery_success",
    "make_event",
    "make_http_response",
    "make_rule",
]

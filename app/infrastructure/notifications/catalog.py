"""Catalog of platform events that can be routed to channels."""

from dataclasses import dataclass
from typing import Dict, List

from infrastructure.notifications.models import Severity


@dataclass(frozen=True)
class EventDefinition:
    """Known event type with its display label and default severity."""

    event_type: str
    label: str
    category: str
    severity: Severity
    description: str = ""


_DEFINITIONS = [
    EventDefinition("system.startup", "System Started", "system", Severity.INFO),
    EventDefinition(
        "system.upgrade.started", "Upgrade Started", "system", Severity.WARNING
    ),
    EventDefinition(
        "system.upgrade.completed", "Upgrade Completed", "system", Severity.INFO
    ),
    EventDefinition(
        "system.upgrade.failed", "Upgrade Failed", "system", Severity.CRITICAL
    ),
    EventDefinition(
        "container.crashed", "Container Crashed", "container", Severity.CRITICAL
    ),
    EventDefinition(
        "container.restarted", "Container Restarted", "container", Severity.WARNING
    ),
    EventDefinition(
        "container.oom", "Container Out of Memory", "container", Severity.CRITICAL
    ),
    EventDefinition(
        "container.health.failed",
        "Container Health Check Failed",
        "container",
        Severity.WARNING,
    ),
    EventDefinition("repo.deploy.started", "Deployment Started", "repo", Severity.INFO),
    EventDefinition(
        "repo.deploy.success", "Deployment Succeeded", "repo", Severity.INFO
    ),
    EventDefinition(
        "repo.deploy.failed", "Deployment Failed", "repo", Severity.CRITICAL
    ),
    EventDefinition(
        "repo.deploy.rolled_back", "Deployment Rolled Back", "repo", Severity.WARNING
    ),
    EventDefinition(
        "repo.webhook.received", "Webhook Received", "repo", Severity.INFO
    ),
    EventDefinition("auth.login.success", "Login Succeeded", "auth", Severity.INFO),
    EventDefinition("auth.login.failed", "Login Failed", "auth", Severity.WARNING),
    EventDefinition(
        "auth.password.changed", "Password Changed", "auth", Severity.INFO
    ),
    EventDefinition(
        "security.brute_force",
        "Brute Force Attack Detected",
        "security",
        Severity.CRITICAL,
    ),
    EventDefinition(
        "security.unauthorized_access",
        "Unauthorized Access Attempt",
        "security",
        Severity.CRITICAL,
    ),
]

NOTIFICATION_EVENTS: Dict[str, EventDefinition] = {
    definition.event_type: definition for definition in _DEFINITIONS
}


def event_label(event_type: str) -> str:
    """Display label for ``event_type``; unknown types fall back to the type."""
    definition = NOTIFICATION_EVENTS.get(event_type)
    return definition.label if definition else event_type


def list_events() -> List[EventDefinition]:
    return list(_DEFINITIONS)

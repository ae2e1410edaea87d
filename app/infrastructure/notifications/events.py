"""Emitters for platform events.

Each helper formats the message and metadata for one catalog event and
hands it to ``NotificationService.emit_notification_event``. Emitters are
called from business operations (container supervision, deploys, login)
and never raise: a failure is logged as a warning and swallowed so the
triggering operation is unaffected.

Usage:
    emitter = NotificationEmitter(service)
    emitter.emit_container_crash("c1", "nginx", 137, "nginx:1.27")
"""

from typing import Any, Dict, List, Optional

import structlog

from infrastructure.logging import redact_text
from infrastructure.notifications.catalog import NOTIFICATION_EVENTS
from infrastructure.notifications.models import DispatchResult, Severity
from infrastructure.notifications.service import NotificationService

logger = structlog.get_logger()


class NotificationEmitter:
    """Builds catalog events and emits them through the service."""

    def __init__(self, service: NotificationService):
        self._service = service

    def emit(
        self,
        event_type: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        severity: Optional[Severity] = None,
    ) -> Optional[DispatchResult]:
        """Emit ``event_type`` with the catalog's default severity.

        Returns:
            The dispatch aggregate, or None if emission failed.
        """
        if severity is None:
            definition = NOTIFICATION_EVENTS.get(event_type)
            severity = definition.severity if definition else Severity.INFO
        try:
            return self._service.emit_notification_event(
                event_type, severity, message, metadata
            )
        except Exception as e:
            logger.warning(
                "notification_emit_failed",
                event_type=event_type,
                error=redact_text(e),
            )
            return None

    # Containers

    def emit_container_crash(
        self, container_id: str, container_name: str, exit_code: int, image: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "container.crashed",
            f"Container {container_name} crashed with exit code {exit_code}",
            {
                "containerId": container_id,
                "containerName": container_name,
                "exitCode": exit_code,
                "image": image,
            },
        )

    def emit_container_restart(
        self, container_id: str, container_name: str, restart_count: int
    ) -> Optional[DispatchResult]:
        return self.emit(
            "container.restarted",
            f"Container {container_name} was restarted",
            {
                "containerId": container_id,
                "containerName": container_name,
                "restartCount": restart_count,
            },
        )

    def emit_container_oom(
        self,
        container_id: str,
        container_name: str,
        memory_limit: int,
        memory_usage: int,
    ) -> Optional[DispatchResult]:
        return self.emit(
            "container.oom",
            f"Container {container_name} was killed (Out of Memory)",
            {
                "containerId": container_id,
                "containerName": container_name,
                "memoryLimit": memory_limit,
                "memoryUsage": memory_usage,
            },
        )

    def emit_container_health_failed(
        self, container_id: str, container_name: str, health_status: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "container.health.failed",
            f"Container {container_name} health check failed",
            {
                "containerId": container_id,
                "containerName": container_name,
                "healthStatus": health_status,
            },
        )

    # Repositories

    def emit_deploy_started(
        self, repo_name: str, repo_id: str, branch: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "repo.deploy.started",
            f"Deployment started for repository {repo_name}",
            {"repoName": repo_name, "repoId": repo_id, "branch": branch},
        )

    def emit_deploy_success(
        self, repo_name: str, duration: float, services_deployed: List[str]
    ) -> Optional[DispatchResult]:
        return self.emit(
            "repo.deploy.success",
            f"Deployment completed successfully for {repo_name}",
            {
                "repoName": repo_name,
                "duration": duration,
                "servicesDeployed": ", ".join(services_deployed),
            },
        )

    def emit_deploy_failed(
        self, repo_name: str, error: str, stage: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "repo.deploy.failed",
            f"Deployment failed for {repo_name}: {error}",
            {"repoName": repo_name, "error": error, "stage": stage},
        )

    def emit_deploy_rolled_back(
        self, repo_name: str, reason: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "repo.deploy.rolled_back",
            f"Deployment rolled back for {repo_name}",
            {"repoName": repo_name, "reason": reason},
        )

    def emit_webhook_received(
        self, provider: str, repo: str, event: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "repo.webhook.received",
            f"Webhook received from {provider} for {repo}",
            {"provider": provider, "repo": repo, "event": event},
        )

    # System

    def emit_system_startup(self, version: str) -> Optional[DispatchResult]:
        return self.emit(
            "system.startup",
            f"System started (version {version})",
            {"version": version},
        )

    def emit_system_upgrade_started(
        self, target_version: str, current_version: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "system.upgrade.started",
            f"System upgrade to version {target_version} started",
            {"targetVersion": target_version, "currentVersion": current_version},
        )

    def emit_system_upgrade_completed(self, version: str) -> Optional[DispatchResult]:
        return self.emit(
            "system.upgrade.completed",
            f"System successfully upgraded to version {version}",
            {"version": version},
        )

    def emit_system_upgrade_failed(self, error: str) -> Optional[DispatchResult]:
        return self.emit(
            "system.upgrade.failed",
            f"System upgrade failed: {error}",
            {"error": error},
        )

    # Auth and security

    def emit_auth_login_success(self, username: str, ip: str) -> Optional[DispatchResult]:
        return self.emit(
            "auth.login.success",
            f"User {username} logged in from {ip}",
            {"username": username, "ip": ip},
        )

    def emit_auth_login_failed(
        self, username: str, ip: str, reason: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "auth.login.failed",
            f"Failed login attempt for {username} from {ip}",
            {"username": username, "ip": ip, "reason": reason},
        )

    def emit_auth_password_changed(self, username: str) -> Optional[DispatchResult]:
        return self.emit(
            "auth.password.changed",
            f"User {username} changed their password",
            {"username": username},
        )

    def emit_security_brute_force(
        self, ip: str, failed_attempts: int, target_endpoint: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "security.brute_force",
            f"Possible brute force attack detected from {ip}",
            {
                "ip": ip,
                "failedAttempts": failed_attempts,
                "targetEndpoint": target_endpoint,
            },
        )

    def emit_security_unauthorized_access(
        self, username: str, resource: str, ip: str
    ) -> Optional[DispatchResult]:
        return self.emit(
            "security.unauthorized_access",
            f"Unauthorized access attempt to {resource} by {username}",
            {"username": username, "resource": resource, "ip": ip},
        )

"""Infrastructure modules for the notification dispatch service.

Centralized infrastructure components:
- configuration: Settings management (Settings, NotificationSettings, RetrySettings)
- logging: structlog setup, context binding and redaction
- notifications: Channels, rules, dispatcher and delivery history
- operations: Operation results and error classification
- resilience: Bounded exponential-backoff retry
- security: Secret encryption and masking
- services: Dependency injection services (SettingsDep, NotificationServiceDep)
"""

# Configuration
from infrastructure.configuration import Settings

# Observability
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Configuration
    "Settings",
    # Observability
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
]

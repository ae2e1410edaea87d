"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.retry import RetrySettings
from infrastructure.configuration.infrastructure.security import SecuritySettings

__all__ = [
    "RetrySettings",
    "SecuritySettings",
]

"""Secrets infrastructure settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class SecuritySettings(InfrastructureSettings):
    """Master key used to decrypt sensitive channel configuration fields.

    Environment Variables:
        MASTER_KEY: Process-wide master key (at least 16 characters). When
            unset, encrypted fields are passed through untouched.

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.security.MASTER_KEY:
            ...
        ```
    """

    MASTER_KEY: str | None = Field(default=None, alias="MASTER_KEY")

    @field_validator("MASTER_KEY", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat an empty or whitespace-only key as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

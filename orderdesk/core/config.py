"""
orderdesk/core/config.py

Purpose: Client configuration

- Loads environment variables
- Centralizes config values (API URL, timeouts, storage keys, routes)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Backend API
    API_BASE_URL: str = Field(
        default="http://localhost:5000",
        description="Base URL of the order-management REST API"
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Fixed timeout applied to every API request"
    )

    # Session persistence
    TOKEN_STORAGE_KEY: str = Field(
        default="token",
        description="Storage key holding the bearer token"
    )
    USER_STORAGE_KEY: str = Field(
        default="user",
        description="Storage key holding the cached user profile JSON"
    )
    SESSION_STORAGE_PATH: Optional[str] = Field(
        default=None,
        description="JSON file used to persist the session; in-memory when unset"
    )

    # Navigation
    LOGIN_PATH: str = Field(default="/login", description="Login entry point")
    PUBLIC_PATH: str = Field(default="/", description="Public landing page")
    ADMIN_LANDING_PATH: str = Field(
        default="/dashboard",
        description="Where admins land after login"
    )
    MODERATOR_LANDING_PATH: str = Field(
        default="/orders",
        description="Where moderators land after login"
    )

    # Notifications
    NOTIFICATION_HISTORY_LIMIT: int = Field(
        default=100,
        description="Maximum number of notifications kept in memory"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @field_validator("API_BASE_URL")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Only http(s) backends are supported; trailing slashes are dropped."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("REQUEST_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None) -> bool:
    """
    Validates critical settings on client startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    if not config.TOKEN_STORAGE_KEY or not config.USER_STORAGE_KEY:
        errors.append("TOKEN_STORAGE_KEY and USER_STORAGE_KEY are required")
    elif config.TOKEN_STORAGE_KEY == config.USER_STORAGE_KEY:
        errors.append("TOKEN_STORAGE_KEY and USER_STORAGE_KEY must differ")

    for name in ("LOGIN_PATH", "PUBLIC_PATH", "ADMIN_LANDING_PATH", "MODERATOR_LANDING_PATH"):
        if not getattr(config, name).startswith("/"):
            errors.append(f"{name} must be an absolute path")

    # Production-specific validations
    if config.is_production:
        if not config.API_BASE_URL.startswith("https://"):
            errors.append("API_BASE_URL must use https in production")
        if config.DEBUG:
            errors.append("DEBUG must be disabled in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True

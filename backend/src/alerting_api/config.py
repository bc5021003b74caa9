"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum entropy for secrets (measured by character diversity)
MIN_SECRET_UNIQUE_CHARS = 16


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Notification Rule API"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    api_prefix: str = "/api/v2"

    # Database
    database_url: str = Field(
        default="postgresql://localhost:5432/alerting",
        description="Database connection URL for the rule, label and mapping tables.",
    )
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Security - JWT
    jwt_secret: str = Field(min_length=32)
    jwt_algorithm: str = "HS256"

    # Platform API owning tasks, endpoints, users and organizations
    platform_api_url: str = "http://localhost:8086/api/v2"
    platform_api_token: str = ""
    platform_timeout_seconds: float = 10.0

    # Rule store backend: local database or another instance of this API
    rule_store_backend: Literal["database", "remote"] = "database"
    remote_api_url: str = ""
    remote_api_token: str = ""

    # Maximum concurrent task-status lookups while composing a list response
    rule_compose_concurrency: int = Field(default=8, ge=1, le=64)

    # CORS settings
    cors_origins: str = "http://localhost:3000"  # Comma-separated list

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings for security and wiring requirements."""
        # Security: Prevent debug mode in production
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG mode cannot be enabled in production environment. "
                "This would expose API documentation and detailed error messages."
            )

        if self.environment == "production":
            if len(set(self.jwt_secret)) < MIN_SECRET_UNIQUE_CHARS:
                raise ValueError(
                    f"JWT_SECRET must contain at least {MIN_SECRET_UNIQUE_CHARS} unique characters "
                    "for sufficient entropy. Use a cryptographically random value."
                )

        if self.rule_store_backend == "remote" and not self.remote_api_url:
            raise ValueError("REMOTE_API_URL must be set when RULE_STORE_BACKEND=remote")

        return self

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy.

        PostgreSQL URLs are routed to asyncpg and sslmode is converted to ssl.
        Other URLs (e.g. sqlite+aiosqlite) are passed through unchanged.
        """
        url = self.database_url
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            url = url.replace("sslmode=", "ssl=")
        return url

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with validation.
"""
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Database
    database_url: str = Field(..., description="Async database connection URL")
    database_url_sync: str = Field(default="", description="Sync PostgreSQL connection URL for Alembic")
    database_pool_size: int = Field(default=20, description="Connection pool size (ignored for SQLite)")
    database_max_overflow: int = Field(default=10, description="Connection pool overflow (ignored for SQLite)")

    # Security
    jwt_secret: str = Field(..., min_length=32, description="Access token signing secret (min 32 chars)")
    jwt_refresh_secret: str = Field(..., min_length=32, description="Refresh token signing secret (min 32 chars)")
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(default=15, description="Access token lifetime in minutes")
    refresh_token_expire_days: int = Field(default=7, description="Refresh token lifetime in days")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable per-client rate limiting")
    send_message_rate_limit: str = Field(default="30/minute", description="Rate limit for sending messages")
    auth_rate_limit: str = Field(default="10/minute", description="Rate limit for signup and login")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only json and text formatters exist."""
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    def get_allowed_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


# Global settings instance
settings = Settings()

"""Application settings and configuration.

This module defines all configuration options for the Forever Wall service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Forever Wall", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    site_url: str = Field(default="https://forever-wall.vercel.app", alias="SITE_URL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./forever_wall.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    database_auto_create: bool = Field(default=True, alias="DATABASE_AUTO_CREATE")

    # Shared challenge store for multi-instance deployments
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    challenge_backend: Literal["memory", "redis"] = Field(
        default="memory",
        alias="CHALLENGE_BACKEND",
    )

    # Proof-of-work (difficulty counts leading zero hex characters)
    pow_difficulty: int = Field(default=5, ge=0, alias="POW_DIFFICULTY")
    pow_hash_algorithm: Literal["sha256", "blake3"] = Field(
        default="sha256",
        alias="POW_HASH_ALGORITHM",
    )
    pow_require_issued_challenge: bool = Field(
        default=False,
        alias="POW_REQUIRE_ISSUED_CHALLENGE",
    )
    challenge_ttl_seconds: int = Field(default=300, gt=0, alias="CHALLENGE_TTL_SECONDS")

    # Background sweeps of expired challenges and idle rate-limit records
    maintenance_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        alias="MAINTENANCE_INTERVAL_SECONDS",
    )

    # Per-client rate limiting
    rate_limit_max_per_hour: int = Field(default=10, gt=0, alias="RATE_LIMIT_MAX_PER_HOUR")
    rate_limit_cooldown_seconds: int = Field(
        default=60,
        ge=0,
        alias="RATE_LIMIT_COOLDOWN_SECONDS",
    )
    rate_limit_window_seconds: int = Field(
        default=3600,
        gt=0,
        alias="RATE_LIMIT_WINDOW_SECONDS",
    )

    # Wall contents
    message_max_length: int = Field(default=280, gt=0, alias="MESSAGE_MAX_LENGTH")
    wall_default_limit: int = Field(default=50, gt=0, alias="WALL_DEFAULT_LIMIT")
    wall_max_limit: int = Field(default=100, gt=0, alias="WALL_MAX_LIMIT")
    stream_queue_size: int = Field(default=100, gt=0, alias="STREAM_QUEUE_SIZE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic.

        Returns:
            Database URL compatible with synchronous database drivers
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def rate_limits(self) -> dict[str, int]:
        """Return the public rate-limit policy as a convenience dictionary."""
        return {
            "max_per_hour": self.rate_limit_max_per_hour,
            "cooldown_seconds": self.rate_limit_cooldown_seconds,
        }


settings = Settings()

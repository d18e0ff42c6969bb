"""Application settings and configuration.

This module defines all configuration options for the Forge API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="The Forge", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    app_url: str = Field(default="http://localhost:8000", alias="APP_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./forge.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Cache, locks and pub/sub. "memory" keeps everything in-process.
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    cache_backend: str = Field(default="redis", alias="CACHE_BACKEND")

    # MaxMind GeoLite2 City database used to locate visitors
    geoip_database_path: str = Field(
        default="storage/geoip/GeoLite2-City.mmdb",
        alias="GEOIP_DATABASE_PATH",
    )

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Visitor presence and peak tracking
    visitor_active_seconds: int = Field(default=120, alias="VISITOR_ACTIVE_SECONDS")
    visitor_retention_hours: int = Field(default=24, alias="VISITOR_RETENTION_HOURS")
    peak_lock_seconds: int = Field(default=5, alias="PEAK_LOCK_SECONDS")

    # Moderation
    moderator_cache_seconds: int = Field(default=60, alias="MODERATOR_CACHE_SECONDS")
    recent_actions_days: int = Field(default=7, alias="RECENT_ACTIONS_DAYS")
    recent_actions_limit: int = Field(default=20, alias="RECENT_ACTIONS_LIMIT")
    report_context_max_length: int = Field(default=1000, alias="REPORT_CONTEXT_MAX_LENGTH")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
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
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]

"""
Web Analytics Dashboard API
Centralized Configuration Management

Pydantic settings sections loaded from environment variables and an optional
``.env`` file, aggregated into a single cached ``Settings`` object.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="web_analytics", description="Database name")
    user: str = Field(default="analytics", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, description="Full async database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL for asyncpg"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class RedisSettings(BaseSettings):
    """Redis Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    enabled: bool = Field(default=True, description="Connect to Redis on startup")
    url: Optional[str] = Field(default=None, description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


# Shipped placeholder; only accepted where tokens are minted locally
DEFAULT_JWT_SECRET = "jwt-secret-change-me"
LOCAL_ENVIRONMENTS = ("development", "testing")


class SecuritySettings(BaseSettings):
    """Bearer token verification, rate limiting and CORS"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    jwt_secret_key: SecretStr = Field(default=DEFAULT_JWT_SECRET, alias="JWT_SECRET_KEY", description="Secret used to verify bearer tokens")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM", description="JWT algorithm")
    jwt_audience: Optional[str] = Field(default=None, alias="JWT_AUDIENCE", description="Expected audience claim, e.g. 'authenticated'")

    # Rate limiting
    rate_limit_requests: int = Field(default=100, alias="RATE_LIMIT_REQUESTS", description="Rate limit requests")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS", description="Rate limit window")

    # CORS
    cors_origins: List[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class AnalyticsSettings(BaseSettings):
    """Analytics data retrieval configuration"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    store_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single source/report store call",
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the synthetic metrics engine (unset = nondeterministic)",
    )
    report_cache_ttl: int = Field(default=600, description="Report definition cache TTL in seconds")
    token_scope: str = Field(
        default="https://www.googleapis.com/auth/analytics.readonly",
        description="OAuth scope requested for service-account assertions",
    )
    token_audience: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="Token endpoint used as the assertion audience",
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="web-analytics-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @model_validator(mode="after")
    def require_jwt_secret(self) -> "Settings":
        """Refuse to verify bearer tokens with the placeholder secret outside local environments"""
        if (
            self.app_env not in LOCAL_ENVIRONMENTS
            and self.security.jwt_secret_key.get_secret_value() == DEFAULT_JWT_SECRET
        ):
            raise ValueError(f"JWT_SECRET_KEY must be set when APP_ENV is {self.app_env}")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()

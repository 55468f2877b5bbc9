"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system using Pydantic Settings,
providing type-safe configuration with validation and environment variable
support.

Every section reads its own flat environment prefix (``LOG_``, ``DB_``,
``REDIS_``, ``JWT_``, ``RATE_LIMIT_``, ``TRACING_``) so deployments can use
the conventional variable names directly, e.g. ``DB_HOST`` or
``RATE_LIMIT_REQUESTS``.

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

DEFAULT_JWT_SECRET = "change-me-in-production"  # noqa: S105 - development placeholder
MIN_PRODUCTION_BCRYPT_COST = 10


class _EnvSection(BaseSettings):
    """Base for configuration sections loaded from prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class LogConfig(_EnvSection):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format: human-readable text or structured JSON",
    )
    excluded_paths: list[str] = Field(
        default_factory=list,
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    sql_enabled: bool = Field(
        default=False,
        description="Enable slow SQL query logging",
    )
    slow_query_threshold_ms: int = Field(
        default=100,
        gt=0,
        description="Slow query threshold in milliseconds",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "password_hash",
            "token",
            "secret",
            "authorization",
        ],
        description="Field names to redact",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lower-case level names such as ``info``."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def formatter_type(self) -> Literal["console", "json"]:
        """Map the public format name onto the loguru formatter."""
        return "json" if self.format == "json" else "console"


class TracingConfig(_EnvSection):
    """OpenTelemetry tracing configuration."""

    model_config = SettingsConfigDict(env_prefix="TRACING_")

    enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    exporter: Literal["console", "otlp", "none"] = Field(
        default="console",
        description="Trace exporter type",
    )
    endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint",
    )
    sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Trace sampling rate (0.0 to 1.0)",
    )

    @field_validator("endpoint", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class DatabaseConfig(_EnvSection):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, ge=1, le=65535, description="Database port")
    user: str = Field(default="taskhub", description="Database user")
    password: str = Field(default="taskhub", description="Database password")
    name: str = Field(default="taskhub", description="Database name")
    ssl_mode: Literal[
        "disable", "allow", "prefer", "require", "verify-ca", "verify-full"
    ] = Field(default="disable", description="PostgreSQL SSL mode")
    url: str | None = Field(
        default=None,
        description="Full connection URL; overrides the individual fields",
    )
    pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of connections to maintain in the pool",
    )
    max_overflow: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Maximum overflow connections above pool_size",
    )
    pool_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout in seconds for acquiring a connection from the pool",
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Whether to test connections before using them",
    )
    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-statement deadline in seconds",
    )
    echo: bool = Field(
        default=False,
        description="Whether to log SQL statements (use only for debugging)",
    )

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate an explicit URL uses the async PostgreSQL driver."""
        if v in (None, ""):
            return None
        if not str(v).startswith("postgresql+asyncpg://"):
            msg = "Database URL must use postgresql+asyncpg:// driver for async support"
            raise ValueError(msg)
        return v

    @property
    def database_url(self) -> str:
        """Connection URL for the async engine."""
        if self.url:
            return self.url
        return URL.create(
            "postgresql+asyncpg",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
        ).render_as_string(hide_password=False)


class RedisConfig(_EnvSection):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    password: str = Field(default="", description="Redis password")
    db: int = Field(default=0, ge=0, description="Redis logical database")
    pool_size: int = Field(default=10, ge=1, description="Connection pool size")
    socket_timeout: float = Field(
        default=3.0, gt=0, description="Read/write timeout in seconds"
    )
    connect_timeout: float = Field(
        default=5.0, gt=0, description="Connect timeout in seconds"
    )


class JwtConfig(_EnvSection):
    """Bearer token settings."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    secret: str = Field(
        default=DEFAULT_JWT_SECRET, min_length=1, description="HMAC signing secret"
    )
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="Signing algorithm"
    )
    ttl_seconds: int = Field(
        default=86400, gt=0, description="Token lifetime in seconds"
    )


class RateLimitConfig(_EnvSection):
    """Fixed-window rate limiter settings."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    enabled: bool = Field(default=True, description="Enable the rate limiter")
    requests: int = Field(default=100, ge=1, description="Requests per window")
    window: int = Field(default=60, ge=1, description="Window length in seconds")
    local_fallback: bool = Field(
        default=False,
        description="Use an in-process token bucket when Redis is unavailable",
    )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="Taskhub", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API settings
    app_host: str = Field(default="0.0.0.0", description="API host")  # noqa: S104
    app_port: int = Field(default=3000, ge=1, le=65535, description="API port")
    docs_url: str | None = Field(default="/docs", description="Swagger UI URL")
    redoc_url: str | None = Field(default="/redoc", description="ReDoc URL")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema URL"
    )

    # Security settings
    bcrypt_cost: int = Field(
        default=10,
        ge=4,
        le=31,
        description="bcrypt work factor (log2 rounds)",
    )

    # Startup
    migrate_on_startup: bool = Field(
        default=True, description="Apply pending migrations before serving"
    )

    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )
    tracing_config: TracingConfig = Field(
        default_factory=TracingConfig, description="Tracing configuration"
    )
    database_config: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    redis_config: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    jwt_config: JwtConfig = Field(
        default_factory=JwtConfig, description="Token configuration"
    )
    rate_limit_config: RateLimitConfig = Field(
        default_factory=RateLimitConfig, description="Rate limiter configuration"
    )

    @property
    def is_production(self) -> bool:
        """Whether the application runs in production."""
        return self.app_env == "production"

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v: object) -> object:
        """Accept mixed-case environment names."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("docs_url", "redoc_url", "openapi_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v

    @model_validator(mode="after")
    def check_production_secrets(self) -> Self:
        """Refuse unsafe security settings in production."""
        if not self.is_production:
            return self
        if self.jwt_config.secret == DEFAULT_JWT_SECRET:
            msg = "JWT_SECRET must be set in production"
            raise ValueError(msg)
        if self.bcrypt_cost < MIN_PRODUCTION_BCRYPT_COST:
            msg = (
                f"BCRYPT_COST must be at least {MIN_PRODUCTION_BCRYPT_COST} "
                "in production"
            )
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

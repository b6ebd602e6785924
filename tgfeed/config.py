"""
Settings for tgfeed.

Each concern gets its own pydantic section:
- outbound HTTP client (timeouts, connection pool limits)
- channel scraping
- feed cache
- HTTP server
- logging

Values come from environment variables (``SECTION__FIELD``) or a .env file.
"""
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from tgfeed import DEFAULT_CACHE_TTL_MINUTES, __version__

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)


class LogLevel(str, Enum):
    """Log levels supported by the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class CacheBackend(str, Enum):
    """Cache backends supported."""
    MEMORY = "memory"
    REDIS = "redis"


class HTTPClientConfig(BaseModel):
    """
    Configuration for the outbound HTTP client.

    The client is built once from this configuration and shared by every
    request, so the model is frozen.
    """
    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    # Image size probes get their own, shorter bound
    image_timeout_seconds: float = 15.0
    max_connections: int = 100
    max_keepalive_connections: int = 10
    keepalive_expiry_seconds: float = 90.0
    max_concurrent_image_probes: int = 8
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator(
        "timeout_seconds",
        "connect_timeout_seconds",
        "image_timeout_seconds",
        "keepalive_expiry_seconds",
    )
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("max_connections", "max_keepalive_connections", "max_concurrent_image_probes")
    @classmethod
    def _positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("connection limits must be positive")
        return v


class ScraperConfig(BaseModel):
    """Configuration for channel page scraping."""
    domain: str = "t.me"
    title_max_length: int = 80
    fallback_link_text: str = "[Open in Telegram]"
    unsupported_title: str = "Content unsupported"

    @field_validator("title_max_length")
    @classmethod
    def _positive_length(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("title_max_length must be positive")
        return v


class CacheConfig(BaseModel):
    """Configuration for the caching layer."""
    enabled: bool = True
    backend: CacheBackend = CacheBackend.MEMORY
    redis_url: Optional[str] = None
    redis_password: Optional[SecretStr] = None
    default_ttl_minutes: int = DEFAULT_CACHE_TTL_MINUTES
    # Cache writes run with their own deadline, independent of the request
    write_timeout_seconds: float = 5.0
    connect_retries: int = 5

    @field_validator("default_ttl_minutes")
    @classmethod
    def _non_negative_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("default_ttl_minutes must be non-negative")
        return v

    @field_validator("write_timeout_seconds")
    @classmethod
    def _positive_write_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("write_timeout_seconds must be positive")
        return v

    @field_validator("connect_retries")
    @classmethod
    def _at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("connect_retries must be at least 1")
        return v

    @model_validator(mode="after")
    def _redis_requires_url(self) -> "CacheConfig":
        if self.enabled and self.backend == CacheBackend.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when using the redis cache backend")
        return self


class ServerConfig(BaseModel):
    """Configuration for the HTTP server."""
    host: str = "0.0.0.0"
    port: int = 8080


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = True


class Settings(BaseSettings):
    """Main settings class for tgfeed."""
    # Application metadata
    version: str = __version__
    environment: Environment = Environment.DEVELOPMENT

    # Component configurations
    http: HTTPClientConfig = Field(default_factory=HTTPClientConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    return Settings()

"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageBackend(str, Enum):
    """Supported evidence object store backends."""

    S3 = "s3"
    GCS = "gcs"
    NONE = "none"


class PostgresSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = "localhost"
    port: int = 5432
    user: str = "bastion"
    password: SecretStr = SecretStr("bastion_dev_password")
    db: str = "bastion"

    # Full SQLAlchemy URL, takes precedence over the discrete fields
    url: str | None = None

    pool_size: int = 10
    max_overflow: int = 20

    @property
    def async_url(self) -> str:
        """Generate async SQLAlchemy connection URL."""
        if self.url:
            return self.url
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.db}"

    @property
    def sync_url(self) -> str:
        """Generate sync SQLAlchemy connection URL."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.db}"


class S3Settings(BaseSettings):
    """Amazon S3 evidence bucket configuration."""

    model_config = SettingsConfigDict(env_prefix="AWS_", populate_by_name=True)

    bucket: str = Field(default="", alias="AWS_S3_BUCKET")
    region: str = ""
    # S3-compatible endpoints (MinIO, LocalStack)
    endpoint_url: str | None = Field(default=None, alias="AWS_S3_ENDPOINT_URL")

    @property
    def is_configured(self) -> bool:
        """Bucket and region are both required."""
        return bool(self.bucket and self.region)


class GCSSettings(BaseSettings):
    """Google Cloud Storage evidence bucket configuration."""

    model_config = SettingsConfigDict(env_prefix="GCS_")

    project_id: str = ""
    bucket_name: str = ""

    @property
    def is_configured(self) -> bool:
        """Project and bucket are both required."""
        return bool(self.project_id and self.bucket_name)


class StorageSettings(BaseSettings):
    """Evidence store backend selection."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    provider: StorageBackend = StorageBackend.NONE

    s3: S3Settings = Field(default_factory=S3Settings)
    gcs: GCSSettings = Field(default_factory=GCSSettings)

    @field_validator("provider", mode="before")
    @classmethod
    def lowercase_provider(cls, v: str | StorageBackend) -> StorageBackend:
        """Accept S3/GCS in any case."""
        if isinstance(v, str):
            return StorageBackend(v.strip().lower() or StorageBackend.NONE.value)
        return v


class EvidenceSettings(BaseSettings):
    """Evidence upload and access limits."""

    model_config = SettingsConfigDict(env_prefix="EVIDENCE_")

    max_file_size_bytes: int = 10 * 1024 * 1024
    signed_url_ttl_minutes: int = 15
    operation_timeout_seconds: float = 60.0


class NotificationSettings(BaseSettings):
    """Outbound assessment event notifications."""

    model_config = SettingsConfigDict(env_prefix="NOTIFICATIONS_")

    webhook_url: str | None = None
    timeout_seconds: float = 5.0
    max_attempts: int = 3

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)


class JWTSettings(BaseSettings):
    """JWT authentication configuration."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    secret_key: SecretStr = SecretStr("your-jwt-secret-key-min-32-chars-long")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class ServicePorts(BaseSettings):
    """Service port configuration."""

    assessment: int = Field(default=8003, alias="ASSESSMENT_PORT")


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO

    # Project paths
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)

    # Service ports
    ports: ServicePorts = Field(default_factory=ServicePorts)

    # Database
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)

    # Evidence storage
    storage: StorageSettings = Field(default_factory=StorageSettings)
    evidence: EvidenceSettings = Field(default_factory=EvidenceSettings)

    # Outbound events
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    # Authentication
    jwt: JWTSettings = Field(default_factory=JWTSettings)

    # Security
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()

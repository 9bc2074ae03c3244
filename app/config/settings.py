from typing import Annotated, Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and .env).
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Consultation Scheduling API"
    PROJECT_DESCRIPTION: str = "Time slots, bookings, appointment lifecycle and visit records"
    VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: str = Field("development", description="development, test or production")
    DEBUG: bool = Field(False, description="Debug mode")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN; error reporting is disabled when empty")

    # CORS
    CORS_ORIGINS: Annotated[list[str], NoDecode] = Field(default=["*"], description="Allowed CORS origins")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("scheduling", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections after N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Seconds to wait for a pooled connection")

    # Authentication (tokens are issued by the identity service)
    JWT_SECRET_KEY: str = Field("change-me", description="Secret used to verify bearer tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Bearer token signature algorithm")

    # Lab report attachments
    ATTACHMENTS_DIR: str = Field("uploads/lab_reports", description="Directory for stored lab reports")
    ATTACHMENTS_PUBLIC_URL: str = Field("/attachments", description="URL prefix lab reports are served under")
    MAX_FILE_SIZE: int = Field(10 * 1024 * 1024, description="Maximum file size in bytes (10MB)")
    ALLOWED_EXTENSIONS: Annotated[list[str], NoDecode] = Field(
        default=["jpg", "jpeg", "png", "pdf", "doc", "docx"], description="Allowed attachment extensions"
    )

    # Booking
    BOOKING_PASSWORD_PREFIX: str = Field("Pass", description="Prefix of generated patient passwords")

    # Notifications
    SMTP_HOST: str | None = Field(None, description="SMTP host; messages are only logged when empty")
    SMTP_PORT: int = Field(587, description="SMTP port")
    SMTP_USER: str = Field("", description="SMTP username")
    SMTP_PASSWORD: str = Field("", description="SMTP password")
    SMTP_USE_TLS: bool = Field(True, description="Use STARTTLS")
    MAIL_FROM: str = Field("no-reply@medicare.local", description="Sender address")
    CLINIC_NAME: str = Field("MediCare", description="Clinic name used in messages")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown variables instead of failing
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("ALLOWED_EXTENSIONS", "CORS_ORIGINS", mode="before")
    @classmethod
    def parse_comma_separated(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("ALLOWED_EXTENSIONS")
    @classmethod
    def normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower().lstrip(".") for ext in value]

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @field_validator("MAX_FILE_SIZE")
    @classmethod
    def validate_max_file_size(cls, v):
        if v < 1:
            raise ValueError("MAX_FILE_SIZE must be positive")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Synchronous PostgreSQL URL (alembic)."""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def async_database_url(self) -> str:
        """asyncpg PostgreSQL URL (application)."""
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @computed_field
    @property
    def is_development(self) -> bool:
        """Development mode: debug on or a development environment name."""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance.
    Avoids reading the environment more than once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

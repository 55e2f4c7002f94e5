"""Centralized configuration management using Pydantic Settings.

This module provides typed configuration for all application settings,
loaded from environment variables with sensible defaults. ``DATABASE_URL``
and ``BASE_URL`` have no default: building ``Settings`` without them fails,
which aborts application startup.

Usage:
    from devevent.config import get_settings
    settings = get_settings()
    dsn = settings.database.url
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_", extra="ignore")

    url: str = Field(description="libpq connection string or postgresql:// URL")
    pool_min_size: int = Field(default=2, description="Minimum pool size")
    pool_max_size: int = Field(default=10, description="Maximum pool size")
    acquire_timeout: float = Field(
        default=10.0, description="Seconds to wait for a pooled connection"
    )
    idle_timeout: float = Field(
        default=45.0, description="Seconds an idle connection is kept open"
    )
    connect_timeout: int = Field(default=10, description="Socket connect timeout in seconds")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("DATABASE_URL must not be empty")
        return v


class SiteSettings(BaseSettings):
    """Public site configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    base_url: str = Field(description="Base URL used for server-to-server page data fetches")
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("BASE_URL must not be empty")
        return v


class CloudinarySettings(BaseSettings):
    """Image hosting credentials."""

    model_config = SettingsConfigDict(env_prefix="CLOUDINARY_", extra="ignore")

    cloud_name: str = Field(default="", description="Cloudinary cloud name")
    api_key: str = Field(default="", description="Cloudinary API key")
    api_secret: str = Field(default="", description="Cloudinary API secret")
    folder: str = Field(default="DevEvent", description="Target folder for event images")
    timeout: float = Field(default=30.0, description="Upload request timeout in seconds")

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class UploadSettings(BaseSettings):
    """Limits applied to uploaded event images."""

    model_config = SettingsConfigDict(env_prefix="UPLOAD_", extra="ignore")

    max_bytes: int = Field(default=5 * 1024 * 1024, description="Maximum image size")
    allowed_types_raw: str = Field(
        default="image/jpeg,image/png,image/webp,image/gif",
        validation_alias="UPLOAD_ALLOWED_TYPES",
    )

    @property
    def allowed_types(self) -> list[str]:
        """Parse comma-separated content types into list."""
        return [t.strip().lower() for t in self.allowed_types_raw.split(",") if t.strip()]


class CorsSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    origins_raw: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )
    origins_regex: str = Field(
        default="",
        validation_alias="CORS_ORIGINS_REGEX",
        description="Regex pattern for origins",
    )

    @property
    def origins(self) -> list[str]:
        """Parse comma-separated origins into list."""
        return [o.strip() for o in self.origins_raw.split(",") if o.strip()]

    @property
    def allow_credentials(self) -> bool:
        """Credentials not allowed with wildcard origins."""
        return self.origins != ["*"] and not self.origins_regex


class DebugSettings(BaseSettings):
    """Debug flags configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    request: bool = Field(default=False, alias="request_debug")

    @field_validator("*", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)


class Settings:
    """Main application settings combining all configuration sections.

    This is not a BaseSettings subclass to avoid env var conflicts.
    Each subsetting is loaded independently with its own prefix.
    """

    def __init__(self) -> None:
        self.database = DatabaseSettings()
        self.site = SiteSettings()
        self.cloudinary = CloudinarySettings()
        self.upload = UploadSettings()
        self.cors = CorsSettings()
        self.debug = DebugSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance (singleton pattern)."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear cached settings (useful for testing)."""
    get_settings.cache_clear()

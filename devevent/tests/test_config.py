"""Tests for centralized configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

REQUIRED = {
    "DATABASE_URL": "postgresql://devuser@db:5432/devevent",
    "BASE_URL": "https://devevent.example.com/",
}


class TestDatabaseSettings:
    """Test PostgreSQL configuration settings."""

    def test_url_required(self):
        """Test that a missing DATABASE_URL fails validation."""
        from devevent.config import DatabaseSettings

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                DatabaseSettings()

    def test_blank_url_rejected(self):
        from devevent.config import DatabaseSettings

        with patch.dict(os.environ, {"DATABASE_URL": "   "}, clear=True):
            with pytest.raises(ValidationError):
                DatabaseSettings()

    def test_default_values(self):
        """Test pool settings have sensible defaults."""
        from devevent.config import DatabaseSettings

        with patch.dict(os.environ, {"DATABASE_URL": REQUIRED["DATABASE_URL"]}, clear=True):
            settings = DatabaseSettings()
            assert settings.url == REQUIRED["DATABASE_URL"]
            assert settings.pool_min_size == 2
            assert settings.pool_max_size == 10
            assert settings.acquire_timeout == 10.0
            assert settings.idle_timeout == 45.0
            assert settings.connect_timeout == 10

    def test_from_environment(self):
        """Test pool settings can be loaded from environment."""
        from devevent.config import DatabaseSettings

        env = {
            "DATABASE_URL": REQUIRED["DATABASE_URL"],
            "DATABASE_POOL_MIN_SIZE": "1",
            "DATABASE_POOL_MAX_SIZE": "4",
            "DATABASE_ACQUIRE_TIMEOUT": "2.5",
            "DATABASE_IDLE_TIMEOUT": "60",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = DatabaseSettings()
            assert settings.pool_min_size == 1
            assert settings.pool_max_size == 4
            assert settings.acquire_timeout == 2.5
            assert settings.idle_timeout == 60.0


class TestSiteSettings:
    """Test public site settings."""

    def test_base_url_required(self):
        from devevent.config import SiteSettings

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                SiteSettings()

    def test_trailing_slash_stripped(self):
        """Test that BASE_URL is stored without a trailing slash."""
        from devevent.config import SiteSettings

        with patch.dict(os.environ, REQUIRED, clear=True):
            settings = SiteSettings()
            assert settings.base_url == "https://devevent.example.com"
            assert settings.log_level == "INFO"


class TestCloudinarySettings:
    """Test image hosting settings."""

    def test_not_configured_by_default(self):
        from devevent.config import CloudinarySettings

        with patch.dict(os.environ, {}, clear=True):
            settings = CloudinarySettings()
            assert settings.configured is False
            assert settings.folder == "DevEvent"

    def test_configured_from_environment(self):
        from devevent.config import CloudinarySettings

        env = {
            "CLOUDINARY_CLOUD_NAME": "demo",
            "CLOUDINARY_API_KEY": "key",
            "CLOUDINARY_API_SECRET": "secret",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = CloudinarySettings()
            assert settings.configured is True
            assert settings.cloud_name == "demo"


class TestUploadSettings:
    """Test image upload limits."""

    def test_defaults(self):
        from devevent.config import UploadSettings

        with patch.dict(os.environ, {}, clear=True):
            settings = UploadSettings()
            assert settings.max_bytes == 5 * 1024 * 1024
            assert settings.allowed_types == ["image/jpeg", "image/png", "image/webp", "image/gif"]

    def test_allowed_types_parsing(self):
        from devevent.config import UploadSettings

        with patch.dict(os.environ, {"UPLOAD_ALLOWED_TYPES": " image/PNG , ,image/gif "}, clear=True):
            settings = UploadSettings()
            assert settings.allowed_types == ["image/png", "image/gif"]


class TestCorsSettings:
    """Test CORS configuration settings."""

    def test_cors_origins_parsing(self):
        """Test that comma-separated origins are parsed correctly."""
        from devevent.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "http://localhost:3000, https://devevent.example.com"}, clear=True):
            settings = CorsSettings()
            assert settings.origins == ["http://localhost:3000", "https://devevent.example.com"]
            assert settings.allow_credentials is True

    def test_wildcard_disables_credentials(self):
        from devevent.config import CorsSettings

        with patch.dict(os.environ, {"CORS_ORIGINS": "*"}, clear=True):
            settings = CorsSettings()
            assert settings.allow_credentials is False


class TestDebugSettings:
    """Test debug flags."""

    @pytest.mark.parametrize("value,expected", [("1", True), ("true", True), ("yes", True), ("0", False), ("off", False)])
    def test_request_debug(self, value, expected):
        from devevent.config import DebugSettings

        with patch.dict(os.environ, {"REQUEST_DEBUG": value}, clear=True):
            assert DebugSettings().request is expected


class TestGetSettings:
    """Test the cached settings accessor."""

    def test_cached(self):
        from devevent.config import clear_settings_cache, get_settings

        with patch.dict(os.environ, REQUIRED, clear=True):
            clear_settings_cache()
            assert get_settings() is get_settings()

    def test_missing_required_fails(self):
        """Test that startup fails when required configuration is absent."""
        from devevent.config import clear_settings_cache, get_settings

        with patch.dict(os.environ, {"BASE_URL": REQUIRED["BASE_URL"]}, clear=True):
            clear_settings_cache()
            with pytest.raises(ValidationError):
                get_settings()

    def test_create_app_fails_without_database_url(self):
        from devevent.config import clear_settings_cache
        from devevent.main import create_app

        with patch.dict(os.environ, {"BASE_URL": REQUIRED["BASE_URL"]}, clear=True):
            clear_settings_cache()
            with pytest.raises(ValidationError):
                create_app()

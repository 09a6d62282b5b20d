"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    IdentityProviderSettings,
    PlatformSettings,
    Settings,
)
from tenancy.dependencies import build_routing_config


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_respects_upper_limit(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_hides_password(self):
        settings = DatabaseSettings(password="secret")
        assert "secret" not in settings.connection_string


class TestPlatformSettings:
    """Tests for platform layout settings."""

    def test_defaults(self):
        settings = PlatformSettings()

        assert settings.apex_domain == "booqing.my.id"
        assert settings.platform_label == "booqing"
        assert settings.all_reserved_labels == {"www", "admin", "booqing"}
        assert settings.apex_admin_url == "https://booqing.my.id/admin"
        assert settings.store_backend == "database"
        assert settings.local_dev_enabled is False

    def test_apex_domain_is_normalized(self):
        settings = PlatformSettings(apex_domain=" Platform.Example. ")
        assert settings.apex_domain == "platform.example"

    def test_empty_apex_domain_rejected(self):
        with pytest.raises(ValidationError):
            PlatformSettings(apex_domain="  ")

    def test_reserved_labels_lowercased(self):
        settings = PlatformSettings(reserved_labels=["WWW", " App ", ""])
        assert settings.reserved_labels == ["www", "app"]

    def test_paths_must_be_absolute(self):
        with pytest.raises(ValidationError):
            PlatformSettings(admin_path="admin")

    def test_login_must_be_under_admin(self):
        with pytest.raises(ValidationError):
            PlatformSettings(login_path="/login")

    def test_trailing_slash_stripped(self):
        settings = PlatformSettings(admin_path="/console/", login_path="/console/login/")
        assert settings.admin_path == "/console"
        assert settings.login_path == "/console/login"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("BOOKING_PLATFORM_APEX_DOMAIN", "platform.example")
        monkeypatch.setenv("BOOKING_PLATFORM_STORE_BACKEND", "memory")
        monkeypatch.setenv("BOOKING_PLATFORM_LOCAL_DEV_ENABLED", "true")

        settings = PlatformSettings()

        assert settings.apex_domain == "platform.example"
        assert settings.store_backend == "memory"
        assert settings.local_dev_enabled is True

    def test_unknown_store_backend_rejected(self):
        with pytest.raises(ValidationError):
            PlatformSettings(store_backend="redis")

    def test_routing_config_mirrors_settings(self):
        settings = PlatformSettings(
            apex_domain="platform.example", reserved_labels=["www", "api"]
        )

        config = build_routing_config(settings)

        assert config.apex_domain == "platform.example"
        assert config.reserved_labels == frozenset({"www", "api"})
        assert config.apex_admin_url == settings.apex_admin_url
        assert config.all_reserved_labels == settings.all_reserved_labels


class TestIdentityProviderSettings:
    """Tests for identity provider settings."""

    def test_unconfigured_by_default(self):
        settings = IdentityProviderSettings()

        assert not settings.is_configured
        assert settings.audience == ""

    def test_audience_and_issuer_derive_from_project(self):
        settings = IdentityProviderSettings(project_id="booking-prod")

        assert settings.is_configured
        assert settings.audience == "booking-prod"
        assert settings.issuer == "https://securetoken.google.com/booking-prod"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            IdentityProviderSettings(request_timeout_seconds=0)


class TestSettings:
    def test_log_level_is_validated(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

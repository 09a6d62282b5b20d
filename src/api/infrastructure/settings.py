"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly,
in particular the identity provider project and the apex domain.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        BOOKING_DB_HOST: Database host (default: localhost)
        BOOKING_DB_PORT: Database port (default: 5432)
        BOOKING_DB_DATABASE: Database name (default: booking)
        BOOKING_DB_USERNAME: Database user (default: booking)
        BOOKING_DB_PASSWORD: Database password (required in production)
        BOOKING_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        BOOKING_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="booking", description="Database name")
    username: str = Field(default="booking", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class PlatformSettings(BaseSettings):
    """Host and path layout of the platform.

    Environment variables:
        BOOKING_PLATFORM_APEX_DOMAIN: Platform root domain (default: booqing.my.id)
        BOOKING_PLATFORM_APEX_SCHEME: Scheme for absolute apex redirects (default: https)
        BOOKING_PLATFORM_RESERVED_LABELS: Labels never treated as tenants (default: ["www"])
        BOOKING_PLATFORM_LOCAL_DEV_ENABLED: Allow the loopback development bypass (default: true)
        BOOKING_PLATFORM_LOOPBACK_HOSTS: Hostnames treated as local development
        BOOKING_PLATFORM_STORE_BACKEND: "database" or "memory" (default: database)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_PLATFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    apex_domain: str = Field(
        default="booqing.my.id",
        description="The platform's own root domain",
    )
    apex_scheme: Literal["http", "https"] = Field(
        default="https",
        description="Scheme used when redirecting to the apex domain",
    )
    reserved_labels: list[str] = Field(
        default_factory=lambda: ["www", "admin"],
        description="Leading host labels that never name a tenant",
    )
    local_dev_enabled: bool = Field(
        default=False,
        description="Treat loopback hosts as local development (no auth)",
    )
    loopback_hosts: list[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1", "::1"],
        description="Hostnames that identify local development",
    )
    admin_path: str = Field(default="/admin", description="Platform admin entry point")
    login_path: str = Field(default="/admin/login", description="Admin login page")
    tenant_path_prefix: str = Field(
        default="/tenant",
        description="Shared route namespace serving tenant content",
    )
    global_tenant_id: str = Field(
        default="global",
        description="Tenant id used for platform administration",
    )
    local_dev_role: str = Field(
        default="admin",
        description="Role assumed for admin paths in local development",
    )
    local_tenant_prefix: str = Field(
        default="local:",
        description="Marks tenant ids synthesized from the path in local development",
    )
    excluded_path_prefixes: list[str] = Field(
        default_factory=lambda: ["/api", "/static", "/health", "/favicon.ico"],
        description="Paths passed through without routing decisions",
    )
    session_cookie_name: str = Field(
        default="session",
        description="Cookie carrying the ID token when no bearer header is sent",
    )
    store_backend: Literal["database", "memory"] = Field(
        default="database",
        description="Tenant directory and user store backend (memory is for local work only)",
    )

    @field_validator("apex_domain")
    @classmethod
    def normalize_apex_domain(cls, value: str) -> str:
        """Lower-case the apex domain and reject empty values."""
        value = value.strip().lower().rstrip(".")
        if not value:
            raise ValueError("apex_domain must not be empty")
        return value

    @field_validator("reserved_labels", "loopback_hosts")
    @classmethod
    def normalize_labels(cls, value: list[str]) -> list[str]:
        """Lower-case host labels for case-insensitive matching."""
        return [item.strip().lower() for item in value if item.strip()]

    @field_validator("admin_path", "login_path", "tenant_path_prefix")
    @classmethod
    def validate_path(cls, value: str) -> str:
        """Paths must be absolute and carry no trailing slash."""
        if not value.startswith("/"):
            raise ValueError(f"path must start with '/': {value!r}")
        return value.rstrip("/") or "/"

    @model_validator(mode="after")
    def validate_login_under_admin(self) -> "PlatformSettings":
        """The login page must live inside the admin area."""
        if not self.login_path.startswith(self.admin_path + "/"):
            raise ValueError(
                f"login_path ({self.login_path}) must be under admin_path "
                f"({self.admin_path})"
            )
        return self

    @property
    def platform_label(self) -> str:
        """First label of the apex domain (e.g. 'booqing')."""
        return self.apex_domain.split(".")[0]

    @property
    def all_reserved_labels(self) -> frozenset[str]:
        """Reserved labels including the platform's own label."""
        return frozenset([*self.reserved_labels, self.platform_label])

    @property
    def apex_admin_url(self) -> str:
        """Absolute URL of the admin entry point on the apex domain."""
        return f"{self.apex_scheme}://{self.apex_domain}{self.admin_path}"


class IdentityProviderSettings(BaseSettings):
    """Identity provider (ID token issuer) settings.

    Environment variables:
        BOOKING_IDP_PROJECT_ID: Provider project id; audience and issuer derive from it
        BOOKING_IDP_ISSUER_PREFIX: Issuer prefix (default: https://securetoken.google.com/)
        BOOKING_IDP_JWKS_URL: Published JSON Web Key Set URL
        BOOKING_IDP_REQUEST_TIMEOUT_SECONDS: Timeout for key set fetches (default: 5)
        BOOKING_IDP_JWKS_CACHE_TTL_SECONDS: Upper bound on key cache lifetime (default: 3600)
        BOOKING_IDP_MAX_TOKEN_AGE_SECONDS: Oldest accepted token issue time (default: 86400)
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_IDP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_id: str = Field(
        default="",
        description="Identity provider project id (empty disables verification)",
    )
    issuer_prefix: str = Field(
        default="https://securetoken.google.com/",
        description="Issuer URL prefix; the project id is appended",
    )
    jwks_url: str = Field(
        default=(
            "https://www.googleapis.com/service_accounts/v1/jwk/"
            "securetoken@system.gserviceaccount.com"
        ),
        description="URL of the published JSON Web Key Set",
    )
    request_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Timeout for outbound key set requests",
    )
    jwks_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="Maximum time a fetched signing key is served from cache",
    )
    jwks_min_refresh_seconds: int = Field(
        default=30,
        ge=0,
        description="Minimum spacing between refetches caused by unknown key ids",
    )
    max_token_age_seconds: int = Field(
        default=86400,
        gt=0,
        description="Tokens issued longer ago than this are rejected",
    )
    clock_skew_seconds: int = Field(
        default=30,
        ge=0,
        le=300,
        description="Leeway applied to time-based claims",
    )

    @property
    def is_configured(self) -> bool:
        """Whether a provider project has been configured."""
        return bool(self.project_id.strip())

    @property
    def audience(self) -> str:
        """Expected audience claim."""
        return self.project_id.strip()

    @property
    def issuer(self) -> str:
        """Expected issuer claim."""
        return f"{self.issuer_prefix}{self.project_id.strip()}"


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Booking Platform", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info", description="Minimum log level"
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def platform(self) -> PlatformSettings:
        """Get platform settings."""
        return get_platform_settings()

    @property
    def identity_provider(self) -> IdentityProviderSettings:
        """Get identity provider settings."""
        return get_identity_provider_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_platform_settings() -> PlatformSettings:
    """Get cached platform settings."""
    return PlatformSettings()


@lru_cache
def get_identity_provider_settings() -> IdentityProviderSettings:
    """Get cached identity provider settings."""
    return IdentityProviderSettings()

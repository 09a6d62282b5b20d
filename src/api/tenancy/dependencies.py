"""Wiring for the tenancy bounded context.

The backing stores and the token verifier are selected once during
process startup and injected into a single RequestRouter. Handlers read the
resolved routing context through ``get_routing_context``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from infrastructure.database import get_read_sessionmaker
from infrastructure.settings import (
    IdentityProviderSettings,
    PlatformSettings,
    get_identity_provider_settings,
    get_platform_settings,
)
from shared_kernel.auth import (
    DefaultJWTValidatorProbe,
    JWKSKeyCache,
    JWTValidator,
)
from shared_kernel.middleware.tenant_context import RoutingContext
from tenancy.application.router import RequestRouter
from tenancy.domain.entities import Tenant
from tenancy.domain.routing import RoutingConfig
from tenancy.domain.value_objects import Subdomain, TenantId
from tenancy.infrastructure.in_memory import InMemoryTenantDirectory, InMemoryUserStore
from tenancy.infrastructure.tenant_directory import TenantDirectory
from tenancy.infrastructure.user_store import UserStore
from tenancy.ports.repositories import ITenantDirectory, IUserStore
from tenancy.presentation.middleware import ROUTING_CONTEXT_STATE_KEY

# Subdomain of the platform administration tenant seeded into memory stores.
GLOBAL_TENANT_SUBDOMAIN = "admin"


def build_routing_config(settings: PlatformSettings) -> RoutingConfig:
    """Translate platform settings into the router's configuration object."""
    return RoutingConfig(
        apex_domain=settings.apex_domain,
        apex_scheme=settings.apex_scheme,
        reserved_labels=frozenset(settings.reserved_labels),
        local_dev_enabled=settings.local_dev_enabled,
        loopback_hosts=frozenset(settings.loopback_hosts),
        admin_path=settings.admin_path,
        login_path=settings.login_path,
        tenant_path_prefix=settings.tenant_path_prefix,
        global_tenant_id=settings.global_tenant_id,
        local_dev_role=settings.local_dev_role,
        local_tenant_prefix=settings.local_tenant_prefix,
        excluded_path_prefixes=tuple(settings.excluded_path_prefixes),
        session_cookie_name=settings.session_cookie_name,
    )


def build_jwt_validator(settings: IdentityProviderSettings) -> JWTValidator:
    """Build the ID token validator and its signing key cache.

    Both are long-lived so that fetched keys are reused across requests.
    """
    probe = DefaultJWTValidatorProbe()
    key_cache = JWKSKeyCache(
        jwks_url=settings.jwks_url,
        probe=probe,
        timeout=settings.request_timeout_seconds,
        cache_ttl=timedelta(seconds=settings.jwks_cache_ttl_seconds),
        min_refresh_interval=timedelta(seconds=settings.jwks_min_refresh_seconds),
    )
    return JWTValidator(
        audience=settings.audience,
        issuer=settings.issuer,
        key_cache=key_cache,
        probe=probe,
        max_token_age=timedelta(seconds=settings.max_token_age_seconds),
        leeway=timedelta(seconds=settings.clock_skew_seconds),
    )


def build_memory_stores(
    global_tenant_id: str,
) -> tuple[InMemoryTenantDirectory, InMemoryUserStore]:
    """Build in-memory stores for local development.

    The directory holds only the platform tenant, whose ``admin`` subdomain
    is a reserved label and never resolves as a tenant host. The user store
    is empty, so admin logins always redirect; use the database backend
    for anything but local work.
    """
    now = datetime.now(timezone.utc)
    directory = InMemoryTenantDirectory(
        [
            Tenant(
                id=TenantId.from_string(global_tenant_id),
                subdomain=Subdomain(GLOBAL_TENANT_SUBDOMAIN),
                name="Global Admin",
                created_at=now,
                updated_at=now,
            )
        ]
    )
    return directory, InMemoryUserStore()


def build_stores(settings: PlatformSettings) -> tuple[ITenantDirectory, IUserStore]:
    """Select the store backend named in settings."""
    if settings.store_backend == "memory":
        return build_memory_stores(settings.global_tenant_id)

    session_factory = get_read_sessionmaker()
    return TenantDirectory(session_factory), UserStore(session_factory)


def build_request_router(
    platform_settings: PlatformSettings | None = None,
    idp_settings: IdentityProviderSettings | None = None,
) -> RequestRouter:
    """Build the process-wide request router from settings.

    Args:
        platform_settings: Defaults to the cached environment settings.
        idp_settings: Defaults to the cached environment settings.

    Returns:
        A RequestRouter with its stores and token verifier injected.
    """
    platform_settings = platform_settings or get_platform_settings()
    idp_settings = idp_settings or get_identity_provider_settings()

    tenant_directory, user_store = build_stores(platform_settings)
    return RequestRouter(
        config=build_routing_config(platform_settings),
        tenant_directory=tenant_directory,
        user_store=user_store,
        token_verifier=build_jwt_validator(idp_settings),
    )


def get_routing_context(request: Request) -> RoutingContext | None:
    """Return the routing context attached by TenantRoutingMiddleware.

    Falls back to the propagated headers when the request state carries
    no context (e.g. when the middleware runs in a separate process).
    Returns None on paths excluded from routing.
    """
    context = getattr(request.state, ROUTING_CONTEXT_STATE_KEY, None)
    if isinstance(context, RoutingContext):
        return context
    return RoutingContext.from_headers(request.headers)


def require_routing_context(
    context: Annotated[RoutingContext | None, Depends(get_routing_context)],
) -> RoutingContext:
    """Like get_routing_context, but rejects requests without a context.

    Raises:
        HTTPException 404: If no tenant scope was resolved for the request
    """
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No tenant scope for this request",
        )
    return context

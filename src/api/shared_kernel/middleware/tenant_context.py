"""Routing context value object and its header transport.

The routing context is the request-scoped result of tenant resolution:
which tenant the request is scoped to and, when the caller authenticated,
who they are. It is created once per request by the routing middleware,
propagated to handlers, and never persisted.

This module is framework-agnostic; the middleware that produces the
context lives in the tenancy bounded context.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

TENANT_ID_HEADER = "x-tenant-id"
TENANT_SUBDOMAIN_HEADER = "x-tenant-subdomain"
USER_ID_HEADER = "x-user-id"
USER_ROLE_HEADER = "x-user-role"

# Inbound copies of these are always discarded before routing.
CONTEXT_HEADERS: tuple[str, ...] = (
    TENANT_ID_HEADER,
    TENANT_SUBDOMAIN_HEADER,
    USER_ID_HEADER,
    USER_ROLE_HEADER,
)


@dataclass(frozen=True)
class RoutingContext:
    """Resolved tenant and caller identity for the current request.

    Attributes:
        tenant_id: Tenant the request is scoped to. Always present.
        subdomain: Tenant subdomain, when the tenant was resolved from one.
        user_id: Authenticated caller, when the request was authenticated.
        role: Role of the authenticated caller.
    """

    tenant_id: str
    subdomain: str | None = None
    user_id: str | None = None
    role: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a caller identity is attached."""
        return self.user_id is not None

    def as_headers(self) -> dict[str, str]:
        """Render the context as request headers, omitting absent fields."""
        headers = {TENANT_ID_HEADER: self.tenant_id}
        if self.subdomain is not None:
            headers[TENANT_SUBDOMAIN_HEADER] = self.subdomain
        if self.user_id is not None:
            headers[USER_ID_HEADER] = self.user_id
        if self.role is not None:
            headers[USER_ROLE_HEADER] = self.role
        return headers

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RoutingContext | None:
        """Rebuild a context from propagated headers.

        Args:
            headers: Case-insensitive header mapping (e.g. Starlette Headers)
                or a plain dict with lower-case keys.

        Returns:
            The context, or None when no tenant id header is present.
        """
        tenant_id = headers.get(TENANT_ID_HEADER)
        if not tenant_id:
            return None
        return cls(
            tenant_id=tenant_id,
            subdomain=headers.get(TENANT_SUBDOMAIN_HEADER) or None,
            user_id=headers.get(USER_ID_HEADER) or None,
            role=headers.get(USER_ROLE_HEADER) or None,
        )

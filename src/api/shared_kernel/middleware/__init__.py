"""Shared middleware value objects for cross-cutting concerns.

The routing context is the primary component: it carries the resolved
tenant and caller identity from the routing middleware to handlers.
"""

from shared_kernel.middleware.tenant_context import (
    CONTEXT_HEADERS,
    RoutingContext,
)

__all__ = [
    "CONTEXT_HEADERS",
    "RoutingContext",
]

"""Response models for the page routes."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared_kernel.middleware.tenant_context import RoutingContext


class RoutingContextResponse(BaseModel):
    """Routing context as seen by a handler."""

    tenant_id: str = Field(..., description="Tenant the request is scoped to")
    subdomain: str | None = Field(default=None, description="Resolved tenant subdomain")
    user_id: str | None = Field(default=None, description="Authenticated caller")
    role: str | None = Field(default=None, description="Role of the caller")

    @classmethod
    def from_context(cls, context: RoutingContext) -> RoutingContextResponse:
        """Convert the shared kernel value object."""
        return cls(
            tenant_id=context.tenant_id,
            subdomain=context.subdomain,
            user_id=context.user_id,
            role=context.role,
        )


class PageResponse(BaseModel):
    """Placeholder page payload: which page was served and in what scope."""

    page: str = Field(..., description="Logical page name")
    path: str = Field(..., description="Path the handler was reached on")
    context: RoutingContextResponse | None = Field(
        default=None, description="Routing context attached by the middleware"
    )

"""Page routes consuming the routing context.

These handlers stand in for the landing site, the admin back-office and
the per-tenant booking sites. They only echo the resolved scope; page
rendering lives elsewhere.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from shared_kernel.middleware.tenant_context import RoutingContext
from tenancy.dependencies import get_routing_context, require_routing_context
from tenancy.presentation.models import PageResponse, RoutingContextResponse

router = APIRouter(tags=["pages"])


def _page(name: str, request: Request, context: RoutingContext | None) -> PageResponse:
    return PageResponse(
        page=name,
        path=request.url.path,
        context=RoutingContextResponse.from_context(context) if context else None,
    )


@router.get("/", response_model=PageResponse)
async def landing_page(
    request: Request,
    context: Annotated[RoutingContext | None, Depends(get_routing_context)],
) -> PageResponse:
    """Platform landing page with tenant registration."""
    return _page("landing", request, context)


@router.get("/admin/login", response_model=PageResponse)
async def admin_login_page(
    request: Request,
    context: Annotated[RoutingContext | None, Depends(get_routing_context)],
) -> PageResponse:
    """Admin sign-in page. Never requires a token."""
    return _page("admin_login", request, context)


@router.get("/admin", response_model=PageResponse)
async def admin_dashboard(
    request: Request,
    context: Annotated[RoutingContext, Depends(require_routing_context)],
) -> PageResponse:
    """Admin entry point."""
    return _page("admin_dashboard", request, context)


@router.get("/admin/{page:path}", response_model=PageResponse)
async def admin_page(
    page: str,
    request: Request,
    context: Annotated[RoutingContext, Depends(require_routing_context)],
) -> PageResponse:
    """Any other admin page (tenants, users, bookings, reports)."""
    return _page(f"admin:{page}", request, context)


def _require_tenant_scope(subdomain: str, context: RoutingContext) -> None:
    """Tenant pages are only served within their own tenant's scope."""
    if context.subdomain != subdomain:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found",
        )


@router.get("/tenant/{subdomain}", response_model=PageResponse)
async def tenant_landing_page(
    subdomain: str,
    request: Request,
    context: Annotated[RoutingContext, Depends(require_routing_context)],
) -> PageResponse:
    """A tenant's public landing page."""
    _require_tenant_scope(subdomain, context)
    return _page("tenant_landing", request, context)


@router.get("/tenant/{subdomain}/{page:path}", response_model=PageResponse)
async def tenant_page(
    subdomain: str,
    page: str,
    request: Request,
    context: Annotated[RoutingContext, Depends(require_routing_context)],
) -> PageResponse:
    """Any other page of a tenant's public site (e.g. ``book``)."""
    _require_tenant_scope(subdomain, context)
    return _page(f"tenant:{page}", request, context)

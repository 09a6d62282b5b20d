"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from tenancy.application.router import RequestRouter
from tenancy.dependencies import build_request_router
from tenancy.presentation import routes as page_routes
from tenancy.presentation.middleware import TenantRoutingMiddleware


@asynccontextmanager
async def booking_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Database engine disposal on shutdown (engines are created lazily)
    """
    yield

    await close_database_connections()


def create_app(router: RequestRouter | None = None) -> FastAPI:
    """Build the application.

    Args:
        router: Request router to install. Defaults to one built from the
            environment; tests pass a router with fake stores.

    Returns:
        The configured FastAPI application.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant appointment booking platform",
        version=__version__,
        debug=settings.debug,
        lifespan=booking_lifespan,
    )

    app.add_middleware(
        TenantRoutingMiddleware,
        router=router or build_request_router(),
    )

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    app.include_router(page_routes.router)

    return app


app = create_app()

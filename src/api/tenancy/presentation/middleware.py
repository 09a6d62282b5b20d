"""ASGI middleware applying routing decisions to inbound requests.

The middleware runs ahead of FastAPI routing. It asks the RequestRouter
for a decision, then either answers with a redirect or forwards the request
with its routing context attached (and its path rewritten, when the
decision says so).

Routing context reaches handlers two ways: as ``request.state.routing_context``
and as the ``x-tenant-*`` / ``x-user-*`` request headers. Inbound copies of
those headers are always stripped so that callers can never supply their
own context.
"""

from __future__ import annotations

from urllib.parse import quote

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from ulid import ULID

from shared_kernel.middleware.tenant_context import CONTEXT_HEADERS, RoutingContext
from tenancy.application.router import RequestRouter
from tenancy.domain.routing import RoutingAction, RoutingDecision, RoutingRequest

REQUEST_ID_HEADER = "x-request-id"
ROUTING_CONTEXT_STATE_KEY = "routing_context"

_CONTEXT_HEADER_KEYS = frozenset(name.encode("latin-1") for name in CONTEXT_HEADERS)


def _with_context(scope: Scope, decision: RoutingDecision) -> Scope:
    """Build the downstream scope for a CONTINUE or REWRITE decision."""
    context: RoutingContext | None = decision.context

    headers = [
        (key, value)
        for key, value in scope.get("headers", [])
        if key.lower() not in _CONTEXT_HEADER_KEYS
    ]
    if context is not None:
        headers.extend(
            (name.encode("latin-1"), value.encode("utf-8"))
            for name, value in context.as_headers().items()
        )

    state = dict(scope.get("state") or {})
    state[ROUTING_CONTEXT_STATE_KEY] = context

    new_scope = dict(scope)
    new_scope["headers"] = headers
    new_scope["state"] = state

    if decision.action is RoutingAction.REWRITE and decision.path is not None:
        new_scope["path"] = decision.path
        new_scope["raw_path"] = quote(decision.path).encode("ascii")

    return new_scope


class TenantRoutingMiddleware:
    """Resolve tenant and caller for every HTTP request.

    Args:
        app: The wrapped ASGI application.
        router: The request router, built once at startup.
    """

    def __init__(self, app: ASGIApp, router: RequestRouter) -> None:
        self.app = app
        self._router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(ULID())
        routing_request = RoutingRequest(
            host=request.headers.get("host", ""),
            path=scope["path"],
            authorization=request.headers.get("authorization"),
            session_token=request.cookies.get(self._router.config.session_cookie_name),
            request_id=request_id,
        )

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            decision = await self._router.route(routing_request)

            if decision.action is RoutingAction.REDIRECT:
                response = RedirectResponse(
                    url=decision.location or "/",
                    status_code=307,
                    headers={REQUEST_ID_HEADER: request_id},
                )
                await response(scope, receive, send)
                return

            async def send_with_request_id(message: Message) -> None:
                if message["type"] == "http.response.start":
                    headers = MutableHeaders(scope=message)
                    if REQUEST_ID_HEADER not in headers:
                        headers.append(REQUEST_ID_HEADER, request_id)
                await send(message)

            await self.app(_with_context(scope, decision), receive, send_with_request_id)

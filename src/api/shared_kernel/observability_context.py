"""Observation context for domain-oriented observability.

Observation contexts collect request-scoped metadata that probes attach to
every event they emit, so that events from the router, the token verifier
and the stores can be correlated for a single request.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Unique identifier for the current request.
        host: Host header of the request, port included.
        path: Original (pre-rewrite) request path.
        user_id: Identifier of the authenticated caller (if known).
        tenant_id: Resolved tenant identifier (if known).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", host="acme.booqing.my.id")
        probe = DefaultRequestRouterProbe().with_context(context)
    """

    request_id: str | None = None
    host: str | None = None
    path: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.host is not None:
            result["host"] = self.host
        if self.path is not None:
            result["path"] = self.path
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            host=self.host,
            path=self.path,
            user_id=self.user_id,
            tenant_id=self.tenant_id,
            extra={**self.extra, **kwargs},
        )

"""Domain probe for request routing.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of tenant resolution and admin authentication.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RequestRouterProbe(Protocol):
    """Domain probe for request routing operations."""

    def request_routed(
        self,
        mode: str,
        action: str,
        target: str | None,
        tenant_id: str | None,
    ) -> None:
        """Record the final routing decision for a request."""
        ...

    def local_dev_bypass(self, path: str) -> None:
        """Record that an admin path was let through without authentication."""
        ...

    def admin_token_missing(self, path: str) -> None:
        """Record that an admin path was requested without a bearer token."""
        ...

    def admin_token_rejected(self, reason: str) -> None:
        """Record that the presented token failed verification."""
        ...

    def admin_user_not_found(self, user_id: str) -> None:
        """Record that a verified subject has no user record."""
        ...

    def admin_user_inactive(self, user_id: str) -> None:
        """Record that a verified subject belongs to an inactive user."""
        ...

    def admin_authenticated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record a successful admin authentication."""
        ...

    def tenant_resolved(self, subdomain: str, tenant_id: str) -> None:
        """Record that a subdomain resolved to a tenant."""
        ...

    def tenant_not_found(self, label: str) -> None:
        """Record that a host label does not name any tenant."""
        ...

    def host_unresolvable(self, hostname: str) -> None:
        """Record that a host cannot name a tenant at all."""
        ...

    def admin_path_malformed(self, path: str) -> None:
        """Record that an admin path with dot segments was refused."""
        ...

    def apex_path_redirected(self, path: str) -> None:
        """Record that a non-admin apex path was sent to the admin area."""
        ...

    def store_unavailable(self, store: str, error: Exception) -> None:
        """Record that a backing store lookup failed."""
        ...

    def with_context(self, context: ObservationContext) -> RequestRouterProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRequestRouterProbe:
    """Default implementation of RequestRouterProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultRequestRouterProbe:
        """Create a new probe with observation context bound."""
        return DefaultRequestRouterProbe(logger=self._logger, context=context)

    def request_routed(
        self,
        mode: str,
        action: str,
        target: str | None,
        tenant_id: str | None,
    ) -> None:
        """Record the final routing decision for a request."""
        self._logger.debug(
            "request_routed",
            mode=mode,
            action=action,
            target=target,
            resolved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def local_dev_bypass(self, path: str) -> None:
        """Record that an admin path was let through without authentication."""
        self._logger.debug(
            "routing_local_dev_auth_bypass",
            admin_path=path,
            **self._get_context_kwargs(),
        )

    def admin_token_missing(self, path: str) -> None:
        """Record that an admin path was requested without a bearer token."""
        self._logger.info(
            "routing_admin_token_missing",
            admin_path=path,
            **self._get_context_kwargs(),
        )

    def admin_token_rejected(self, reason: str) -> None:
        """Record that the presented token failed verification."""
        self._logger.warning(
            "routing_admin_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def admin_user_not_found(self, user_id: str) -> None:
        """Record that a verified subject has no user record."""
        self._logger.warning(
            "routing_admin_user_not_found",
            subject=user_id,
            **self._get_context_kwargs(),
        )

    def admin_user_inactive(self, user_id: str) -> None:
        """Record that a verified subject belongs to an inactive user."""
        self._logger.warning(
            "routing_admin_user_inactive",
            subject=user_id,
            **self._get_context_kwargs(),
        )

    def admin_authenticated(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record a successful admin authentication."""
        self._logger.info(
            "routing_admin_authenticated",
            subject=user_id,
            resolved_tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def tenant_resolved(self, subdomain: str, tenant_id: str) -> None:
        """Record that a subdomain resolved to a tenant."""
        self._logger.debug(
            "routing_tenant_resolved",
            subdomain=subdomain,
            resolved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, label: str) -> None:
        """Record that a host label does not name any tenant."""
        self._logger.info(
            "routing_tenant_not_found",
            label=label,
            **self._get_context_kwargs(),
        )

    def host_unresolvable(self, hostname: str) -> None:
        """Record that a host cannot name a tenant at all."""
        self._logger.info(
            "routing_host_unresolvable",
            hostname=hostname,
            **self._get_context_kwargs(),
        )

    def admin_path_malformed(self, path: str) -> None:
        """Record that an admin path with dot segments was refused."""
        self._logger.warning(
            "routing_admin_path_malformed",
            admin_path=path,
            **self._get_context_kwargs(),
        )

    def apex_path_redirected(self, path: str) -> None:
        """Record that a non-admin apex path was sent to the admin area."""
        self._logger.debug(
            "routing_apex_path_redirected",
            apex_path=path,
            **self._get_context_kwargs(),
        )

    def store_unavailable(self, store: str, error: Exception) -> None:
        """Record that a backing store lookup failed."""
        self._logger.error(
            "routing_store_unavailable",
            store=store,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

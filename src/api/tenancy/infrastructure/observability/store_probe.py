"""Domain probe for tenant directory and user store lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StoreProbe(Protocol):
    """Domain probe for read-only store lookups."""

    def tenant_retrieved(self, subdomain: str, tenant_id: str) -> None:
        """Record that a tenant was found by subdomain."""
        ...

    def tenant_not_found(self, subdomain: str) -> None:
        """Record that no tenant owns a subdomain."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user record was found."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that no user record exists for a subject."""
        ...

    def invalid_record(self, table: str, record_id: str, reason: str) -> None:
        """Record that a stored row could not be mapped."""
        ...

    def lookup_failed(self, table: str, error: Exception) -> None:
        """Record that a lookup query failed."""
        ...

    def with_context(self, context: ObservationContext) -> StoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStoreProbe:
    """Default implementation of StoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultStoreProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, subdomain: str, tenant_id: str) -> None:
        """Record that a tenant was found by subdomain."""
        self._logger.debug(
            "tenant_retrieved",
            subdomain=subdomain,
            resolved_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, subdomain: str) -> None:
        """Record that no tenant owns a subdomain."""
        self._logger.debug(
            "tenant_not_found",
            subdomain=subdomain,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user record was found."""
        self._logger.debug(
            "user_retrieved",
            subject=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        """Record that no user record exists for a subject."""
        self._logger.debug(
            "user_not_found",
            subject=user_id,
            **self._get_context_kwargs(),
        )

    def invalid_record(self, table: str, record_id: str, reason: str) -> None:
        """Record that a stored row could not be mapped."""
        self._logger.error(
            "store_invalid_record",
            table=table,
            record_id=record_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def lookup_failed(self, table: str, error: Exception) -> None:
        """Record that a lookup query failed."""
        self._logger.error(
            "store_lookup_failed",
            table=table,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

"""In-memory tenant directory and user store.

Used for the ``memory`` store backend and as fakes in tests. Contents are
set up front; lookups never mutate them.
"""

from __future__ import annotations

from collections.abc import Iterable

from tenancy.domain.entities import Tenant, UserRecord
from tenancy.domain.value_objects import Subdomain
from tenancy.ports.repositories import ITenantDirectory, IUserStore


class InMemoryTenantDirectory(ITenantDirectory):
    """Tenant directory backed by a dict keyed by subdomain."""

    def __init__(self, tenants: Iterable[Tenant] = ()) -> None:
        self._by_subdomain: dict[str, Tenant] = {}
        for tenant in tenants:
            self.add(tenant)

    def add(self, tenant: Tenant) -> None:
        """Register a tenant.

        Raises:
            ValueError: If another tenant already owns the subdomain
        """
        key = tenant.subdomain.value
        existing = self._by_subdomain.get(key)
        if existing is not None and existing.id != tenant.id:
            raise ValueError(f"Subdomain already taken: {key}")
        self._by_subdomain[key] = tenant

    async def lookup_by_subdomain(self, subdomain: Subdomain) -> Tenant | None:
        return self._by_subdomain.get(subdomain.value)


class InMemoryUserStore(IUserStore):
    """User store backed by a dict keyed by user id."""

    def __init__(self, users: Iterable[UserRecord] = ()) -> None:
        self._by_id = {user.id: user for user in users}

    def add(self, user: UserRecord) -> None:
        """Register or replace a user record."""
        self._by_id[user.id] = user

    async def lookup_by_id(self, user_id: str) -> UserRecord | None:
        return self._by_id.get(user_id)

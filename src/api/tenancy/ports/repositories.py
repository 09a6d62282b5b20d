"""Read-only store protocols (ports) for the tenancy bounded context.

The tenant directory and user store are owned by other parts of the
platform; the router only ever reads them, possibly concurrently.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.entities import Tenant, UserRecord
from tenancy.domain.value_objects import Subdomain


@runtime_checkable
class ITenantDirectory(Protocol):
    """Lookup of tenants by subdomain."""

    async def lookup_by_subdomain(self, subdomain: Subdomain) -> Tenant | None:
        """Find the tenant owning ``subdomain``.

        Args:
            subdomain: Case-normalized subdomain label

        Returns:
            The tenant, or None if no tenant owns the subdomain

        Raises:
            StoreUnavailableError: If the directory cannot be queried
        """
        ...


@runtime_checkable
class IUserStore(Protocol):
    """Lookup of user authorization records by subject id."""

    async def lookup_by_id(self, user_id: str) -> UserRecord | None:
        """Find the user record for an identity provider subject.

        Args:
            user_id: Verified subject id from the ID token

        Returns:
            The user record, or None if no such user exists

        Raises:
            StoreUnavailableError: If the store cannot be queried
            InvalidRecordError: If the stored row is not a valid user
        """
        ...

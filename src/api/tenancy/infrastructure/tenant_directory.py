"""PostgreSQL implementation of ITenantDirectory."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tenancy.domain.entities import Tenant
from tenancy.domain.value_objects import Subdomain, TenantId
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.observability import DefaultStoreProbe, StoreProbe
from tenancy.ports.exceptions import InvalidRecordError, StoreUnavailableError
from tenancy.ports.repositories import ITenantDirectory


class TenantDirectory(ITenantDirectory):
    """PostgreSQL-backed, read-only tenant directory.

    Opens a short-lived session per lookup so that the directory can be
    shared by concurrent requests.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: StoreProbe | None = None,
    ) -> None:
        """Initialize the directory.

        Args:
            session_factory: Sessionmaker bound to the read engine
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._probe = probe or DefaultStoreProbe()

    async def lookup_by_subdomain(self, subdomain: Subdomain) -> Tenant | None:
        """Find the tenant owning ``subdomain``.

        Raises:
            StoreUnavailableError: If the query fails
            InvalidRecordError: If the stored row is malformed
        """
        stmt = select(TenantModel).where(TenantModel.subdomain == subdomain.value)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            self._probe.lookup_failed(table="tenants", error=e)
            raise StoreUnavailableError(f"Tenant lookup failed: {e}") from e

        if model is None:
            self._probe.tenant_not_found(subdomain.value)
            return None

        try:
            tenant = Tenant(
                id=TenantId.from_string(model.id),
                subdomain=Subdomain.normalize(model.subdomain),
                name=model.name,
                created_at=model.created_at,
                updated_at=model.updated_at,
            )
        except ValueError as e:
            self._probe.invalid_record(table="tenants", record_id=model.id, reason=str(e))
            raise InvalidRecordError(f"Invalid tenant row {model.id}: {e}") from e

        self._probe.tenant_retrieved(subdomain.value, tenant.id.value)
        return tenant

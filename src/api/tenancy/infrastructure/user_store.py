"""PostgreSQL implementation of IUserStore."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tenancy.domain.entities import UserRecord
from tenancy.domain.value_objects import TenantId, UserRole
from tenancy.infrastructure.models import UserModel
from tenancy.infrastructure.observability import DefaultStoreProbe, StoreProbe
from tenancy.ports.exceptions import InvalidRecordError, StoreUnavailableError
from tenancy.ports.repositories import IUserStore


class UserStore(IUserStore):
    """PostgreSQL-backed, read-only user store."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: StoreProbe | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            session_factory: Sessionmaker bound to the read engine
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._probe = probe or DefaultStoreProbe()

    async def lookup_by_id(self, user_id: str) -> UserRecord | None:
        """Find the user record for an identity provider subject.

        Raises:
            StoreUnavailableError: If the query fails
            InvalidRecordError: If the stored role is not a known role
        """
        stmt = select(UserModel).where(UserModel.id == user_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            self._probe.lookup_failed(table="user", error=e)
            raise StoreUnavailableError(f"User lookup failed: {e}") from e

        if model is None:
            self._probe.user_not_found(user_id)
            return None

        try:
            role = UserRole(model.role)
        except ValueError as e:
            self._probe.invalid_record(
                table="user", record_id=model.id, reason=f"unknown role {model.role!r}"
            )
            raise InvalidRecordError(f"User {model.id} has unknown role") from e

        self._probe.user_retrieved(model.id)
        return UserRecord(
            id=model.id,
            role=role,
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
            is_active=bool(model.is_active),
        )

"""Unit tests for the PostgreSQL tenant directory and user store.

Sessions are mocked; the queries themselves are exercised against a real
database elsewhere.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tenancy.domain.value_objects import Subdomain, TenantId, UserRole
from tenancy.infrastructure.models import TenantModel, UserModel
from tenancy.infrastructure.observability import StoreProbe
from tenancy.infrastructure.tenant_directory import TenantDirectory
from tenancy.infrastructure.user_store import UserStore
from tenancy.ports.exceptions import InvalidRecordError, StoreUnavailableError
from tenancy.ports.repositories import ITenantDirectory, IUserStore

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def mock_session():
    """Create mock async session."""
    return AsyncMock()


@pytest.fixture
def session_factory(mock_session):
    """Create a sessionmaker stand-in yielding the mock session."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = mock_session
    return factory


@pytest.fixture
def mock_probe():
    return MagicMock(spec=StoreProbe)


def _returns(mock_session, model) -> None:
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    mock_session.execute.return_value = result


class TestTenantDirectory:
    """Tests for TenantDirectory."""

    @pytest.fixture
    def directory(self, session_factory, mock_probe):
        return TenantDirectory(session_factory, probe=mock_probe)

    def test_implements_protocol(self, directory):
        assert isinstance(directory, ITenantDirectory)

    @pytest.mark.asyncio
    async def test_returns_tenant(self, directory, mock_session, mock_probe):
        _returns(
            mock_session,
            TenantModel(
                id="01J0ACME",
                name="Acme Spa",
                subdomain="acmespa",
                created_at=NOW,
                updated_at=NOW,
            ),
        )

        tenant = await directory.lookup_by_subdomain(Subdomain("acmespa"))

        assert tenant is not None
        assert tenant.id == TenantId(value="01J0ACME")
        assert tenant.subdomain == Subdomain("acmespa")
        assert tenant.name == "Acme Spa"
        mock_session.execute.assert_awaited_once()
        mock_probe.tenant_retrieved.assert_called_once_with("acmespa", "01J0ACME")

    @pytest.mark.asyncio
    async def test_missing_tenant_returns_none(self, directory, mock_session, mock_probe):
        _returns(mock_session, None)

        assert await directory.lookup_by_subdomain(Subdomain("nobody")) is None
        mock_probe.tenant_not_found.assert_called_once_with("nobody")

    @pytest.mark.asyncio
    async def test_query_filters_on_subdomain(self, directory, mock_session):
        _returns(mock_session, None)

        await directory.lookup_by_subdomain(Subdomain("acmespa"))

        stmt = mock_session.execute.call_args.args[0]
        compiled = stmt.compile(compile_kwargs={"literal_binds": True})
        assert "tenants.subdomain = 'acmespa'" in str(compiled)

    @pytest.mark.asyncio
    async def test_database_error_raises_unavailable(
        self, directory, mock_session, mock_probe
    ):
        mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(StoreUnavailableError):
            await directory.lookup_by_subdomain(Subdomain("acmespa"))

        mock_probe.lookup_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_connection_error_raises_unavailable(self, directory, session_factory):
        session_factory.return_value.__aenter__.side_effect = ConnectionRefusedError()

        with pytest.raises(StoreUnavailableError):
            await directory.lookup_by_subdomain(Subdomain("acmespa"))

    @pytest.mark.asyncio
    async def test_malformed_row_raises_invalid_record(
        self, directory, mock_session, mock_probe
    ):
        _returns(
            mock_session,
            TenantModel(
                id="01J0ACME",
                name="Acme Spa",
                subdomain="acme-spa",
                created_at=NOW,
                updated_at=NOW,
            ),
        )

        with pytest.raises(InvalidRecordError):
            await directory.lookup_by_subdomain(Subdomain("acmespa"))

        mock_probe.invalid_record.assert_called_once()


class TestUserStore:
    """Tests for UserStore."""

    @pytest.fixture
    def store(self, session_factory, mock_probe):
        return UserStore(session_factory, probe=mock_probe)

    def test_implements_protocol(self, store):
        assert isinstance(store, IUserStore)

    @pytest.mark.asyncio
    async def test_returns_user_record(self, store, mock_session, mock_probe):
        _returns(
            mock_session,
            UserModel(
                id="uid-1",
                email="owner@acmespa.test",
                role="owner",
                tenant_id="01J0ACME",
                is_active=True,
            ),
        )

        user = await store.lookup_by_id("uid-1")

        assert user is not None
        assert user.role is UserRole.OWNER
        assert user.tenant_id == TenantId(value="01J0ACME")
        assert user.is_active
        mock_probe.user_retrieved.assert_called_once_with("uid-1")

    @pytest.mark.asyncio
    async def test_user_without_tenant(self, store, mock_session):
        _returns(
            mock_session,
            UserModel(
                id="root",
                email="root@platform.test",
                role="superadmin",
                tenant_id=None,
                is_active=True,
            ),
        )

        user = await store.lookup_by_id("root")

        assert user is not None
        assert user.tenant_id is None
        assert user.role.is_elevated

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self, store, mock_session, mock_probe):
        _returns(mock_session, None)

        assert await store.lookup_by_id("stranger") is None
        mock_probe.user_not_found.assert_called_once_with("stranger")

    @pytest.mark.asyncio
    async def test_unknown_role_raises_invalid_record(
        self, store, mock_session, mock_probe
    ):
        _returns(
            mock_session,
            UserModel(
                id="uid-2",
                email="x@acmespa.test",
                role="root",
                tenant_id=None,
                is_active=True,
            ),
        )

        with pytest.raises(InvalidRecordError):
            await store.lookup_by_id("uid-2")

        mock_probe.invalid_record.assert_called_once()

    @pytest.mark.asyncio
    async def test_database_error_raises_unavailable(self, store, mock_session, mock_probe):
        mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(StoreUnavailableError):
            await store.lookup_by_id("uid-1")

        mock_probe.lookup_failed.assert_called_once()

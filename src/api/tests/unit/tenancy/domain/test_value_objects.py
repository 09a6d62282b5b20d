"""Unit tests for tenancy domain value objects."""

from __future__ import annotations

import pytest

from tenancy.domain.value_objects import Subdomain, TenantId, UserRole


class TestTenantId:
    """Tests for TenantId value object."""

    def test_generate_creates_distinct_ids(self) -> None:
        assert TenantId.generate() != TenantId.generate()

    def test_generate_creates_ulid(self) -> None:
        assert len(TenantId.generate().value) == 26

    def test_from_string_strips(self) -> None:
        assert TenantId.from_string("  global ") == TenantId(value="global")

    def test_from_string_rejects_empty(self) -> None:
        with pytest.raises(ValueError):
            TenantId.from_string("   ")

    def test_str_returns_value(self) -> None:
        assert str(TenantId(value="global")) == "global"


class TestSubdomain:
    """Tests for Subdomain value object."""

    @pytest.mark.parametrize("value", ["acmespa", "salon42", "a", "123"])
    def test_accepts_lowercase_alphanumerics(self, value: str) -> None:
        assert Subdomain(value).value == value

    @pytest.mark.parametrize("value", ["", "Acme", "acme-spa", "acme.spa", "acme spa", "café"])
    def test_rejects_other_characters(self, value: str) -> None:
        with pytest.raises(ValueError):
            Subdomain(value)

    def test_normalize_lowercases(self) -> None:
        assert Subdomain.normalize(" AcmeSpa ") == Subdomain("acmespa")

    def test_normalize_still_validates(self) -> None:
        with pytest.raises(ValueError):
            Subdomain.normalize("acme-spa")

    def test_is_immutable(self) -> None:
        subdomain = Subdomain("acmespa")
        with pytest.raises(AttributeError):
            subdomain.value = "other"  # type: ignore[misc]


class TestUserRole:
    """Tests for UserRole enum."""

    def test_parses_stored_values(self) -> None:
        assert UserRole("owner") is UserRole.OWNER
        assert UserRole("finance") is UserRole.FINANCE

    def test_unknown_role_raises(self) -> None:
        with pytest.raises(ValueError):
            UserRole("root")

    def test_elevated_roles(self) -> None:
        elevated = {role for role in UserRole if role.is_elevated}
        assert elevated == {UserRole.SUPERADMIN, UserRole.ADMIN}

"""Unit test fixtures: signing keys, token factory and fake stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt
from jose.constants import ALGORITHMS

from tenancy.domain.entities import Tenant, UserRecord
from tenancy.domain.routing import RoutingConfig
from tenancy.domain.value_objects import Subdomain, TenantId, UserRole
from tenancy.infrastructure.in_memory import InMemoryTenantDirectory, InMemoryUserStore

TEST_PROJECT_ID = "booking-test"
TEST_ISSUER = f"https://securetoken.google.com/{TEST_PROJECT_ID}"
TEST_AUDIENCE = TEST_PROJECT_ID
TEST_KID = "test-key-id"
TEST_JWKS_URL = "https://keys.example.com/jwks"
TEST_APEX = "platform.example"


@dataclass(frozen=True)
class SigningKeys:
    """RSA key pair used to sign test tokens."""

    private_pem: str
    public_jwk: dict[str, Any]

    def jwks(self, kid: str = TEST_KID) -> dict[str, Any]:
        """JWKS document publishing the public key under ``kid``."""
        return {"keys": [{**self.public_jwk, "kid": kid, "use": "sig"}]}


def _generate_keys() -> SigningKeys:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = jwk.construct(public_pem, ALGORITHMS.RS256).to_dict()
    public_jwk["alg"] = "RS256"
    return SigningKeys(private_pem=private_pem, public_jwk=public_jwk)


@pytest.fixture(scope="session")
def signing_keys() -> SigningKeys:
    """Provide a key pair for the whole test session."""
    return _generate_keys()


@pytest.fixture(scope="session")
def other_signing_keys() -> SigningKeys:
    """Provide a second, unrelated key pair."""
    return _generate_keys()


@pytest.fixture
def make_token(signing_keys: SigningKeys) -> Callable[..., str]:
    """Return a factory for signed ID tokens."""

    def _make_token(
        sub: str | None = "user-123",
        issuer: str = TEST_ISSUER,
        audience: str = TEST_AUDIENCE,
        exp_delta: timedelta = timedelta(hours=1),
        iat_delta: timedelta = timedelta(seconds=0),
        kid: str | None = TEST_KID,
        keys: SigningKeys | None = None,
        extra_claims: dict[str, Any] | None = None,
    ) -> str:
        now = datetime.now(tz=timezone.utc)
        claims: dict[str, Any] = {
            "iss": issuer,
            "aud": audience,
            "exp": int((now + exp_delta).timestamp()),
            "iat": int((now + iat_delta).timestamp()),
            "auth_time": int((now + iat_delta).timestamp()),
        }
        if sub is not None:
            claims["sub"] = sub
        if extra_claims:
            claims.update(extra_claims)

        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(
            claims,
            (keys or signing_keys).private_pem,
            algorithm="RS256",
            headers=headers,
        )

    return _make_token


@pytest.fixture
def routing_config() -> RoutingConfig:
    """Provide routing configuration for the test apex domain."""
    return RoutingConfig(
        apex_domain=TEST_APEX,
        apex_scheme="https",
        reserved_labels=frozenset({"www"}),
        local_dev_enabled=True,
        excluded_path_prefixes=("/api", "/static", "/health", "/favicon.ico"),
    )


@pytest.fixture
def acme_tenant() -> Tenant:
    """Provide a registered tenant."""
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return Tenant(
        id=TenantId(value="01J0ACMESPA000000000000000"),
        subdomain=Subdomain("acmespa"),
        name="Acme Spa",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def tenant_directory(acme_tenant: Tenant) -> InMemoryTenantDirectory:
    """Provide a directory containing the acme tenant."""
    return InMemoryTenantDirectory([acme_tenant])


@pytest.fixture
def owner_user(acme_tenant: Tenant) -> UserRecord:
    """Provide an owner of the acme tenant."""
    return UserRecord(id="user-123", role=UserRole.OWNER, tenant_id=acme_tenant.id)


@pytest.fixture
def user_store(owner_user: UserRecord) -> InMemoryUserStore:
    """Provide a user store containing the acme owner."""
    return InMemoryUserStore([owner_user])

"""JWT validation module for identity provider ID tokens.

Verifies RS256-signed ID tokens against the provider's published JWKS.
The signing key is selected by the token's ``kid`` header, then signature,
audience, issuer, expiry and maximum age are all validated. Any failure
raises InvalidTokenError; callers are expected to fail closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Protocol

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from shared_kernel.auth.errors import InvalidTokenError

if TYPE_CHECKING:
    from shared_kernel.auth.jwks import JWKSKeyCache
    from shared_kernel.auth.observability import JWTValidatorProbe

ALLOWED_ALGORITHMS = ["RS256"]


@dataclass(frozen=True)
class TokenClaims:
    """Validated ID token claims."""

    sub: str
    issued_at: datetime
    auth_time: datetime | None = None
    email: str | None = None


class TokenVerifier(Protocol):
    """Verifies a bearer token and returns its claims.

    Implementations raise InvalidTokenError on any failure.
    """

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate ``token`` and return its claims."""
        ...


def _claim_time(claims: dict[str, Any], name: str) -> datetime | None:
    value = claims.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidTokenError(f"Claim '{name}' must be a numeric timestamp")
    return datetime.fromtimestamp(value, tz=timezone.utc)


class JWTValidator:
    """Validates ID tokens using the identity provider's JWKS.

    Signing keys come from a JWKSKeyCache shared across requests.
    """

    def __init__(
        self,
        audience: str,
        issuer: str,
        key_cache: JWKSKeyCache,
        probe: JWTValidatorProbe,
        max_token_age: timedelta = timedelta(days=1),
        leeway: timedelta = timedelta(seconds=30),
    ):
        """Initialize the JWT validator.

        Args:
            audience: Expected audience claim (the provider project id).
                An empty audience rejects every token.
            issuer: Expected issuer claim.
            key_cache: Source of signing keys by key id.
            probe: Observability probe for logging events.
            max_token_age: Reject tokens whose ``iat`` is older than this.
            leeway: Clock skew tolerated on time-based claims.
        """
        self._audience = audience
        self._issuer = issuer
        self._key_cache = key_cache
        self._probe = probe
        self._max_token_age = max_token_age
        self._leeway = leeway

    async def validate_token(self, token: str) -> TokenClaims:
        """Validate an ID token and return its claims.

        Args:
            token: The raw JWT string.

        Returns:
            TokenClaims containing the validated claims.

        Raises:
            InvalidTokenError: If the token is malformed, its key cannot be
                resolved, or any validation check fails.
        """
        if not self._audience:
            self._probe.token_validation_failed(reason="Provider not configured")
            raise InvalidTokenError("Identity provider is not configured")

        try:
            unverified_header = jwt.get_unverified_header(token)
        except JWTError as e:
            self._probe.token_validation_failed(reason="Malformed token")
            raise InvalidTokenError(f"Invalid token format: {e}") from e

        kid = unverified_header.get("kid") if unverified_header else None
        if not kid:
            self._probe.token_validation_failed(reason="Missing key id")
            raise InvalidTokenError("Invalid token: missing 'kid' header")

        try:
            key = await self._key_cache.get_key(str(kid))
        except InvalidTokenError as e:
            self._probe.token_validation_failed(reason=str(e))
            raise

        try:
            claims = jwt.decode(
                token=token,
                key=key,
                algorithms=ALLOWED_ALGORITHMS,
                audience=self._audience,
                issuer=self._issuer,
                options={
                    "verify_signature": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "require_exp": True,
                    "require_iat": True,
                    "leeway": int(self._leeway.total_seconds()),
                },
            )
        except ExpiredSignatureError as e:
            self._probe.token_validation_failed(reason="Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            error_msg = str(e).lower()
            if "audience" in error_msg:
                self._probe.token_validation_failed(reason="Invalid audience")
                raise InvalidTokenError("Invalid audience claim") from e
            if "issuer" in error_msg:
                self._probe.token_validation_failed(reason="Invalid issuer")
                raise InvalidTokenError("Invalid issuer claim") from e
            self._probe.token_validation_failed(reason=f"Claims error: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            error_msg = str(e).lower()
            if "signature" in error_msg:
                self._probe.token_validation_failed(reason="Invalid signature")
                raise InvalidTokenError("Invalid token signature") from e
            self._probe.token_validation_failed(reason=f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

        return self._check_claims(claims)

    def _check_claims(self, claims: dict[str, Any]) -> TokenClaims:
        """Apply the checks python-jose does not perform itself."""
        now = datetime.now(tz=timezone.utc)

        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub.strip():
            self._probe.token_validation_failed(reason="Missing sub claim")
            raise InvalidTokenError("Missing required claim: sub")

        try:
            issued_at = _claim_time(claims, "iat")
            auth_time = _claim_time(claims, "auth_time")
        except InvalidTokenError as e:
            self._probe.token_validation_failed(reason=str(e))
            raise

        if issued_at is None:
            self._probe.token_validation_failed(reason="Missing iat claim")
            raise InvalidTokenError("Missing required claim: iat")

        if issued_at > now + self._leeway:
            self._probe.token_validation_failed(reason="Issued in the future")
            raise InvalidTokenError("Token issued in the future")

        if now - issued_at > self._max_token_age + self._leeway:
            self._probe.token_validation_failed(reason="Token too old")
            raise InvalidTokenError("Token exceeds maximum age")

        if auth_time is not None and auth_time > now + self._leeway:
            self._probe.token_validation_failed(reason="Auth time in the future")
            raise InvalidTokenError("Authentication time is in the future")

        email = claims.get("email")
        self._probe.token_validated(user_id=sub)

        return TokenClaims(
            sub=sub,
            issued_at=issued_at,
            auth_time=auth_time,
            email=str(email) if email is not None else None,
        )

"""Signing key retrieval for ID token verification.

Fetches the identity provider's published JSON Web Key Set and caches each
key by its key id. A cached key is never served past its expiry, which is
the provider's Cache-Control max-age capped by the configured TTL.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import httpx

from shared_kernel.auth.errors import InvalidTokenError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe

_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True)
class CachedKey:
    """A JWK together with the instant it stops being trusted."""

    jwk: dict[str, Any]
    expires_at: datetime


def parse_max_age(cache_control: str | None) -> timedelta | None:
    """Extract max-age from a Cache-Control header value.

    Args:
        cache_control: Raw header value, or None.

    Returns:
        The max-age as a timedelta, or None when absent or unparsable.
    """
    if not cache_control:
        return None
    match = _MAX_AGE_PATTERN.search(cache_control.lower())
    if match is None:
        return None
    return timedelta(seconds=int(match.group(1)))


class JWKSKeyCache:
    """Fetches and caches signing keys keyed by key id.

    A fetch is triggered when the requested key id is missing or expired.
    Refetches caused by unknown key ids are spaced by ``min_refresh_interval``
    so that tokens with bogus key ids cannot force a network call per request.
    """

    def __init__(
        self,
        jwks_url: str,
        probe: JWTValidatorProbe,
        timeout: float = 5.0,
        cache_ttl: timedelta = timedelta(hours=1),
        min_refresh_interval: timedelta = timedelta(seconds=30),
    ):
        self._jwks_url = jwks_url
        self._probe = probe
        self._timeout = timeout
        self._cache_ttl = cache_ttl
        self._min_refresh_interval = min_refresh_interval

        self._keys: dict[str, CachedKey] = {}
        self._last_fetch_at: datetime | None = None
        self._lock = asyncio.Lock()

    async def get_key(self, kid: str) -> dict[str, Any]:
        """Return the JWK for ``kid``, fetching the key set if needed.

        Args:
            kid: Key id taken from the token header.

        Returns:
            The JWK dictionary.

        Raises:
            InvalidTokenError: If the key set cannot be fetched or does not
                contain ``kid``.
        """
        cached = self._lookup(kid)
        if cached is not None:
            self._probe.jwks_cache_hit()
            return cached

        async with self._lock:
            # Double-check after acquiring lock
            cached = self._lookup(kid)
            if cached is not None:
                self._probe.jwks_cache_hit()
                return cached

            if self._recently_fetched() and self._has_live_keys():
                self._probe.signing_key_not_found(kid=kid)
                raise InvalidTokenError(f"Unknown signing key: {kid}")

            fresh = await self._fetch()

            entry = fresh.get(kid)
            if entry is None:
                self._probe.signing_key_not_found(kid=kid)
                raise InvalidTokenError(f"Unknown signing key: {kid}")
            return entry.jwk

    def _lookup(self, kid: str) -> dict[str, Any] | None:
        entry = self._keys.get(kid)
        if entry is None:
            return None
        if entry.expires_at <= datetime.now(tz=timezone.utc):
            del self._keys[kid]
            return None
        return entry.jwk

    def _has_live_keys(self) -> bool:
        now = datetime.now(tz=timezone.utc)
        return any(entry.expires_at > now for entry in self._keys.values())

    def _recently_fetched(self) -> bool:
        if self._last_fetch_at is None:
            return False
        now = datetime.now(tz=timezone.utc)
        return (now - self._last_fetch_at) < self._min_refresh_interval

    async def _fetch(self) -> dict[str, CachedKey]:
        """Fetch the key set and replace the cache.

        Returns:
            The freshly fetched keys by key id.

        Raises:
            InvalidTokenError: On network failure, timeout, bad status or an
                unusable payload.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._jwks_url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            self._probe.jwks_fetch_failed(error=f"{type(e).__name__}: {e}")
            raise InvalidTokenError(f"Failed to fetch signing keys: {e}") from e
        except ValueError as e:
            self._probe.jwks_fetch_failed(error=f"Invalid JSON: {e}")
            raise InvalidTokenError("Signing key set is not valid JSON") from e

        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list):
            self._probe.jwks_fetch_failed(error="Missing 'keys' in key set")
            raise InvalidTokenError("Signing key set has no 'keys' member")

        now = datetime.now(tz=timezone.utc)
        lifetime = self._cache_ttl
        max_age = parse_max_age(response.headers.get("cache-control"))
        if max_age is not None and max_age < lifetime:
            lifetime = max_age
        expires_at = now + lifetime

        self._keys = {
            str(key["kid"]): CachedKey(jwk=key, expires_at=expires_at)
            for key in keys
            if isinstance(key, dict) and key.get("kid")
        }
        self._last_fetch_at = now
        self._probe.jwks_fetched(key_count=len(self._keys))
        return self._keys

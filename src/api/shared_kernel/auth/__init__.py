"""Authentication shared kernel module."""

from shared_kernel.auth.errors import InvalidTokenError
from shared_kernel.auth.jwks import JWKSKeyCache
from shared_kernel.auth.jwt_validator import (
    JWTValidator,
    TokenClaims,
    TokenVerifier,
)
from shared_kernel.auth.observability import (
    DefaultJWTValidatorProbe,
    JWTValidatorProbe,
)

__all__ = [
    "InvalidTokenError",
    "JWKSKeyCache",
    "JWTValidator",
    "JWTValidatorProbe",
    "DefaultJWTValidatorProbe",
    "TokenClaims",
    "TokenVerifier",
]

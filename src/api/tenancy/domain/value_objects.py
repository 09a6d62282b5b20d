"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from ulid import ULID

_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]+$")


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant.

    Tenant ids are opaque strings. New tenants get a ULID; the platform
    administration tenant uses the fixed id ``global``.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from a stored string value.

        Raises:
            ValueError: If value is empty
        """
        value = value.strip()
        if not value:
            raise ValueError("TenantId must not be empty")
        return cls(value=value)


@dataclass(frozen=True)
class Subdomain:
    """A tenant's unique subdomain label.

    Always stored lower-case; only ASCII letters and digits are allowed.
    """

    value: str

    def __post_init__(self) -> None:
        if not _SUBDOMAIN_PATTERN.match(self.value):
            raise ValueError(
                f"Subdomain may only contain lowercase letters and digits: {self.value!r}"
            )

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def normalize(cls, raw: str) -> Subdomain:
        """Case-normalize and validate a raw label.

        Raises:
            ValueError: If the normalized label is not a valid subdomain
        """
        return cls(value=raw.strip().lower())


class UserRole(StrEnum):
    """Roles a platform user may hold.

    SUPERADMIN and ADMIN are elevated platform roles; the remaining roles
    are scoped to the user's own tenant.
    """

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    OWNER = "owner"
    STAFF = "staff"
    FINANCE = "finance"
    USER = "user"

    @property
    def is_elevated(self) -> bool:
        """Whether this role administers the whole platform."""
        return self in (UserRole.SUPERADMIN, UserRole.ADMIN)

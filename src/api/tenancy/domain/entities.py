"""Tenant directory and user store records as seen by the router.

These are read-only snapshots; the router never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tenancy.domain.value_objects import Subdomain, TenantId, UserRole


@dataclass(frozen=True)
class Tenant:
    """A service business registered on the platform."""

    id: TenantId
    subdomain: Subdomain
    name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserRecord:
    """A platform user's authorization data.

    Attributes:
        id: Subject id shared with the identity provider.
        role: The user's role.
        tenant_id: Tenant the user belongs to; None means the global tenant.
        is_active: Inactive users are refused even with a valid token.
    """

    id: str
    role: UserRole
    tenant_id: TenantId | None
    is_active: bool = True

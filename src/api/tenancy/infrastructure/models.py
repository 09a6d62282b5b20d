"""SQLAlchemy ORM models for the tenant directory and user store.

Tables are owned and written by the platform's management services; the
routing layer only reads them.
"""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for the tenants table.

    Note: subdomains are globally unique and stored lower-case.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(
        String(63), nullable=False, unique=True, index=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, subdomain={self.subdomain})>"


class UserModel(Base, TimestampMixin):
    """ORM model for the user table.

    Note: id is the identity provider's subject id.
    """

    __tablename__ = "user"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    tenant_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("tenants.id", ondelete="RESTRICT"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, role={self.role})>"

"""Database infrastructure - async engine and session primitives."""

from infrastructure.database.dependencies import (
    close_database_connections,
    get_read_engine,
    get_read_sessionmaker,
)
from infrastructure.database.models import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "close_database_connections",
    "get_read_engine",
    "get_read_sessionmaker",
]

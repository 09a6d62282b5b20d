"""Database session factory wiring.

The engine and sessionmaker are created once, on first use, and shared by
the SQLAlchemy-backed stores for the life of the process.
"""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_read_engine
from infrastructure.observability import DefaultDatabaseProbe
from infrastructure.settings import get_database_settings

_probe = DefaultDatabaseProbe()

_read_engine: AsyncEngine | None = None
_read_sessionmaker: async_sessionmaker[AsyncSession] | None = None

_engine_lock = threading.Lock()


def get_read_engine() -> AsyncEngine:
    """Get the read database engine (singleton).

    Uses double-check locking for thread-safe initialization and creates
    the sessionmaker alongside the engine.

    Returns:
        Configured async engine for read operations
    """
    global _read_engine, _read_sessionmaker
    if _read_engine is None:
        with _engine_lock:
            if _read_engine is None:
                settings = get_database_settings()
                _read_engine = create_read_engine(settings)
                _read_sessionmaker = async_sessionmaker(
                    _read_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.engine_created(
                    host=settings.host,
                    database=settings.database,
                    pool_size=settings.pool_max_connections,
                )
    return _read_engine


def get_read_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker bound to the read engine.

    Returns:
        Sessionmaker producing AsyncSession instances for lookups
    """
    get_read_engine()
    assert _read_sessionmaker is not None
    return _read_sessionmaker


async def close_database_connections() -> None:
    """Dispose the read engine.

    Called on application shutdown. Resets the sessionmaker so that a later
    call re-initializes cleanly.
    """
    global _read_engine, _read_sessionmaker

    if _read_engine is not None:
        await _read_engine.dispose()
        _probe.engine_disposed()
        _read_engine = None
        _read_sessionmaker = None

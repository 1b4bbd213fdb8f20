"""SQLAlchemy database configuration and connection management.

This module is responsible for:
- Engine creation from an explicit ``DatabaseConfig``
- Connection pooling
- Session factory creation

Transactions are owned by the unit of work.

There are no module-level engine or session singletons; the caller owns the
engine and disposes it.
"""

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from rating_system.config import DatabaseConfig, get_logger

# Create module logger
logger = get_logger(__name__)


def _is_memory_sqlite(database: str | None) -> bool:
    return not database or database == ":memory:" or database.startswith("file::memory:")


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine for the configured URL.

    SQLite gets foreign key enforcement on every connection; in-memory SQLite
    shares one connection so all sessions see the same database. Server
    databases use the configured pool settings.

    Args:
        config: Database section of the application settings

    Returns:
        SQLAlchemy async engine instance
    """
    url = make_url(config.url)
    engine_kwargs: dict[str, Any] = {"echo": config.echo}

    if url.get_backend_name() == "sqlite":
        if _is_memory_sqlite(url.database):
            engine_kwargs["poolclass"] = StaticPool
        elif url.database:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=config.pool_pre_ping,
        )

    engine = create_async_engine(url, **engine_kwargs)

    if url.get_backend_name() == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")  # Enforce foreign keys
            cursor.close()

    logger.info(f"Created database engine for {url.get_backend_name()}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given engine.

    Args:
        engine: Engine to bind sessions to

    Returns:
        Async session factory for creating properly configured sessions
    """
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Entities are mapped out before commit
        autoflush=True,
    )


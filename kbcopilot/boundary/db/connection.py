"""
Database connection management.

Provides the shared async SQLAlchemy engine and session factory. The engine
is created once per process and disposed on shutdown.

Dependencies: sqlalchemy, asyncpg, kbcopilot.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from kbcopilot.configs import get_settings

_engine: AsyncEngine | None = None


def get_async_engine() -> AsyncEngine:
    """
    Get the process-wide async SQLAlchemy engine.

    pool_pre_ping=True verifies connections before use to detect stale or
    broken connections early. command_timeout bounds every statement.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    global _engine
    if _engine is None:
        db_config = get_settings().database
        _engine = create_async_engine(
            db_config.async_database_url,
            echo=db_config.echo_sql,
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_pre_ping=True,
            connect_args={"command_timeout": db_config.command_timeout},
        )
    return _engine


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Sessions use autoflush=False and expire_on_commit=False for explicit
    transaction control; callers commit themselves.

    Args:
        engine: Engine to bind (defaults to the shared engine)

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def dispose_async_engine() -> None:
    """Close all pooled connections and forget the shared engine."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None

"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, a per-unit-of-work
session dependency and a transactional session scope.

Dependencies: sqlalchemy, knowledge_core.configs
System role: Database connection lifecycle management
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from knowledge_core.configs import get_settings


def get_async_engine(url: str | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect stale/broken
    connections early. SQLite URLs get the driver's default pool, which does
    not accept pool sizing arguments.

    Args:
        url: Explicit async URL; defaults to the configured database URL

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = get_settings().database
    database_url = url or db_config.async_database_url

    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=db_config.echo_sql)

    return create_async_engine(
        database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker with autoflush=False for explicit transaction
    control. expire_on_commit=False keeps returned records readable after
    the caller commits.

    Args:
        engine: Engine to bind; defaults to a new configured engine

    Returns:
        async_sessionmaker: Async session factory configured for manual transaction control

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


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an async database session and close it afterwards.

    The caller owns the transaction: commit explicitly, anything left
    uncommitted is rolled back when the session closes.

    Yields:
        AsyncSession: Async SQLAlchemy database session

    Usage:
        async for db in get_async_db():
            fragment = await fragment_crud.get_by_id(db, fragment_id)
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        yield session


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a unit of work in one transaction.

    Commits when the block exits normally and rolls back on any exception,
    which is re-raised.

    Args:
        factory: Session factory; defaults to the configured one

    Yields:
        AsyncSession: Session bound to the transaction

    Usage:
        async with session_scope() as db:
            outcome = await ClusteringService(db).assign_to_cluster(fid, kid)
    """
    SessionFactory = factory or get_async_session_factory()
    async with SessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, pgvector, knowledge_core.configs
System role: Database schema initialization

Usage:
    python -m knowledge_core.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from knowledge_core.boundary.db.base import Base
from knowledge_core.boundary.db.connection import get_async_engine
from knowledge_core.boundary.db.types import has_vector_operator

# Import all models to register them with Base.metadata
from knowledge_core.boundary.db.models import (  # noqa: F401
    CategoryModel,
    FragmentModel,
    KnowledgeUnitModel,
    SourceModel,
)

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables remain unchanged, so safe to run
    multiple times. On PostgreSQL the pgvector extension is created first.

    Args:
        engine: Target engine; defaults to the configured engine

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    target = engine or get_async_engine()
    async with target.begin() as conn:
        if has_vector_operator(conn.dialect):
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Tables created",
        extra={"tables": sorted(Base.metadata.tables.keys())},
    )


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.

    Args:
        engine: Target engine; defaults to the configured engine

    Raises:
        SQLAlchemyError: If database connection fails or drop fails
    """
    target = engine or get_async_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped")


if __name__ == "__main__":
    from knowledge_core.observability import configure_logging

    configure_logging()
    asyncio.run(create_all_tables())

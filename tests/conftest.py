"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, CRUD instances with 8-dimensional
embeddings, record factories and a mock session for failure paths.
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from typing import Any, Awaitable, Callable
from unittest.mock import AsyncMock
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

TEST_DIMENSIONS = 8


def vec(*values: float) -> list[float]:
    """Pad leading components with zeros to the test embedding length."""
    return list(values) + [0.0] * (TEST_DIMENSIONS - len(values))


@pytest.fixture
def embedding() -> Callable[..., list[float]]:
    """Provide the vector padding helper."""
    return vec


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with all tables.

    StaticPool keeps a single connection so every session sees the same database.

    Yields:
        AsyncEngine: Engine with schema created (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from knowledge_core.boundary.db.create_tables import create_all_tables, drop_all_tables

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all_tables(engine)

    yield engine

    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """Provide session factory bound to the test engine."""
    from knowledge_core.boundary.db.connection import get_async_session_factory

    return get_async_session_factory(test_engine)


@pytest.fixture
async def test_async_db(test_session_factory):
    """
    Create async session on the in-memory database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with test_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_session() -> AsyncSession:
    """Provide mock async database session."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def fragment_store():
    """Provide FragmentCRUD with test embedding length."""
    from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD

    return FragmentCRUD(embedding_dimensions=TEST_DIMENSIONS)


@pytest.fixture
def unit_store():
    """Provide KnowledgeUnitCRUD with test embedding length."""
    from knowledge_core.boundary.db.CRUD.knowledge_unit_crud import KnowledgeUnitCRUD

    return KnowledgeUnitCRUD(embedding_dimensions=TEST_DIMENSIONS)


@pytest.fixture
def source_store(fragment_store):
    """Provide SourceCRUD cascading through the test fragment store."""
    from knowledge_core.boundary.db.CRUD.source_crud import SourceCRUD

    return SourceCRUD(fragments=fragment_store)


@pytest.fixture
async def category(test_async_db: AsyncSession):
    """Create a category every record can reference."""
    from knowledge_core.boundary.db.CRUD.category_crud import category_crud

    return await category_crud.create(test_async_db, name="Product", icon="box")


@pytest.fixture
async def source(test_async_db: AsyncSession, source_store):
    """Create a meeting source."""
    return await source_store.create(test_async_db, name="Weekly sync")


@pytest.fixture
def make_fragment(
    test_async_db: AsyncSession, fragment_store, category
) -> Callable[..., Awaitable[Any]]:
    """
    Provide a factory creating fragments with sensible defaults.

    Returns:
        Callable: async (title="...", embedding=None, **fields) -> FragmentModel
    """

    async def _make(
        title: str = "Fragment",
        embedding: list[float] | None = None,
        session: AsyncSession | None = None,
        **fields: Any,
    ):
        values = {
            "title": title,
            "content": f"{title} content",
            "category_id": category.id,
            "embedding": embedding,
        }
        values.update(fields)
        return await fragment_store.create(session or test_async_db, **values)

    return _make


@pytest.fixture
def make_unit(
    test_async_db: AsyncSession, unit_store, category
) -> Callable[..., Awaitable[Any]]:
    """
    Provide a factory creating knowledge units with sensible defaults.

    Returns:
        Callable: async (title="...", **fields) -> KnowledgeUnitModel
    """

    async def _make(title: str = "Unit", session: AsyncSession | None = None, **fields: Any):
        values = {
            "title": title,
            "content": f"{title} content",
            "category_id": category.id,
        }
        values.update(fields)
        return await unit_store.create(session or test_async_db, **values)

    return _make


@pytest.fixture
def sample_id() -> uuid.UUID:
    """Provide sample UUID for testing."""
    return uuid.uuid4()

"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory database, session factory, settings and collaborator stubs
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, httpx
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from respondo.boundary.db.base import Base
from respondo.boundary.storage.object_store import S3ObjectStore
from respondo.configs import IngestionSettings, LLMSettings, RetrievalSettings, StorageSettings


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Every connection shares one in-memory database through StaticPool.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    """Session factory configured like the production one."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Open a session on the in-memory database.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def llm_settings() -> LLMSettings:
    """LLM settings pointing at a fake provider with fast retries."""
    return LLMSettings(
        api_key="test-key",
        base_url="https://llm.test/v1",
        embedding_dimension=3,
        max_retries=3,
        retry_base_delay=1.0,
    )


@pytest.fixture
def ingestion_settings() -> IngestionSettings:
    """Small windows so short texts produce several chunks."""
    return IngestionSettings(chunk_size=3, chunk_overlap=1, max_extracted_chars=10_000)


@pytest.fixture
def retrieval_settings() -> RetrievalSettings:
    return RetrievalSettings(match_threshold=0.7, match_count=5)


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(bucket="test-bucket", max_upload_bytes=1024)


@pytest.fixture
def mock_object_store() -> MagicMock:
    """
    Create mock S3ObjectStore.

    Returns:
        MagicMock: Object store with async methods
    """
    store = MagicMock(spec=S3ObjectStore)
    store.upload = AsyncMock()
    store.download = AsyncMock(return_value=b"")
    store.delete = AsyncMock()
    store.create_signed_url = AsyncMock()
    store.exists = AsyncMock(return_value=True)
    return store


@pytest.fixture
def mock_embedding_client() -> MagicMock:
    """
    Create mock EmbeddingClient returning a fixed 3-dimensional vector.

    Returns:
        MagicMock: Embedding client with async embed()
    """
    client = MagicMock()
    client.embed = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return client

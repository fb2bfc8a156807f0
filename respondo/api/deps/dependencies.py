"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived clients live in a
process-wide ServiceCache; request-scoped services get their own database
session.

Dependencies: fastapi, respondo.configs, respondo.application, respondo.boundary
System role: DI container for service injection
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from respondo.application.chat.streaming_chat_client import StreamingChatClient
from respondo.application.context_assembler import ContextAssembler
from respondo.application.document_pipeline.ingestion_job import IngestionJobRunner
from respondo.application.document_pipeline.ingestion_pipeline import DocumentIngestionPipeline
from respondo.application.services import ChatService, DocumentService
from respondo.boundary.db import get_async_db, get_async_session_factory
from respondo.boundary.identity.identity_client import AuthenticatedUser, IdentityClient
from respondo.boundary.llm.embedding_client import EmbeddingClient
from respondo.boundary.storage.object_store import S3ObjectStore
from respondo.boundary.vdb.similarity_search import SimilaritySearch
from respondo.configs import Settings, get_settings
from respondo.core.exceptions import AuthenticationError, TransportError

ChatServiceScope = Callable[[], AbstractAsyncContextManager[ChatService]]


class ServiceCache:
    """Container for cached, process-wide service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._http_client = None
        self._session_factory = None
        self._object_store = None
        self._embedding_client = None
        self._similarity_search = None
        self._context_assembler = None
        self._chat_client = None
        self._ingestion_pipeline = None
        self._job_runner = None
        self._identity_client = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Shared HTTP client for the LLM provider."""
        if self._http_client is None:
            llm = self.settings.llm
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(llm.request_timeout, connect=llm.connect_timeout)
            )
        return self._http_client

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_async_session_factory()
        return self._session_factory

    @property
    def object_store(self) -> S3ObjectStore:
        if self._object_store is None:
            self._object_store = S3ObjectStore.from_settings(self.settings.storage)
        return self._object_store

    @property
    def embedding_client(self) -> EmbeddingClient:
        if self._embedding_client is None:
            self._embedding_client = EmbeddingClient(self.settings.llm, http_client=self.http_client)
        return self._embedding_client

    @property
    def similarity_search(self) -> SimilaritySearch:
        if self._similarity_search is None:
            self._similarity_search = SimilaritySearch(
                self.session_factory,
                match_function=self.settings.retrieval.match_function,
            )
        return self._similarity_search

    @property
    def context_assembler(self) -> ContextAssembler:
        if self._context_assembler is None:
            self._context_assembler = ContextAssembler(
                self.embedding_client,
                self.similarity_search,
                settings=self.settings.retrieval,
            )
        return self._context_assembler

    @property
    def chat_client(self) -> StreamingChatClient:
        if self._chat_client is None:
            self._chat_client = StreamingChatClient(
                self.settings.llm,
                http_client=self.http_client,
                context_assembler=self.context_assembler,
            )
        return self._chat_client

    @property
    def ingestion_pipeline(self) -> DocumentIngestionPipeline:
        if self._ingestion_pipeline is None:
            self._ingestion_pipeline = DocumentIngestionPipeline(
                self.session_factory,
                self.object_store,
                self.embedding_client,
                settings=self.settings.ingestion,
            )
        return self._ingestion_pipeline

    @property
    def job_runner(self) -> IngestionJobRunner:
        if self._job_runner is None:
            self._job_runner = IngestionJobRunner(self.ingestion_pipeline)
        return self._job_runner

    @property
    def identity_client(self) -> IdentityClient:
        if self._identity_client is None:
            self._identity_client = IdentityClient(self.settings.identity)
        return self._identity_client

    async def aclose(self) -> None:
        """Stop background work, close clients and clear all cached instances."""
        if self._job_runner is not None:
            await self._job_runner.shutdown()
        if self._chat_client is not None:
            await self._chat_client.aclose()
        if self._identity_client is not None:
            await self._identity_client.aclose()
        if self._http_client is not None:
            await self._http_client.aclose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._http_client = None
        self._session_factory = None
        self._object_store = None
        self._embedding_client = None
        self._similarity_search = None
        self._context_assembler = None
        self._chat_client = None
        self._ingestion_pipeline = None
        self._job_runner = None
        self._identity_client = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


_bearer = HTTPBearer(auto_error=False)


def get_identity_client() -> IdentityClient:
    return get_service_cache().identity_client


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    """
    Resolve the bearer token on the request to a user.

    Raises:
        HTTPException(401): Missing or rejected token
        HTTPException(503): Identity provider unreachable
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await identity_client.get_user(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    except TransportError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider unavailable",
        )


def get_document_service(db: AsyncSession = Depends(get_async_db)) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        DocumentService: Document service wired to the cached store and job runner
    """
    cache = get_service_cache()
    return DocumentService(
        db=db,
        object_store=cache.object_store,
        job_runner=cache.job_runner,
        settings=cache.settings.storage,
    )


def get_chat_service(db: AsyncSession = Depends(get_async_db)) -> ChatService:
    """
    Get chat service instance for request-scoped reads.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        ChatService: Chat service with the cached streaming client
    """
    return ChatService(db=db, chat_client=get_service_cache().chat_client)


def get_chat_client() -> StreamingChatClient:
    return get_service_cache().chat_client


def get_chat_service_scope() -> ChatServiceScope:
    """
    Get a factory for chat services that own their database session.

    Streaming turns outlive the request handler, so they cannot use the
    request-scoped session.
    """
    cache = get_service_cache()

    @asynccontextmanager
    async def scope() -> AsyncIterator[ChatService]:
        async with cache.session_factory() as db:
            yield ChatService(db=db, chat_client=cache.chat_client)

    return scope

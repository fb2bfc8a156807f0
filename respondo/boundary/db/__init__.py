"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - DocumentModel, DocumentChunkModel, DocumentEmbeddingModel, ChatMessageModel
  - DocumentStatus, ChatRole: Enum types
  - document_crud, chunk_crud, embedding_crud, chat_message_crud: CRUD singletons

Dependencies: sqlalchemy, respondo.configs
System role: Relational store adapter for documents, chunks, embeddings and chat history
"""

from respondo.boundary.db.base import Base, TimestampMixin, UUIDMixin
from respondo.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from respondo.boundary.db.models import (
    ChatMessageModel,
    ChatRole,
    DocumentChunkModel,
    DocumentEmbeddingModel,
    DocumentModel,
    DocumentStatus,
)
from respondo.boundary.db.CRUD import (
    BaseCRUD,
    chat_message_crud,
    chunk_crud,
    document_crud,
    embedding_crud,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "ChatMessageModel",
    "ChatRole",
    "DocumentChunkModel",
    "DocumentEmbeddingModel",
    "DocumentModel",
    "DocumentStatus",
    "BaseCRUD",
    "chat_message_crud",
    "chunk_crud",
    "document_crud",
    "embedding_crud",
]

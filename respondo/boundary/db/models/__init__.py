"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus: Document ORM model and status enum
  - DocumentChunkModel: Word-window chunk rows
  - DocumentEmbeddingModel, embedding_vector: Embedding rows and vector column type
  - ChatMessageModel, ChatRole: Committed chat history

Dependencies: sqlalchemy, pgvector, respondo.boundary.db.base
System role: Database model definitions for domain entities
"""

from respondo.boundary.db.models.chat_message_model import ChatMessageModel, ChatRole
from respondo.boundary.db.models.chunk_model import DocumentChunkModel
from respondo.boundary.db.models.document_model import DocumentModel, DocumentStatus
from respondo.boundary.db.models.embedding_model import (
    DocumentEmbeddingModel,
    embedding_vector,
)

__all__ = [
    "ChatMessageModel",
    "ChatRole",
    "DocumentChunkModel",
    "DocumentEmbeddingModel",
    "DocumentModel",
    "DocumentStatus",
    "embedding_vector",
]

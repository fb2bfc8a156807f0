"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from respondo.boundary.db.CRUD import document_crud, chunk_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from respondo.boundary.db.CRUD.base_crud import BaseCRUD
from respondo.boundary.db.CRUD.chat_message_crud import ChatMessageCRUD, chat_message_crud
from respondo.boundary.db.CRUD.chunk_crud import DocumentChunkCRUD, chunk_crud
from respondo.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from respondo.boundary.db.CRUD.embedding_crud import DocumentEmbeddingCRUD, embedding_crud

__all__ = [
    "BaseCRUD",
    "ChatMessageCRUD",
    "chat_message_crud",
    "DocumentChunkCRUD",
    "chunk_crud",
    "DocumentCRUD",
    "document_crud",
    "DocumentEmbeddingCRUD",
    "embedding_crud",
]

"""
Document embedding ORM model and vector column type.

On PostgreSQL the vector is stored in a pgvector `vector(n)` column so the
`match_documents` function can rank it; other backends keep it as JSON.

Dependencies: sqlalchemy, pgvector, respondo.boundary.db.base
System role: Persistence of chunk embeddings for similarity search
"""

import uuid

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeEngine

from respondo.boundary.db.base import Base, TimestampMixin, UUIDMixin

EMBEDDING_DIMENSION = 1536


def embedding_vector(dimension: int | None = EMBEDDING_DIMENSION) -> TypeEngine:
    """pgvector column type with a JSON variant for SQLite."""
    return Vector(dimension).with_variant(JSON(), "sqlite")


class DocumentEmbeddingModel(Base, UUIDMixin, TimestampMixin):
    """Embedding of exactly one chunk. Immutable once written."""

    __tablename__ = "document_embeddings"

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("document_chunks.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    embedding: Mapped[list[float]] = mapped_column(
        embedding_vector(EMBEDDING_DIMENSION),
        nullable=False,
    )

"""
Document chunk ORM model.

Dependencies: sqlalchemy, respondo.boundary.db.base
System role: Persistence of word-window chunks produced by ingestion
"""

import uuid

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from respondo.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    One word window of a document's extracted text.

    Rows are immutable once written. chunk_index values for a document are
    contiguous from 0 and unique.
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

"""
Document ORM model.

Represents an uploaded file and its ingestion lifecycle. Status moves
pending -> processing -> completed | error and never leaves a terminal state.

Dependencies: sqlalchemy, respondo.boundary.db.base
System role: Document metadata persistence
"""

import enum

from sqlalchemy import BigInteger, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from respondo.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentStatus(str, enum.Enum):
    """
    Document ingestion lifecycle states.

    PENDING: Uploaded, waiting for an ingestion run to claim it
    PROCESSING: Claimed; chunks and embeddings are being written
    COMPLETED: Every chunk has an embedding
    ERROR: Ingestion stopped; error_message holds the cause
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.COMPLETED, DocumentStatus.ERROR)


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Uploaded document row.

    Attributes:
        id: UUID primary key (auto-generated)
        name: Original filename shown to users
        type: Declared type (lowercase extension, e.g. "pdf")
        size: Byte size of the stored blob
        storage_path: Object key of the blob ("{owner}/{uuid}.{ext}")
        created_by: Opaque id of the uploading user
        status: Ingestion lifecycle state
        error_message: Failure description when status is ERROR
    """

    __tablename__ = "documents"

    name: Mapped[str] = mapped_column(String(512), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False, unique=True)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(
            DocumentStatus,
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=DocumentStatus.PENDING,
    )

    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Failure description (truncated to 2000 chars)",
    )

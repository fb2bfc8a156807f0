"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel with
owner-scoped listing and cascading removal of derived rows.

Dependencies: sqlalchemy, respondo.boundary.db.models
System role: Document persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.CRUD.base_crud import BaseCRUD
from respondo.boundary.db.models import (
    DocumentChunkModel,
    DocumentEmbeddingModel,
    DocumentModel,
)


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Status transitions are not written here; DocumentStatusUpdater owns them.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve a user's documents, newest first.

        Args:
            session: Async database session
            owner_id: Opaque id of the uploading user
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels owned by the user
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.created_by == owner_id)
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_with_children(self, session: AsyncSession, id: UUID) -> bool:
        """
        Delete a document together with its embeddings and chunks.

        Children are deleted explicitly so backends without enforced foreign
        keys end in the same state as PostgreSQL.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            True if the document row was deleted, False if not found
        """
        await session.execute(
            delete(DocumentEmbeddingModel).where(DocumentEmbeddingModel.document_id == id)
        )
        await session.execute(
            delete(DocumentChunkModel).where(DocumentChunkModel.document_id == id)
        )
        return await self.delete_by_id(session, id)


document_crud = DocumentCRUD()

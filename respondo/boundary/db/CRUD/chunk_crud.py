"""
Document chunk CRUD operations.

Dependencies: sqlalchemy, respondo.boundary.db.models
System role: Chunk persistence operations for ingestion
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.CRUD.base_crud import BaseCRUD
from respondo.boundary.db.models import DocumentChunkModel


class DocumentChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        super().__init__(DocumentChunkModel)

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[DocumentChunkModel]:
        """
        Retrieve a document's chunks in index order.

        Args:
            session: Async database session
            document_id: Parent document UUID

        Returns:
            Sequence of chunks ordered by chunk_index
        """
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.document_id == document_id)
            .order_by(DocumentChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentChunkModel)
            .where(DocumentChunkModel.document_id == document_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one()


chunk_crud = DocumentChunkCRUD()

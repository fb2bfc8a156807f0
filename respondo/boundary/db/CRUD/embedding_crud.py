"""
Document embedding CRUD operations.

Dependencies: sqlalchemy, respondo.boundary.db.models
System role: Embedding persistence operations for ingestion
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.CRUD.base_crud import BaseCRUD
from respondo.boundary.db.models import DocumentEmbeddingModel


class DocumentEmbeddingCRUD(BaseCRUD[DocumentEmbeddingModel]):
    """CRUD operations for DocumentEmbeddingModel."""

    def __init__(self) -> None:
        super().__init__(DocumentEmbeddingModel)

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[DocumentEmbeddingModel]:
        stmt = select(DocumentEmbeddingModel).where(
            DocumentEmbeddingModel.document_id == document_id
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_chunk(
        self,
        session: AsyncSession,
        chunk_id: UUID,
    ) -> DocumentEmbeddingModel | None:
        stmt = select(DocumentEmbeddingModel).where(DocumentEmbeddingModel.chunk_id == chunk_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentEmbeddingModel)
            .where(DocumentEmbeddingModel.document_id == document_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one()


embedding_crud = DocumentEmbeddingCRUD()

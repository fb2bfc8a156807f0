"""
Shared CRUD primitives for the document and chat tables.

Model-specific CRUD objects inherit insert, primary-key lookup and
primary-key delete from here and add their own queries.

Dependencies: sqlalchemy
System role: Foundation for the persistence CRUD objects
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Insert, lookup and delete by primary key for one model.

    Nothing here commits; the caller decides where each transaction ends.
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert a row and load its generated columns.

        Args:
            session: Async database session
            **kwargs: Column values

        Returns:
            The persisted instance with id and timestamps populated
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """Delete one row. Returns False when no row had that id."""
        result = await session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

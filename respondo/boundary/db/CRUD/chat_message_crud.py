"""
Chat message CRUD operations.

Stores committed conversation turns per user with SQLAlchemy, in the same
database as documents.

Dependencies: sqlalchemy, respondo.boundary.db.models
System role: Chat message persistence
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.CRUD.base_crud import BaseCRUD
from respondo.boundary.db.models import ChatMessageModel, ChatRole


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel."""

    def __init__(self) -> None:
        super().__init__(ChatMessageModel)

    async def add_message(
        self,
        session: AsyncSession,
        user_id: str,
        role: ChatRole,
        content: str,
    ) -> ChatMessageModel:
        """
        Add a message to a user's history.

        Args:
            session: Async database session
            user_id: Owner of the conversation
            role: Message author
            content: Message text

        Returns:
            Created ChatMessageModel
        """
        return await self.create(session, user_id=user_id, role=role, content=content)

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
    ) -> Sequence[ChatMessageModel]:
        """
        Retrieve a user's messages, oldest first.

        Args:
            session: Async database session
            user_id: Owner of the conversation
            limit: Keep only the most recent N messages (None for all)

        Returns:
            Sequence of ChatMessageModels in chronological order
        """
        if limit is None:
            stmt = (
                select(ChatMessageModel)
                .where(ChatMessageModel.user_id == user_id)
                .order_by(ChatMessageModel.created_at.asc())
            )
            result = await session.execute(stmt)
            return result.scalars().all()

        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.user_id == user_id)
            .order_by(ChatMessageModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(reversed(result.scalars().all()))


chat_message_crud = ChatMessageCRUD()

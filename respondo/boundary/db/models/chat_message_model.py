"""
Chat message ORM model.

Only committed turns are stored: user messages, final assistant answers and
partial answers kept after a cancelled stream.

Dependencies: sqlalchemy, respondo.boundary.db.base
System role: Conversation history persistence
"""

import enum

from sqlalchemy import Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from respondo.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ChatRole(str, enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessageModel(Base, UUIDMixin, TimestampMixin):
    """Committed chat message owned by one user."""

    __tablename__ = "chat_messages"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[ChatRole] = mapped_column(
        Enum(
            ChatRole,
            native_enum=False,
            length=16,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

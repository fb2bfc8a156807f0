"""Service orchestrators."""

from .chat_service import ChatService, ChatTurn
from .document_service import DocumentService

__all__ = [
    "ChatService",
    "ChatTurn",
    "DocumentService",
]

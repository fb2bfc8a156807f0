"""
Chat domain models and schemas.

Request/response schemas for chat operations plus the message shape sent to
the completions API.

Dependencies: pydantic
System role: Chat API contracts
"""

from pydantic import BaseModel, ConfigDict, Field

from respondo.boundary.db.models import ChatRole


class ChatMessage(BaseModel):
    """A role-tagged message as sent to the completions API."""

    model_config = ConfigDict(from_attributes=True)

    role: ChatRole
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatRequest(BaseModel):
    """Request schema for a chat turn."""

    message: str = Field(min_length=1, description="User question or message")


class ChatHistoryResponse(BaseModel):
    """Response schema for chat history."""

    messages: list[ChatMessage]
    total: int = Field(description="Total number of messages")

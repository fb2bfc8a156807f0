"""
Streaming event schemas for chat responses.

Defines event types and payloads delivered over the server-sent event
endpoint while a chat turn streams.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StreamEventType(str, Enum):
    """Server-to-client event types for streaming chat."""

    TOKEN = "token"
    RETRY = "retry"
    COMPLETE = "complete"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}

    def to_sse(self) -> str:
        """Render as one server-sent event frame."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data)}\n\n"

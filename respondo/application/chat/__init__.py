"""Streamed chat completions."""

from respondo.application.chat.streaming_chat_client import (
    StreamingChatClient,
    StreamOutcome,
    StreamSession,
)

__all__ = ["StreamingChatClient", "StreamOutcome", "StreamSession"]

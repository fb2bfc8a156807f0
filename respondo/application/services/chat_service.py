"""
Chat service for retrieval-augmented support conversations.

Persists the user's message, streams the assistant reply through the
streaming chat client and commits exactly one assistant message per turn:
the full reply, the generic failure message, or the partial reply when the
caller cancels.

Dependencies: sqlalchemy, respondo.application.chat, respondo.boundary.db
System role: Chat service orchestration layer
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from respondo.application.chat.callbacks import Callback, invoke_callback
from respondo.application.chat.streaming_chat_client import (
    StreamingChatClient,
    StreamOutcome,
    StreamSession,
)
from respondo.boundary.db.CRUD import chat_message_crud
from respondo.boundary.db.models import ChatRole
from respondo.core.exceptions import StreamAlreadyActive
from respondo.models.chat import ChatMessage

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Sorry, there was an error processing your request."


class ChatTurn:
    """
    One user message and the assistant reply streaming for it.

    Attributes:
        user_id: Conversation owner
        assistant_message: Committed assistant message once the turn ends
    """

    def __init__(
        self,
        service: "ChatService",
        user_id: str,
        on_token: Callback | None = None,
        on_error: Callback | None = None,
        on_complete: Callback | None = None,
        on_retry: Callback | None = None,
    ) -> None:
        self._service = service
        self.user_id = user_id
        self._on_token = on_token
        self._on_error = on_error
        self._on_complete = on_complete
        self._on_retry = on_retry
        self._stream: StreamSession | None = None
        self.assistant_message: ChatMessage | None = None

    @property
    def stream(self) -> StreamSession:
        if self._stream is None:
            raise RuntimeError("Chat turn has not been started")
        return self._stream

    @property
    def text(self) -> str:
        """Reply text delivered by the current attempt."""
        return self.stream.text

    def done(self) -> bool:
        return self.stream.done()

    async def wait(self) -> StreamOutcome:
        return await self.stream.wait()

    async def cancel(self) -> ChatMessage | None:
        """
        Stop the reply and keep what was delivered.

        Returns:
            ChatMessage | None: The committed partial reply, or None if the
                turn had already ended or nothing was delivered
        """
        if not self.stream.cancel():
            return None
        await self.stream.wait()

        partial = self.stream.text
        if not partial:
            return None
        self.assistant_message = await self._service._commit_assistant(self.user_id, partial)
        logger.info(
            f"{__name__}:cancel - Partial reply committed",
            extra={"user_id": self.user_id, "chars": len(partial)},
        )
        return self.assistant_message

    async def _handle_token(self, token: str) -> None:
        await invoke_callback(self._on_token, token)

    async def _handle_retry(self, retry_number: int) -> None:
        await invoke_callback(self._on_retry, retry_number)

    async def _handle_complete(self) -> None:
        self.assistant_message = await self._service._commit_assistant(
            self.user_id, self.stream.text
        )
        await invoke_callback(self._on_complete, self.assistant_message)

    async def _handle_error(self, error: Exception) -> None:
        self.assistant_message = await self._service._commit_assistant(
            self.user_id, FAILURE_MESSAGE
        )
        await invoke_callback(self._on_error, error)


class ChatService:
    """
    Chat service for support conversations.

    History is per user; the user id is also the single-flight key for
    streaming, so one user has at most one reply in flight.
    """

    def __init__(
        self,
        db: AsyncSession,
        chat_client: StreamingChatClient,
        history_limit: int | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for message persistence
            chat_client: Streaming completions client
            history_limit: Most recent messages sent as conversation context
                (None sends the whole history)
        """
        self.db = db
        self._chat_client = chat_client
        self._history_limit = history_limit

    def is_streaming(self, user_id: str) -> bool:
        return self._chat_client.is_active(user_id)

    async def get_history(self, user_id: str, limit: int | None = None) -> list[ChatMessage]:
        """
        Committed messages for a user, oldest first.

        Args:
            user_id: Conversation owner
            limit: Keep only the most recent N messages

        Returns:
            list[ChatMessage]: Conversation history
        """
        rows = await chat_message_crud.get_by_user(self.db, user_id, limit=limit)
        return [ChatMessage.model_validate(row) for row in rows]

    async def start_turn(
        self,
        user_id: str,
        content: str,
        on_token: Callback | None = None,
        on_error: Callback | None = None,
        on_complete: Callback | None = None,
        on_retry: Callback | None = None,
    ) -> ChatTurn:
        """
        Persist a user message and start streaming the reply.

        Args:
            user_id: Conversation owner
            content: User message
            on_token: Called with each reply delta
            on_error: Called once with the error if the reply fails
            on_complete: Called once with the committed assistant message
            on_retry: Called with the retry number before each retry

        Returns:
            ChatTurn: Handle for waiting on or cancelling the reply

        Raises:
            StreamAlreadyActive: A reply for this user is still streaming
        """
        if self._chat_client.is_active(user_id):
            raise StreamAlreadyActive(user_id)

        user_message = await chat_message_crud.add_message(
            self.db, user_id, ChatRole.USER, content
        )
        await self.db.commit()
        history = await self.get_history(user_id, limit=self._history_limit)

        turn = ChatTurn(self, user_id, on_token, on_error, on_complete, on_retry)
        try:
            turn._stream = self._chat_client.start(
                history,
                turn._handle_token,
                turn._handle_error,
                turn._handle_complete,
                on_retry=turn._handle_retry,
                session_key=user_id,
            )
        except StreamAlreadyActive:
            # Another turn started while the message was being stored
            await chat_message_crud.delete_by_id(self.db, user_message.id)
            await self.db.commit()
            raise

        logger.info(
            f"{__name__}:start_turn - Turn started",
            extra={"user_id": user_id, "history": len(history)},
        )
        return turn

    async def _commit_assistant(self, user_id: str, content: str) -> ChatMessage:
        row = await chat_message_crud.add_message(self.db, user_id, ChatRole.ASSISTANT, content)
        await self.db.commit()
        return ChatMessage.model_validate(row)

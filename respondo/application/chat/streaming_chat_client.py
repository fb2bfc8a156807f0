"""
Streaming chat completions client.

Sends a conversation to an OpenAI-compatible chat completions endpoint with
`stream: true` through the openai SDK and hands each content delta to the
caller as it arrives. A stream that ends without a finish reason is treated as
cut short. Transient failures restart the whole
request after `retry_base_delay * attempt` seconds; cancellation stops the
turn silently.

Each turn runs as an asyncio task behind a StreamSession handle. At most one
turn per session key may be in flight.

Dependencies: openai, httpx, tenacity
System role: Streaming LLM adapter for chat turns
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import Any

import httpx
import openai
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from respondo.application.chat.callbacks import Callback, invoke_callback
from respondo.application.context_assembler import ContextAssembler
from respondo.boundary.llm.provider import create_provider_client, translate_provider_error
from respondo.configs.llm import LLMSettings
from respondo.core.exceptions import StreamAlreadyActive, TransportError, UpstreamError
from respondo.models.chat import ChatMessage

logger = logging.getLogger(__name__)

CONTEXT_PROMPT = (
    "Here is some relevant context from the user's documents:\n\n"
    "{context}\n\n"
    "Please use this information to help answer the user's questions."
)

DEFAULT_SESSION_KEY = "default"

class StreamOutcome(str, Enum):
    """How a chat turn ended."""

    PENDING = "pending"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


def is_retryable(exc: BaseException) -> bool:
    """
    Decide whether a failed attempt should be repeated.

    Transport failures are retried, as are rate limiting (429) and server
    errors (5xx). Other upstream answers would fail the same way again.
    """
    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, UpstreamError):
        status = exc.status_code
        return status is not None and (status == 429 or status >= 500)
    return False


class StreamSession:
    """
    Handle for one streamed chat turn.

    Attributes:
        session_key: Key the turn is registered under
        retries: Retries started so far
        outcome: Terminal outcome, PENDING while running
        error: Exception reported through on_error, if any
    """

    def __init__(self, session_key: str) -> None:
        self.session_key = session_key
        self.retries = 0
        self.outcome = StreamOutcome.PENDING
        self.error: BaseException | None = None
        self._parts: list[str] = []
        self._cancel_requested = False
        self._task: asyncio.Task | None = None

    @property
    def text(self) -> str:
        """Tokens delivered by the current attempt, concatenated."""
        return "".join(self._parts)

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested or self.outcome == StreamOutcome.CANCELLED

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> bool:
        """
        Stop the turn. Neither on_complete nor on_error fire afterwards.

        A turn whose outcome is already decided cannot be cancelled, even
        while its terminal callback is still running.

        Returns:
            bool: False if the turn had already finished
        """
        if self._task is None or self._task.done():
            return False
        if self.outcome != StreamOutcome.PENDING:
            return False
        self._cancel_requested = True
        return self._task.cancel()

    async def wait(self) -> StreamOutcome:
        """Wait for the turn to end without propagating its cancellation."""
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self.outcome

    def _append(self, token: str) -> None:
        self._parts.append(token)

    def _reset(self) -> None:
        self._parts.clear()


class StreamingChatClient:
    """Stream chat completions with retry, context injection and cancellation."""

    def __init__(
        self,
        settings: LLMSettings,
        http_client: httpx.AsyncClient | None = None,
        context_assembler: ContextAssembler | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            settings: API key, model, timeouts and retry policy
            http_client: Shared transport (the provider client owns one when None)
            context_assembler: Retrieval step; no context is added when None
            sleep: Backoff sleep (tests pass a recorder)
        """
        self._url = settings.base_url.rstrip("/") + "/chat/completions"
        self._model = settings.chat_model
        self._max_retries = settings.max_retries
        self._retry_base_delay = settings.retry_base_delay
        self._context_assembler = context_assembler
        self._sleep = sleep
        self._owns_client = http_client is None
        self._provider = create_provider_client(settings, http_client=http_client)
        self._active: dict[str, StreamSession] = {}

    def is_active(self, session_key: str = DEFAULT_SESSION_KEY) -> bool:
        session = self._active.get(session_key)
        return session is not None and not session.done()

    def start(
        self,
        messages: Sequence[ChatMessage | dict[str, str]],
        on_token: Callback,
        on_error: Callback,
        on_complete: Callback,
        on_retry: Callback | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> StreamSession:
        """
        Start streaming a reply in the background.

        Must be called from a running event loop.

        Args:
            messages: Conversation so far, oldest first
            on_token: Called with each content delta, in wire order
            on_error: Called once with the final exception if the turn fails
            on_complete: Called once when the stream finishes
            on_retry: Called with the retry number before each retry; tokens
                from the failed attempt should be discarded
            session_key: Single-flight key (typically the user id)

        Returns:
            StreamSession: Handle for waiting on or cancelling the turn

        Raises:
            StreamAlreadyActive: A turn for session_key is still in flight
        """
        if self.is_active(session_key):
            raise StreamAlreadyActive(session_key)

        wire_messages = [
            m.to_wire() if isinstance(m, ChatMessage) else dict(m) for m in messages
        ]
        session = StreamSession(session_key)
        task = asyncio.create_task(
            self._run(session, wire_messages, on_token, on_error, on_complete, on_retry),
            name=f"chat-stream-{session_key}",
        )
        session._task = task
        self._active[session_key] = session
        task.add_done_callback(lambda finished: self._release(session, finished))
        return session

    async def stream_chat(
        self,
        messages: Sequence[ChatMessage | dict[str, str]],
        on_token: Callback,
        on_error: Callback,
        on_complete: Callback,
        on_retry: Callback | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> StreamSession:
        """Start a turn and wait for it to end. See start() for arguments."""
        session = self.start(
            messages,
            on_token,
            on_error,
            on_complete,
            on_retry=on_retry,
            session_key=session_key,
        )
        try:
            await session.wait()
        except asyncio.CancelledError:
            session.cancel()
            raise
        return session

    def _release(self, session: StreamSession, task: asyncio.Task) -> None:
        if self._active.get(session.session_key) is session:
            del self._active[session.session_key]
        if task.cancelled() and session.outcome == StreamOutcome.PENDING:
            session.outcome = StreamOutcome.CANCELLED

    async def _run(
        self,
        session: StreamSession,
        messages: list[dict[str, str]],
        on_token: Callback,
        on_error: Callback,
        on_complete: Callback,
        on_retry: Callback | None,
    ) -> None:
        try:
            payload = {
                "model": self._model,
                "messages": await self._with_context(messages),
                "stream": True,
            }
            retrying = AsyncRetrying(
                retry=retry_if_exception(is_retryable),
                stop=stop_after_attempt(self._max_retries + 1),
                wait=wait_incrementing(
                    start=self._retry_base_delay,
                    increment=self._retry_base_delay,
                ),
                sleep=self._sleep,
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:_run - Attempt {retry_state.attempt_number} failed, "
                    f"retrying in {retry_state.next_action.sleep:.1f}s",
                    extra={"session_key": session.session_key},
                ),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    retry_number = attempt.retry_state.attempt_number - 1
                    if retry_number:
                        session.retries = retry_number
                        session._reset()
                        await invoke_callback(on_retry, retry_number)
                    await self._stream_once(session, payload, on_token)
        except asyncio.CancelledError:
            session.outcome = StreamOutcome.CANCELLED
            logger.info(
                f"{__name__}:_run - Stream cancelled",
                extra={"session_key": session.session_key, "retries": session.retries},
            )
            raise
        except Exception as e:
            session.outcome = StreamOutcome.ERRORED
            session.error = e
            logger.error(
                f"{__name__}:_run - Stream failed: {type(e).__name__}: {e}",
                extra={"session_key": session.session_key, "retries": session.retries},
            )
            await invoke_callback(on_error, e)
            return

        session.outcome = StreamOutcome.COMPLETED
        logger.info(
            f"{__name__}:_run - Stream completed",
            extra={
                "session_key": session.session_key,
                "retries": session.retries,
                "chars": len(session.text),
            },
        )
        await invoke_callback(on_complete)

    async def _with_context(self, messages: list[dict[str, str]]) -> list[dict[str, str]]:
        if self._context_assembler is None:
            return messages

        last_user = next((m for m in reversed(messages) if m.get("role") == "user"), None)
        if last_user is None:
            return messages

        context = await self._context_assembler.build_context(last_user["content"])
        if not context:
            return messages

        system_message = {"role": "system", "content": CONTEXT_PROMPT.format(context=context)}
        return [system_message, *messages]

    async def _stream_once(
        self,
        session: StreamSession,
        payload: dict[str, Any],
        on_token: Callback,
    ) -> None:
        finished = False
        try:
            stream = await self._provider.chat.completions.create(**payload)
            async with stream:
                async for chunk in stream:
                    if not chunk.choices:
                        continue
                    choice = chunk.choices[0]
                    delta = getattr(choice, "delta", None)
                    token = getattr(delta, "content", None)
                    if token:
                        session._append(token)
                        await invoke_callback(on_token, token)
                    if getattr(choice, "finish_reason", None):
                        finished = True
        except (openai.APIError, httpx.HTTPError) as e:
            raise translate_provider_error(e, "Chat completion", url=self._url) from e
        except json.JSONDecodeError as e:
            raise UpstreamError(
                "Chat completion stream sent a malformed event",
                details={"error": str(e)},
            ) from e

        if not finished:
            raise TransportError("Chat stream ended before completion", url=self._url)

    async def aclose(self) -> None:
        """Cancel in-flight turns and close the owned provider client."""
        sessions = list(self._active.values())
        for session in sessions:
            session.cancel()
        for session in sessions:
            await session.wait()
        if self._owns_client:
            await self._provider.close()

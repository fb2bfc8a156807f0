"""
Chat API endpoints.

Routes:
- GET /chat/messages - Committed conversation history
- POST /chat/stream - Stream an assistant reply as server-sent events

Stream events:
    event: token     data: {"token": "..."}
    event: retry     data: {"attempt": 1}
    event: complete  data: {"content": "..."}
    event: error     data: {"message": "..."}

Dependencies: fastapi, respondo.application.services.chat_service
System role: Chat HTTP API
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from respondo.api.deps import (
    ChatServiceScope,
    get_chat_client,
    get_chat_service,
    get_chat_service_scope,
    get_current_user,
)
from respondo.application.chat.streaming_chat_client import StreamingChatClient
from respondo.application.services.chat_service import FAILURE_MESSAGE, ChatService
from respondo.boundary.identity.identity_client import AuthenticatedUser
from respondo.core.exceptions import StreamAlreadyActive
from respondo.models.chat import ChatHistoryResponse, ChatRequest
from respondo.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

# Turn drivers run detached from the response; keep references until they finish
_turn_tasks: set[asyncio.Task] = set()


@router.get("/messages", response_model=ChatHistoryResponse)
async def get_messages(
    user: AuthenticatedUser = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatHistoryResponse:
    """Committed chat history for the caller, oldest first."""
    messages = await chat_service.get_history(user.id)
    return ChatHistoryResponse(messages=messages, total=len(messages))


async def _drive_turn(
    scope: ChatServiceScope,
    user_id: str,
    message: str,
    queue: asyncio.Queue,
    disconnected: asyncio.Event,
) -> None:
    """Run one turn, pushing events to the queue; cancel it if the client leaves."""
    try:
        async with scope() as chat_service:
            turn = await chat_service.start_turn(
                user_id,
                message,
                on_token=lambda token: queue.put_nowait(
                    StreamEvent(event=StreamEventType.TOKEN, data={"token": token})
                ),
                on_retry=lambda attempt: queue.put_nowait(
                    StreamEvent(event=StreamEventType.RETRY, data={"attempt": attempt})
                ),
                on_complete=lambda reply: queue.put_nowait(
                    StreamEvent(event=StreamEventType.COMPLETE, data={"content": reply.content})
                ),
                on_error=lambda error: queue.put_nowait(
                    StreamEvent(event=StreamEventType.ERROR, data={"message": FAILURE_MESSAGE})
                ),
            )

            finished = asyncio.ensure_future(turn.wait())
            gone = asyncio.ensure_future(disconnected.wait())
            await asyncio.wait({finished, gone}, return_when=asyncio.FIRST_COMPLETED)
            gone.cancel()
            if not finished.done():
                logger.info(
                    f"{__name__}:_drive_turn - Client disconnected, cancelling turn",
                    extra={"user_id": user_id},
                )
                await turn.cancel()
            await finished
    except StreamAlreadyActive as e:
        queue.put_nowait(StreamEvent(event=StreamEventType.ERROR, data={"message": e.message}))
    except Exception as e:
        logger.error(f"{__name__}:_drive_turn - {type(e).__name__}: {e}", extra={"user_id": user_id})
        queue.put_nowait(StreamEvent(event=StreamEventType.ERROR, data={"message": FAILURE_MESSAGE}))
    finally:
        queue.put_nowait(None)


@router.post("/stream")
async def stream_chat(
    request: ChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    chat_client: StreamingChatClient = Depends(get_chat_client),
    scope: ChatServiceScope = Depends(get_chat_service_scope),
) -> StreamingResponse:
    """
    Stream the assistant reply to a new user message.

    Raises:
        HTTPException(409): A reply for this user is already streaming
    """
    if chat_client.is_active(user.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A reply is already streaming for this user",
        )

    queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()
    disconnected = asyncio.Event()
    task = asyncio.create_task(_drive_turn(scope, user.id, request.message, queue, disconnected))
    _turn_tasks.add(task)
    task.add_done_callback(_turn_tasks.discard)

    async def event_stream():
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event.to_sse()
        finally:
            disconnected.set()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )

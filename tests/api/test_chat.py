"""
Test suite for chat endpoints.

The streaming route is exercised with a scripted chat service so the
server-sent event framing and error mapping can be checked end to end.

System role: Verification of the chat HTTP API
"""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from respondo.api.deps import get_chat_client, get_chat_service, get_chat_service_scope
from respondo.application.chat.streaming_chat_client import StreamOutcome
from respondo.application.services.chat_service import FAILURE_MESSAGE
from respondo.boundary.db.models import ChatRole
from respondo.core.exceptions import StreamAlreadyActive, UpstreamError
from respondo.models.chat import ChatMessage


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """Split a response body into (event, data) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in frame.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


class ScriptedTurn:
    def __init__(self, outcome: StreamOutcome) -> None:
        self.outcome = outcome
        self.cancelled = False

    async def wait(self) -> StreamOutcome:
        return self.outcome

    async def cancel(self) -> None:
        self.cancelled = True


class ScriptedChatService:
    """Replays a fixed sequence of callbacks when a turn starts."""

    def __init__(self, fail_with: Exception | None = None, start_error: Exception | None = None):
        self.fail_with = fail_with
        self.start_error = start_error
        self.started: list[tuple[str, str]] = []

    async def start_turn(self, user_id, content, on_token, on_error, on_complete, on_retry):
        if self.start_error is not None:
            raise self.start_error
        self.started.append((user_id, content))

        on_token("Hel")
        on_retry(1)
        if self.fail_with is not None:
            on_error(self.fail_with)
            return ScriptedTurn(StreamOutcome.ERRORED)
        on_token("Hello")
        on_complete(ChatMessage(role=ChatRole.ASSISTANT, content="Hello"))
        return ScriptedTurn(StreamOutcome.COMPLETED)


@pytest.fixture
def mock_chat_client(app) -> MagicMock:
    chat_client = MagicMock()
    chat_client.is_active.return_value = False
    app.dependency_overrides[get_chat_client] = lambda: chat_client
    return chat_client


def _use_service(app, service: ScriptedChatService) -> None:
    @asynccontextmanager
    async def scope():
        yield service

    app.dependency_overrides[get_chat_service_scope] = lambda: scope


class TestChatMessages:
    def test_should_return_history(self, app, client) -> None:
        service = MagicMock()
        service.get_history = AsyncMock(return_value=[
            ChatMessage(role=ChatRole.USER, content="hi"),
            ChatMessage(role=ChatRole.ASSISTANT, content="hello"),
        ])
        app.dependency_overrides[get_chat_service] = lambda: service

        response = client.get("/api/v1/chat/messages")

        assert response.status_code == 200
        assert response.json() == {
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ],
            "total": 2,
        }
        service.get_history.assert_awaited_once_with("user-1")


class TestChatStream:
    def test_should_stream_tokens_retry_and_completion(
        self, app, client, mock_chat_client
    ) -> None:
        # Arrange
        service = ScriptedChatService()
        _use_service(app, service)

        # Act
        response = client.post("/api/v1/chat/stream", json={"message": "How do I log in?"})

        # Assert
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert parse_sse(response.text) == [
            ("token", {"token": "Hel"}),
            ("retry", {"attempt": 1}),
            ("token", {"token": "Hello"}),
            ("complete", {"content": "Hello"}),
        ]
        assert service.started == [("user-1", "How do I log in?")]
        mock_chat_client.is_active.assert_called_once_with("user-1")

    def test_failed_turn_should_end_with_error_event(self, app, client, mock_chat_client) -> None:
        _use_service(app, ScriptedChatService(fail_with=UpstreamError("boom", status_code=500)))

        response = client.post("/api/v1/chat/stream", json={"message": "hi"})

        events = parse_sse(response.text)
        assert events[-1] == ("error", {"message": FAILURE_MESSAGE})
        assert "complete" not in [name for name, _ in events]

    def test_active_stream_should_return_409(self, app, client, mock_chat_client) -> None:
        mock_chat_client.is_active.return_value = True
        service = ScriptedChatService()
        _use_service(app, service)

        response = client.post("/api/v1/chat/stream", json={"message": "hi"})

        assert response.status_code == 409
        assert service.started == []

    def test_race_lost_at_start_should_stream_error(self, app, client, mock_chat_client) -> None:
        _use_service(app, ScriptedChatService(start_error=StreamAlreadyActive("user-1")))

        response = client.post("/api/v1/chat/stream", json={"message": "hi"})

        assert parse_sse(response.text) == [
            ("error", {"message": "A chat stream is already active for user-1"})
        ]

    def test_empty_message_should_return_422(self, app, client, mock_chat_client) -> None:
        _use_service(app, ScriptedChatService())

        assert client.post("/api/v1/chat/stream", json={"message": ""}).status_code == 422

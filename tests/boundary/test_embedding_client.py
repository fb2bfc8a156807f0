"""
Test suite for EmbeddingClient.

Uses httpx.MockTransport under the openai SDK in place of the embedding provider.

System role: Verification of the embedding provider adapter
"""

import json

import httpx
import pytest

from respondo.boundary.llm.embedding_client import EmbeddingClient
from respondo.core.exceptions import TransportError, UpstreamError


def _client(llm_settings, handler) -> EmbeddingClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmbeddingClient(llm_settings, http_client=http_client)


class TestEmbeddingClientEmbed:
    """Test suite for EmbeddingClient.embed()."""

    async def test_embed_should_post_text_and_model(self, llm_settings) -> None:
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

        client = _client(llm_settings, handler)

        # Act
        vector = await client.embed("reset password")

        # Assert
        assert vector == [0.1, 0.2, 0.3]
        assert seen["url"] == "https://llm.test/v1/embeddings"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"] == {
            "input": "reset password",
            "model": llm_settings.embedding_model,
            "encoding_format": "float",
        }

    async def test_non_success_status_should_raise_upstream_error(self, llm_settings) -> None:
        client = _client(llm_settings, lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(UpstreamError) as exc_info:
            await client.embed("text")

        assert exc_info.value.status_code == 429

    async def test_server_error_should_carry_status(self, llm_settings) -> None:
        client = _client(
            llm_settings,
            lambda request: httpx.Response(503, json={"error": {"message": "down"}}),
        )

        with pytest.raises(UpstreamError, match="503") as exc_info:
            await client.embed("text")

        assert exc_info.value.status_code == 503

    async def test_network_failure_should_raise_transport_error(self, llm_settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(llm_settings, handler)

        with pytest.raises(TransportError):
            await client.embed("text")

    async def test_malformed_body_should_raise_upstream_error(self, llm_settings) -> None:
        client = _client(llm_settings, lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(UpstreamError, match="malformed"):
            await client.embed("text")

    async def test_wrong_dimension_should_raise_upstream_error(self, llm_settings) -> None:
        client = _client(
            llm_settings,
            lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2]}]}),
        )

        with pytest.raises(UpstreamError, match="dimensions"):
            await client.embed("text")

    async def test_shared_client_should_not_be_closed(self, llm_settings) -> None:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        client = EmbeddingClient(llm_settings, http_client=http_client)

        await client.aclose()

        assert not http_client.is_closed
        await http_client.aclose()

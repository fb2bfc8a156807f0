"""
Embedding API client.

Issues one embeddings request per text to an OpenAI-compatible provider and
returns the first vector. There is no retry here; callers decide whether a
failure is worth repeating.

Dependencies: openai, httpx
System role: Embedding provider adapter for ingestion and retrieval
"""

import logging

import httpx
import openai

from respondo.boundary.llm.provider import create_provider_client, translate_provider_error
from respondo.configs.llm import LLMSettings
from respondo.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Turn text into a fixed-length vector through the embedding API."""

    def __init__(
        self,
        settings: LLMSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            settings: API key, base URL, model, dimension and timeouts
            http_client: Shared transport (the provider client owns one when None)
        """
        self._url = settings.base_url.rstrip("/") + "/embeddings"
        self._model = settings.embedding_model
        self._dimension = settings.embedding_dimension
        self._owns_client = http_client is None
        self._provider = create_provider_client(settings, http_client=http_client)

    @property
    def model(self) -> str:
        return self._model

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Chunk or query text

        Returns:
            list[float]: Embedding vector

        Raises:
            TransportError: The request never produced a response
            UpstreamError: Non-2xx status, or a response without a usable vector
        """
        try:
            response = await self._provider.embeddings.create(
                input=text,
                model=self._model,
                encoding_format="float",
            )
        except (openai.APIError, httpx.HTTPError) as e:
            logger.error(
                f"{__name__}:embed - {type(e).__name__}: {e}",
                extra={"model": self._model, "text_length": len(text)},
            )
            raise translate_provider_error(e, "Embedding API", url=self._url) from e

        try:
            vector = [float(v) for v in response.data[0].embedding]
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            raise UpstreamError("Embedding API returned a malformed response") from e

        if self._dimension and len(vector) != self._dimension:
            raise UpstreamError(
                f"Embedding has {len(vector)} dimensions, expected {self._dimension}"
            )
        return vector

    async def aclose(self) -> None:
        # AsyncOpenAI.close() also closes a transport it was handed
        if self._owns_client:
            await self._provider.close()

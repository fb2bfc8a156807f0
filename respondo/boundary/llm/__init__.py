"""LLM provider boundary: OpenAI-compatible client and embeddings."""

from respondo.boundary.llm.embedding_client import EmbeddingClient
from respondo.boundary.llm.provider import create_provider_client, translate_provider_error

__all__ = ["EmbeddingClient", "create_provider_client", "translate_provider_error"]

"""
Context assembly for retrieval-augmented chat.

Embeds the user's query, looks up the most similar stored chunks and joins
them into one block of text for the system prompt.

Dependencies: respondo.boundary (llm, vdb)
System role: Retrieval step of a chat turn
"""

import logging

from respondo.boundary.llm.embedding_client import EmbeddingClient
from respondo.boundary.vdb.similarity_search import SimilaritySearch
from respondo.configs.retrieval import RetrievalSettings
from respondo.core.exceptions import RespondoException

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"


class ContextAssembler:
    """Build the retrieved-context block for a query."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        similarity_search: SimilaritySearch,
        settings: RetrievalSettings | None = None,
    ) -> None:
        self._embedding_client = embedding_client
        self._similarity_search = similarity_search
        self._settings = settings or RetrievalSettings()

    async def build_context(self, query: str) -> str | None:
        """
        Retrieve context for a query.

        Retrieval is best effort: a failed query embedding is logged and
        treated like an empty result.

        Args:
            query: User message

        Returns:
            str | None: Matching chunk contents joined by a blank line in
                ranking order, or None when nothing matched
        """
        try:
            query_vector = await self._embedding_client.embed(query)
        except RespondoException as e:
            logger.warning(
                f"{__name__}:build_context - Query embedding failed: {e}",
                extra={"query_length": len(query)},
            )
            return None

        matches = await self._similarity_search.search(
            query_vector,
            threshold=self._settings.match_threshold,
            top_k=self._settings.match_count,
        )
        if not matches:
            return None

        return CONTEXT_SEPARATOR.join(match.content for match in matches)

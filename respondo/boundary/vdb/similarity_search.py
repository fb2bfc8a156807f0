"""
Vector similarity search over stored chunk embeddings.

Delegates nearest-neighbour ranking to the database function
`match_documents(query_embedding, match_threshold, match_count)` and maps its
rows to SearchMatch objects. Failures degrade to an empty result so a broken
index never fails the chat turn that asked for context.

Dependencies: sqlalchemy, pgvector
System role: Retrieval adapter for context assembly
"""

import logging
import re

from pgvector.sqlalchemy import Vector
from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import async_sessionmaker

from respondo.core.exceptions import InvalidConfiguration
from respondo.models.search import SearchMatch

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SimilaritySearch:
    """Rank stored chunks against a query vector through the match function."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        match_function: str = "match_documents",
    ) -> None:
        """
        Args:
            session_factory: Factory for short-lived read sessions
            match_function: Name of the stored ranking function

        Raises:
            InvalidConfiguration: When match_function is not a plain identifier
        """
        if not _IDENTIFIER.match(match_function):
            raise InvalidConfiguration(
                f"Invalid match function name: {match_function!r}",
                parameter="match_function",
            )
        self._session_factory = session_factory
        self._statement = text(
            "SELECT content, similarity, document_id "
            f"FROM {match_function}("
            "CAST(:query_embedding AS vector), :match_threshold, :match_count)"
        ).bindparams(bindparam("query_embedding", type_=Vector()))

    async def search(
        self,
        query_vector: list[float],
        threshold: float = 0.7,
        top_k: int = 5,
    ) -> list[SearchMatch]:
        """
        Find the chunks most similar to a query vector.

        Args:
            query_vector: Embedding of the query
            threshold: Minimum similarity (inclusive)
            top_k: Maximum number of matches

        Returns:
            list[SearchMatch]: At most top_k matches with similarity >= threshold,
                most similar first; empty on any failure
        """
        if top_k <= 0:
            return []

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    self._statement,
                    {
                        "query_embedding": query_vector,
                        "match_threshold": threshold,
                        "match_count": top_k,
                    },
                )
                rows = result.mappings().all()

            matches = [
                SearchMatch(
                    content=row["content"],
                    similarity=float(row["similarity"]),
                    document_id=str(row["document_id"]),
                )
                for row in rows
            ]
        except Exception as e:
            logger.warning(
                f"{__name__}:search - Degrading to no results after {type(e).__name__}: {e}",
                extra={"threshold": threshold, "top_k": top_k},
            )
            return []

        # The store owns ranking; these only enforce the result contract.
        matches = [m for m in matches if m.similarity >= threshold]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        matches = matches[:top_k]

        logger.info(
            f"{__name__}:search - Found {len(matches)} matches",
            extra={"threshold": threshold, "top_k": top_k},
        )
        return matches

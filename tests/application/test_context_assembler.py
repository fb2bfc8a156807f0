"""
Test suite for ContextAssembler.

System role: Verification of retrieval for chat turns
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from respondo.application.context_assembler import ContextAssembler
from respondo.core.exceptions import TransportError
from respondo.models.search import SearchMatch


@pytest.fixture
def mock_search() -> MagicMock:
    search = MagicMock()
    search.search = AsyncMock(return_value=[])
    return search


@pytest.fixture
def assembler(mock_embedding_client, mock_search, retrieval_settings) -> ContextAssembler:
    return ContextAssembler(mock_embedding_client, mock_search, settings=retrieval_settings)


class TestContextAssemblerBuildContext:
    async def test_matches_should_be_joined_in_ranking_order(
        self, assembler, mock_embedding_client, mock_search
    ) -> None:
        # Arrange
        mock_search.search.return_value = [
            SearchMatch(content="Reset via Settings.", similarity=0.93, document_id="d1"),
            SearchMatch(content="Passwords expire yearly.", similarity=0.81, document_id="d2"),
        ]

        # Act
        context = await assembler.build_context("how do I reset my password")

        # Assert
        assert context == "Reset via Settings.\n\nPasswords expire yearly."
        mock_embedding_client.embed.assert_awaited_once_with("how do I reset my password")
        mock_search.search.assert_awaited_once_with([0.1, 0.2, 0.3], threshold=0.7, top_k=5)

    async def test_no_matches_should_yield_none(self, assembler) -> None:
        assert await assembler.build_context("unrelated") is None

    async def test_embedding_failure_should_yield_none(
        self, assembler, mock_embedding_client, mock_search
    ) -> None:
        mock_embedding_client.embed.side_effect = TransportError("down")

        assert await assembler.build_context("question") is None
        mock_search.search.assert_not_called()

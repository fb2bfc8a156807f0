"""
Test suite for DocumentIngestionPipeline.

Runs the pipeline against an in-memory SQLite database with a mocked object
store and embedding client.

System role: Verification of ingestion orchestration
"""

import asyncio
import uuid

import pytest

from respondo.application.document_pipeline.ingestion_pipeline import (
    CANCELLED_MESSAGE,
    DocumentIngestionPipeline,
)
from respondo.application.document_pipeline.status_updater import DocumentStatusUpdater
from respondo.boundary.db.CRUD import chunk_crud, document_crud, embedding_crud
from respondo.boundary.db.models import DocumentStatus
from respondo.core.exceptions import StorageError, UpstreamError
from respondo.core.text_extraction import EXTRACTION_FAILED_MESSAGE


@pytest.fixture
def pipeline(
    session_factory, mock_object_store, mock_embedding_client, ingestion_settings
) -> DocumentIngestionPipeline:
    return DocumentIngestionPipeline(
        session_factory,
        mock_object_store,
        mock_embedding_client,
        settings=ingestion_settings,
    )


async def _create_document(session_factory, status: DocumentStatus = DocumentStatus.PENDING):
    async with session_factory() as session:
        document = await document_crud.create(
            session,
            name="faq.txt",
            type="txt",
            size=13,
            storage_path=f"user-1/{uuid.uuid4()}.txt",
            created_by="user-1",
            status=status,
        )
        await session.commit()
        return document


async def _load_state(session_factory, document_id):
    """Return (document, chunk_count, embedding_count) from a fresh session."""
    async with session_factory() as session:
        document = await document_crud.get_by_id(session, document_id)
        chunks = await chunk_crud.count_by_document(session, document_id)
        embeddings = await embedding_crud.count_by_document(session, document_id)
        return document, chunks, embeddings


class TestIngestionPipelineSuccess:
    async def test_should_chunk_embed_and_complete(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        # Arrange
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"a b c d e f g"

        # Act
        result = await pipeline.run(document.id)

        # Assert
        assert result.succeeded
        assert result.claimed is True
        assert (result.chunk_count, result.embedding_count) == (3, 3)

        stored, chunks, embeddings = await _load_state(session_factory, document.id)
        assert stored.status == DocumentStatus.COMPLETED
        assert stored.error_message is None
        assert (chunks, embeddings) == (3, 3)

        embedded = [call.args[0] for call in mock_embedding_client.embed.call_args_list]
        assert embedded == ["a b c", "c d e", "e f g"]
        mock_object_store.download.assert_awaited_once_with(document.storage_path)

    async def test_chunks_should_be_persisted_in_index_order(
        self, pipeline, session_factory, mock_object_store
    ) -> None:
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"a b c d e f g"

        await pipeline.run(str(document.id))

        async with session_factory() as session:
            chunks = await chunk_crud.get_by_document(session, document.id)
            assert [(c.chunk_index, c.content) for c in chunks] == [
                (0, "a b c"),
                (1, "c d e"),
                (2, "e f g"),
            ]
            for chunk in chunks:
                embedding = await embedding_crud.get_by_chunk(session, chunk.id)
                assert embedding.embedding == [0.1, 0.2, 0.3]

    async def test_empty_text_should_complete_without_chunks(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"   \n  "

        result = await pipeline.run(document.id)

        stored, chunks, _ = await _load_state(session_factory, document.id)
        assert result.status == DocumentStatus.COMPLETED
        assert stored.status == DocumentStatus.COMPLETED
        assert chunks == 0
        mock_embedding_client.embed.assert_not_called()


class TestIngestionPipelineFailures:
    async def test_extraction_failure_should_mark_error_without_rows(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        # Arrange
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"\xff\xfe\xfa"

        # Act
        result = await pipeline.run(document.id)

        # Assert
        stored, chunks, embeddings = await _load_state(session_factory, document.id)
        assert result.status == DocumentStatus.ERROR
        assert result.error_message == EXTRACTION_FAILED_MESSAGE
        assert stored.status == DocumentStatus.ERROR
        assert stored.error_message == EXTRACTION_FAILED_MESSAGE
        assert (chunks, embeddings) == (0, 0)
        mock_embedding_client.embed.assert_not_called()

    async def test_embedding_failure_should_keep_rows_written_so_far(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        # Arrange
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"a b c d e f g"
        mock_embedding_client.embed.side_effect = [
            [0.1, 0.2, 0.3],
            UpstreamError("Embedding API returned 500", status_code=500),
        ]

        # Act
        result = await pipeline.run(document.id)

        # Assert
        stored, chunks, embeddings = await _load_state(session_factory, document.id)
        assert result.status == DocumentStatus.ERROR
        assert (result.chunk_count, result.embedding_count) == (2, 1)
        assert (chunks, embeddings) == (2, 1)
        assert stored.status == DocumentStatus.ERROR
        assert stored.error_message == "Embedding API returned 500"
        assert mock_embedding_client.embed.await_count == 2

    async def test_download_failure_should_mark_error(
        self, pipeline, session_factory, mock_object_store
    ) -> None:
        document = await _create_document(session_factory)
        mock_object_store.download.side_effect = StorageError(
            "Object not found: x", operation="download"
        )

        result = await pipeline.run(document.id)

        stored, _, _ = await _load_state(session_factory, document.id)
        assert result.status == DocumentStatus.ERROR
        assert stored.error_message == "Object not found: x"

    async def test_long_error_should_be_truncated(
        self, session_factory, mock_object_store, mock_embedding_client, ingestion_settings
    ) -> None:
        settings = ingestion_settings.model_copy(update={"error_message_max_length": 10})
        pipeline = DocumentIngestionPipeline(
            session_factory, mock_object_store, mock_embedding_client, settings=settings
        )
        document = await _create_document(session_factory)
        mock_object_store.download.side_effect = RuntimeError("y" * 100)

        result = await pipeline.run(document.id)

        stored, _, _ = await _load_state(session_factory, document.id)
        assert stored.error_message == "y" * 10
        assert result.error_message == "y" * 10


class TestIngestionPipelineClaim:
    async def test_terminal_document_should_not_be_processed(
        self, pipeline, session_factory, mock_object_store
    ) -> None:
        document = await _create_document(session_factory, status=DocumentStatus.COMPLETED)

        result = await pipeline.run(document.id)

        assert result.claimed is False
        assert result.status == DocumentStatus.COMPLETED
        mock_object_store.download.assert_not_called()

    async def test_missing_document_should_report_not_found(self, pipeline) -> None:
        result = await pipeline.run(uuid.uuid4())

        assert result.claimed is False
        assert result.status is None
        assert "not found" in result.error_message


class TestIngestionPipelineConcurrentChange:
    async def test_status_changed_mid_run_should_report_stored_state(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        # Arrange
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"a b c d e f g"

        async def embed_then_fail_elsewhere(text: str) -> list[float]:
            if mock_embedding_client.embed.await_count == 1:
                async with session_factory() as other:
                    await DocumentStatusUpdater(other).mark_failed(
                        document.id, "Stopped by operator"
                    )
            return [0.1, 0.2, 0.3]

        mock_embedding_client.embed.side_effect = embed_then_fail_elsewhere

        # Act
        result = await pipeline.run(document.id)

        # Assert
        stored, _, _ = await _load_state(session_factory, document.id)
        assert stored.status == DocumentStatus.ERROR
        assert result.status == DocumentStatus.ERROR
        assert not result.succeeded
        assert result.error_message == "Stopped by operator"
        assert (result.chunk_count, result.embedding_count) == (3, 3)


class TestIngestionPipelineCancellation:
    async def test_cancel_should_mark_document_failed(
        self, pipeline, session_factory, mock_object_store, mock_embedding_client
    ) -> None:
        # Arrange
        document = await _create_document(session_factory)
        mock_object_store.download.return_value = b"a b c d e f g"
        embedding_started = asyncio.Event()

        async def hang(text: str) -> list[float]:
            embedding_started.set()
            await asyncio.Event().wait()

        mock_embedding_client.embed.side_effect = hang

        # Act
        task = asyncio.create_task(pipeline.run(document.id))
        await embedding_started.wait()
        task.cancel()

        # Assert
        with pytest.raises(asyncio.CancelledError):
            await task

        stored, chunks, embeddings = await _load_state(session_factory, document.id)
        assert stored.status == DocumentStatus.ERROR
        assert stored.error_message == CANCELLED_MESSAGE
        assert (chunks, embeddings) == (1, 0)

"""
Document ingestion pipeline.

Claims a pending document, downloads and extracts its text, splits it into
word windows and, strictly in index order, persists each chunk, embeds it and
persists the vector. Any failure records the message on the document and
leaves the rows written so far in place.

Dependencies: sqlalchemy, respondo.boundary (storage, llm, db), respondo.core
System role: Ingestion orchestration (coordinates only)
"""

import asyncio
import logging
import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from respondo.application.document_pipeline.status_updater import DocumentStatusUpdater
from respondo.boundary.db.CRUD import chunk_crud, document_crud, embedding_crud
from respondo.boundary.db.models import DocumentStatus
from respondo.boundary.llm.embedding_client import EmbeddingClient
from respondo.boundary.storage.object_store import S3ObjectStore
from respondo.configs.ingestion import IngestionSettings
from respondo.core.chunking import split_into_chunks
from respondo.core.exceptions import DocumentNotFoundError
from respondo.core.text_extraction import DocumentTextExtractor
from respondo.models.ingestion import IngestionResult
from respondo.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Ingestion cancelled"


class DocumentIngestionPipeline:
    """Orchestrate ingestion: claim -> download -> extract -> chunk -> embed+persist."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        object_store: S3ObjectStore,
        embedding_client: EmbeddingClient,
        settings: IngestionSettings | None = None,
        extractor: DocumentTextExtractor | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session_factory: Factory for the session each run uses
            object_store: Source of document bytes
            embedding_client: Embedding API client
            settings: Chunking and extraction settings (defaults if None)
            extractor: Text extractor (built from settings if None)
        """
        self._session_factory = session_factory
        self._object_store = object_store
        self._embedding_client = embedding_client
        self._settings = settings or IngestionSettings()
        self._extractor = extractor or DocumentTextExtractor(
            max_chars=self._settings.max_extracted_chars
        )

    async def run(self, document_id: UUID | str) -> IngestionResult:
        """
        Ingest one document.

        Never raises for step failures: they end the run with the document in
        ERROR and are reported in the result. Cancellation marks the document
        as failed and is re-raised.

        Args:
            document_id: Document to ingest

        Returns:
            IngestionResult: Outcome of the run
        """
        doc_id = document_id if isinstance(document_id, UUID) else UUID(str(document_id))
        start_time = time.perf_counter()
        counts = {"chunks": 0, "embeddings": 0}

        async with self._session_factory() as session:
            updater = DocumentStatusUpdater(
                session,
                error_message_max_length=self._settings.error_message_max_length,
            )

            if not await updater.claim(doc_id):
                return await self._unclaimed_result(session, doc_id, start_time)

            try:
                await self._process(session, doc_id, counts)
                completed = await updater.mark_completed(doc_id)
            except asyncio.CancelledError:
                await self._record_failure(session, updater, doc_id, CANCELLED_MESSAGE)
                raise
            except Exception as e:
                message = getattr(e, "message", None) or str(e) or type(e).__name__
                log_exception_with_context(
                    logger,
                    f"{__name__}:run - Ingestion failed",
                    e,
                    document_id=str(doc_id),
                    chunks_written=counts["chunks"],
                    embeddings_written=counts["embeddings"],
                )
                status = await self._record_failure(session, updater, doc_id, message)
                return IngestionResult(
                    document_id=str(doc_id),
                    status=status,
                    chunk_count=counts["chunks"],
                    embedding_count=counts["embeddings"],
                    error_message=message[: self._settings.error_message_max_length],
                    processing_time_ms=(time.perf_counter() - start_time) * 1000,
                )

            if not completed:
                return await self._superseded_result(session, doc_id, counts, start_time)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:run - Document ingested",
            extra={
                "document_id": str(doc_id),
                "chunk_count": counts["chunks"],
                "processing_time_ms": round(elapsed_ms, 1),
            },
        )
        return IngestionResult(
            document_id=str(doc_id),
            status=DocumentStatus.COMPLETED,
            chunk_count=counts["chunks"],
            embedding_count=counts["embeddings"],
            processing_time_ms=elapsed_ms,
        )

    async def _process(self, session: AsyncSession, doc_id: UUID, counts: dict[str, int]) -> None:
        document = await document_crud.get_by_id(session, doc_id)
        if document is None:
            raise DocumentNotFoundError(str(doc_id))

        data = await self._object_store.download(document.storage_path)
        text = await asyncio.to_thread(
            self._extractor.extract, data, document.type, str(doc_id)
        )

        chunks = split_into_chunks(
            text,
            window_size=self._settings.chunk_size,
            overlap=self._settings.chunk_overlap,
        )
        logger.info(
            f"{__name__}:_process - Text extracted",
            extra={"document_id": str(doc_id), "chars": len(text), "chunks": len(chunks)},
        )

        for index, content in enumerate(chunks):
            chunk = await chunk_crud.create(
                session,
                document_id=doc_id,
                chunk_index=index,
                content=content,
            )
            await session.commit()
            counts["chunks"] += 1

            vector = await self._embedding_client.embed(content)

            await embedding_crud.create(
                session,
                document_id=doc_id,
                chunk_id=chunk.id,
                embedding=vector,
            )
            await session.commit()
            counts["embeddings"] += 1

    async def _record_failure(
        self,
        session: AsyncSession,
        updater: DocumentStatusUpdater,
        doc_id: UUID,
        message: str,
    ) -> DocumentStatus:
        try:
            await session.rollback()
            await updater.mark_failed(doc_id, message)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_record_failure - Could not record failure",
                e,
                document_id=str(doc_id),
            )
        return DocumentStatus.ERROR

    async def _unclaimed_result(
        self,
        session: AsyncSession,
        doc_id: UUID,
        start_time: float,
    ) -> IngestionResult:
        document = await document_crud.get_by_id(session, doc_id)
        if document is None:
            status = None
            message = f"Document not found: {doc_id}"
        else:
            status = document.status
            message = f"Document is {document.status.value}, not pending"

        logger.info(
            f"{__name__}:run - Skipped unclaimable document",
            extra={"document_id": str(doc_id), "reason": message},
        )
        return IngestionResult(
            document_id=str(doc_id),
            status=status,
            claimed=False,
            error_message=message,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )

    async def _superseded_result(
        self,
        session: AsyncSession,
        doc_id: UUID,
        counts: dict[str, int],
        start_time: float,
    ) -> IngestionResult:
        """Report the stored state when the document left PROCESSING mid-run."""
        document = await document_crud.get_by_id(session, doc_id)
        if document is None:
            status = None
            message = f"Document was deleted during ingestion: {doc_id}"
        else:
            # The row was changed by another session; drop the cached copy
            await session.refresh(document)
            status = document.status
            message = document.error_message or f"Document is {status.value}, not processing"

        logger.warning(
            f"{__name__}:run - Completion skipped, document changed during ingestion",
            extra={
                "document_id": str(doc_id),
                "status": status.value if status else None,
                "chunk_count": counts["chunks"],
            },
        )
        return IngestionResult(
            document_id=str(doc_id),
            status=status,
            chunk_count=counts["chunks"],
            embedding_count=counts["embeddings"],
            error_message=message,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )

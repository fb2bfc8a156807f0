"""
Document service orchestrator.

Coordinates document upload, listing, viewing and deletion. Uploads are
stored in the object store, recorded as PENDING and handed to the ingestion
job runner without waiting for the result.

Dependencies: respondo.boundary (db, storage), respondo.application.document_pipeline
System role: Document management orchestration
"""

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from datetime import datetime
from pathlib import PurePath
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from respondo.application.document_pipeline.ingestion_job import IngestionJob, IngestionJobRunner
from respondo.boundary.db.CRUD import document_crud
from respondo.boundary.db.models import DocumentModel, DocumentStatus
from respondo.boundary.storage.object_store import S3ObjectStore
from respondo.configs.storage import StorageSettings
from respondo.core.exceptions import DocumentNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document service orchestrator.

    Handles the document lifecycle: upload, ingestion start, listing, signed
    viewing URLs, status observation and deletion.
    """

    def __init__(
        self,
        db: AsyncSession,
        object_store: S3ObjectStore,
        job_runner: IngestionJobRunner,
        settings: StorageSettings | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document metadata
            object_store: Blob storage for uploaded files
            job_runner: Starts background ingestion
            settings: Upload limits and URL expiry (defaults if None)
        """
        self.db = db
        self._object_store = object_store
        self._job_runner = job_runner
        self._settings = settings or StorageSettings()

    def _validate_upload(self, filename: str, data: bytes) -> str:
        if not data:
            raise ValidationError("File is empty", field="file")
        if len(data) > self._settings.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the {self._settings.max_upload_bytes} byte limit",
                field="file",
                details={"size": len(data)},
            )

        extension = PurePath(filename).suffix.lower().lstrip(".")
        allowed = {ext.lower() for ext in self._settings.allowed_extensions}
        if extension not in allowed:
            raise ValidationError(
                f"Unsupported file type: {extension or 'none'}",
                field="file",
                details={"allowed": sorted(allowed)},
            )
        return extension

    async def upload_document(
        self,
        user_id: str,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> tuple[DocumentModel, IngestionJob]:
        """
        Store a file and start ingesting it.

        Steps:
        1. Validate size and type
        2. Store the blob at "{user_id}/{uuid}.{ext}"
        3. Insert a PENDING document row (blob removed if this fails)
        4. Start the ingestion job

        Args:
            user_id: Uploading user
            filename: Original filename
            content_type: MIME type sent by the client
            data: File content

        Returns:
            tuple[DocumentModel, IngestionJob]: The new row and its ingestion job

        Raises:
            ValidationError: File too large, empty or of an unsupported type
            StorageError: Blob could not be stored
        """
        extension = self._validate_upload(filename, data)
        storage_path = f"{user_id}/{uuid.uuid4()}.{extension}"

        await self._object_store.upload(
            storage_path,
            data,
            content_type=content_type or "application/octet-stream",
        )

        try:
            document = await document_crud.create(
                self.db,
                name=filename,
                type=extension,
                size=len(data),
                storage_path=storage_path,
                created_by=user_id,
                status=DocumentStatus.PENDING,
            )
            await self.db.commit()
        except Exception as e:
            logger.error(
                f"{__name__}:upload_document - Insert failed, removing blob: {type(e).__name__}: {e}",
                extra={"storage_path": storage_path},
            )
            await self.db.rollback()
            await self._object_store.delete([storage_path])
            raise

        job = self._job_runner.start(document.id)
        logger.info(
            f"{__name__}:upload_document - Document uploaded",
            extra={"document_id": str(document.id), "size": len(data), "type": extension},
        )
        return document, job

    async def list_documents(self, user_id: str) -> Sequence[DocumentModel]:
        """List a user's documents, newest first."""
        return await document_crud.get_by_owner(self.db, user_id)

    async def get_document(self, document_id: UUID, user_id: str | None = None) -> DocumentModel:
        """
        Fetch one document.

        Args:
            document_id: Document UUID
            user_id: When given, documents owned by someone else are reported
                as not found

        Raises:
            DocumentNotFoundError: Missing, or not owned by user_id
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None or (user_id is not None and document.created_by != user_id):
            raise DocumentNotFoundError(str(document_id))
        return document

    async def delete_document(self, document_id: UUID, user_id: str | None = None) -> None:
        """
        Delete a document's blob, then its embeddings, chunks and row.

        A running ingestion job for the document is cancelled first.

        Raises:
            DocumentNotFoundError: Missing, or not owned by user_id
            StorageError: Blob could not be removed (rows are kept)
        """
        document = await self.get_document(document_id, user_id)

        job = self._job_runner.get(document.id)
        if job is not None:
            job.cancel()
            await job.wait()

        await self._object_store.delete([document.storage_path])
        await document_crud.delete_with_children(self.db, document.id)
        await self.db.commit()

        logger.info(
            f"{__name__}:delete_document - Document deleted",
            extra={"document_id": str(document_id)},
        )

    async def get_view_url(
        self,
        document_id: UUID,
        user_id: str | None = None,
    ) -> tuple[str, datetime]:
        """
        Create a time-limited URL for viewing a document.

        Returns:
            tuple[str, datetime]: (signed_url, expires_at)
        """
        document = await self.get_document(document_id, user_id)
        return await self._object_store.create_signed_url(
            document.storage_path,
            expires_in=self._settings.signed_url_expiry,
        )

    async def watch_status(
        self,
        document_id: UUID,
        poll_interval: float = 1.0,
        timeout: float | None = None,
    ) -> AsyncIterator[DocumentStatus]:
        """
        Yield each observed status of a document until it is terminal.

        The first value is the current status; later values are yielded only
        when the status changes.

        Args:
            document_id: Document UUID
            poll_interval: Seconds between reads
            timeout: Stop after this many seconds (None waits indefinitely)

        Raises:
            DocumentNotFoundError: Document missing or deleted while watched
            TimeoutError: Timeout reached before a terminal status
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        last: DocumentStatus | None = None

        while True:
            document = await document_crud.get_by_id(self.db, document_id)
            if document is None:
                raise DocumentNotFoundError(str(document_id))
            await self.db.refresh(document)
            # End the read transaction so the next poll sees other commits
            await self.db.commit()

            if document.status != last:
                last = document.status
                yield last
            if last.is_terminal:
                return

            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(f"Document {document_id} still {last.value}")
            await asyncio.sleep(poll_interval)

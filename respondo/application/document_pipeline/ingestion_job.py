"""
Background ingestion jobs.

Runs the ingestion pipeline as asyncio tasks and hands callers a job handle
they can poll, await or cancel. At most one job per document runs in this
process; the status claim in the database covers other processes.

Dependencies: asyncio (stdlib)
System role: Fire-and-forget ingestion scheduling for the upload flow
"""

import asyncio
import logging
from uuid import UUID

from respondo.application.document_pipeline.ingestion_pipeline import DocumentIngestionPipeline
from respondo.models.ingestion import IngestionResult
from respondo.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class IngestionJob:
    """Handle for one in-flight or finished ingestion run."""

    def __init__(self, document_id: str, task: asyncio.Task) -> None:
        self._document_id = document_id
        self._task = task

    @property
    def document_id(self) -> str:
        return self._document_id

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """
        Request cancellation. The document is marked as failed with
        "Ingestion cancelled" when the run unwinds.

        Returns:
            bool: False if the job had already finished
        """
        return self._task.cancel()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    async def wait(self) -> IngestionResult | None:
        """
        Wait for the run to finish without cancelling it if the waiter is.

        Returns:
            IngestionResult | None: The result, or None if the job was cancelled
        """
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return None
            raise

    def result(self) -> IngestionResult | None:
        """
        Result of a finished job.

        Returns:
            IngestionResult | None: None while running or when cancelled
        """
        if not self._task.done() or self._task.cancelled():
            return None
        return self._task.result()


class IngestionJobRunner:
    """Start and track ingestion jobs, one per document."""

    def __init__(self, pipeline: DocumentIngestionPipeline) -> None:
        self._pipeline = pipeline
        self._jobs: dict[str, IngestionJob] = {}

    def start(self, document_id: UUID | str) -> IngestionJob:
        """
        Start ingesting a document in the background.

        Must be called from a running event loop. If a job for the document
        is still running it is returned instead of starting another.

        Args:
            document_id: Document to ingest

        Returns:
            IngestionJob: Handle for the run
        """
        key = str(document_id)
        existing = self._jobs.get(key)
        if existing is not None and not existing.done():
            logger.info(
                f"{__name__}:start - Ingestion already running",
                extra={"document_id": key},
            )
            return existing

        task = asyncio.create_task(self._pipeline.run(key), name=f"ingest-{key}")
        job = IngestionJob(key, task)
        self._jobs[key] = job
        task.add_done_callback(lambda finished: self._on_done(key, job, finished))

        logger.info(f"{__name__}:start - Ingestion started", extra={"document_id": key})
        return job

    def _on_done(self, key: str, job: IngestionJob, task: asyncio.Task) -> None:
        if self._jobs.get(key) is job:
            del self._jobs[key]
        if task.cancelled():
            logger.info(f"{__name__}:_on_done - Ingestion cancelled", extra={"document_id": key})
            return
        exc = task.exception()
        if exc is not None:
            log_with_context(
                logger,
                logging.ERROR,
                f"{__name__}:_on_done - Ingestion task crashed",
                document_id=key,
                error_type=type(exc).__name__,
                error_msg=str(exc),
            )

    def get(self, document_id: UUID | str) -> IngestionJob | None:
        """Return the running job for a document, if any."""
        return self._jobs.get(str(document_id))

    @property
    def active_count(self) -> int:
        return len(self._jobs)

    async def shutdown(self) -> None:
        """Cancel every running job and wait for them to unwind."""
        jobs = list(self._jobs.values())
        for job in jobs:
            job.cancel()
        if jobs:
            await asyncio.gather(*(job.wait() for job in jobs), return_exceptions=True)
        logger.info(f"{__name__}:shutdown - Ingestion runner stopped", extra={"cancelled": len(jobs)})

"""
Document ingestion: status transitions, the ingestion pipeline and the
background job runner.
"""

from respondo.application.document_pipeline.ingestion_job import IngestionJob, IngestionJobRunner
from respondo.application.document_pipeline.ingestion_pipeline import DocumentIngestionPipeline
from respondo.application.document_pipeline.status_updater import DocumentStatusUpdater

__all__ = [
    "DocumentIngestionPipeline",
    "DocumentStatusUpdater",
    "IngestionJob",
    "IngestionJobRunner",
]

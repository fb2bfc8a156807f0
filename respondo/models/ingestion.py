"""
Ingestion result model.

Represents the outcome of running one document through the ingestion
pipeline.

Dependencies: pydantic
System role: Return type for DocumentIngestionPipeline.run()
"""

from pydantic import BaseModel, Field

from respondo.boundary.db.models import DocumentStatus


class IngestionResult(BaseModel):
    """Result of one ingestion run."""

    document_id: str = Field(description="Document identifier")
    status: DocumentStatus | None = Field(
        description="Document status when the run ended (None if the document is missing)"
    )
    claimed: bool = Field(
        default=True,
        description="False when another run owned the document and nothing was done",
    )
    chunk_count: int = Field(default=0, description="Chunk rows written by this run")
    embedding_count: int = Field(default=0, description="Embedding rows written by this run")
    error_message: str | None = Field(default=None, description="Recorded failure, if any")
    processing_time_ms: float = Field(default=0.0, description="Wall time of the run")

    @property
    def succeeded(self) -> bool:
        return self.status == DocumentStatus.COMPLETED

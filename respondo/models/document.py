"""
Document domain models and schemas.

Request/response schemas for document operations.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from respondo.boundary.db.models import DocumentStatus


class DocumentResponse(BaseModel):
    """Response schema for a stored document."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    type: str
    size: int
    status: DocumentStatus
    error_message: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    """Document list, newest first."""

    documents: list[DocumentResponse]
    total: int


class IngestionJobState(BaseModel):
    """Snapshot of an ingestion job handle."""

    document_id: str
    done: bool


class DocumentUploadResponse(BaseModel):
    """Response schema after a successful upload."""

    document: DocumentResponse
    job: IngestionJobState


class SignedUrlResponse(BaseModel):
    """Time-limited read URL for a document blob."""

    url: str = Field(description="Signed URL for viewing the document")
    expires_at: datetime = Field(description="When the URL stops working")

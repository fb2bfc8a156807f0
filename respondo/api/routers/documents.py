"""
Document API endpoints.

Routes:
- POST /documents - Upload a document and start ingestion
- GET /documents - List the caller's documents, newest first
- GET /documents/{id} - Get one document
- GET /documents/{id}/url - Signed viewing URL
- DELETE /documents/{id} - Delete a document and its derived rows

Dependencies: fastapi, respondo.application.services, respondo.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from respondo.api.deps import get_current_user, get_document_service
from respondo.application.services.document_service import DocumentService
from respondo.boundary.identity.identity_client import AuthenticatedUser
from respondo.core.exceptions import DocumentNotFoundError, StorageError, ValidationError
from respondo.models.document import (
    DocumentListResponse,
    DocumentResponse,
    DocumentUploadResponse,
    IngestionJobState,
    SignedUrlResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentUploadResponse:
    """
    Upload a document; ingestion continues in the background.

    Raises:
        HTTPException(400): Empty, oversized or unsupported file
        HTTPException(502): Object store rejected the upload
    """
    data = await file.read()
    try:
        document, job = await document_service.upload_document(
            user_id=user.id,
            filename=file.filename or "",
            content_type=file.content_type or "application/octet-stream",
            data=data,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StorageError as e:
        logger.error(f"{__name__}:upload_document - {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to store document")

    return DocumentUploadResponse(
        document=DocumentResponse.model_validate(document),
        job=IngestionJobState(document_id=job.document_id, done=job.done()),
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List the caller's documents, newest first."""
    documents = await document_service.list_documents(user.id)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        total=len(documents),
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Get one document with its ingestion status.

    Raises:
        HTTPException(404): Document not found
    """
    try:
        document = await document_service.get_document(document_id, user_id=user.id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/url", response_model=SignedUrlResponse)
async def get_document_url(
    document_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> SignedUrlResponse:
    """
    Create a signed URL for viewing a document.

    Raises:
        HTTPException(404): Document not found
        HTTPException(502): URL could not be signed
    """
    try:
        url, expires_at = await document_service.get_view_url(document_id, user_id=user.id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StorageError as e:
        logger.error(f"{__name__}:get_document_url - {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to sign URL")
    return SignedUrlResponse(url=url, expires_at=expires_at)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    document_service: DocumentService = Depends(get_document_service),
) -> None:
    """
    Delete a document, its blob, chunks and embeddings.

    Raises:
        HTTPException(404): Document not found
        HTTPException(502): Blob could not be removed
    """
    try:
        await document_service.delete_document(document_id, user_id=user.id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StorageError as e:
        logger.error(f"{__name__}:delete_document - {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to delete document")

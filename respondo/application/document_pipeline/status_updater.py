"""
Document status updater.

Moves documents through their lifecycle:
PENDING -> PROCESSING -> COMPLETED (or ERROR with a message)

Every transition is a conditional UPDATE guarded by the states it may leave,
committed on its own so other readers observe progress immediately. A
terminal document is never rewritten.

Dependencies: sqlalchemy
System role: Single owner of document status transitions
"""

import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from respondo.boundary.db.base import utcnow
from respondo.boundary.db.models import DocumentModel, DocumentStatus

logger = logging.getLogger(__name__)

ERROR_MESSAGE_MAX_LENGTH = 2000


class DocumentStatusUpdater:
    """Apply guarded status transitions to document rows."""

    def __init__(
        self,
        db_session: AsyncSession,
        error_message_max_length: int = ERROR_MESSAGE_MAX_LENGTH,
    ) -> None:
        """
        Initialize with database session.

        Args:
            db_session: Session the transitions are executed and committed on
            error_message_max_length: Longest error message stored
        """
        self.db = db_session
        self._error_message_max_length = error_message_max_length

    async def _transition(
        self,
        document_id: UUID,
        allowed_from: tuple[DocumentStatus, ...],
        **values,
    ) -> bool:
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == document_id)
            .where(DocumentModel.status.in_(allowed_from))
            .values(updated_at=utcnow(), **values)
            .returning(DocumentModel.id)
            .execution_options(synchronize_session="fetch")
        )
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except Exception as e:
            logger.error(f"{__name__}:_transition - {type(e).__name__}: {e}")
            await self.db.rollback()
            raise
        return row is not None

    async def claim(self, document_id: UUID) -> bool:
        """
        Mark a PENDING document as PROCESSING.

        Args:
            document_id: Document UUID

        Returns:
            bool: True if this caller claimed the document, False if it was
                missing or not pending
        """
        claimed = await self._transition(
            document_id,
            (DocumentStatus.PENDING,),
            status=DocumentStatus.PROCESSING,
            error_message=None,
        )
        logger.info(
            f"{__name__}:claim - {'Claimed' if claimed else 'Not claimable'}",
            extra={"document_id": str(document_id)},
        )
        return claimed

    async def mark_completed(self, document_id: UUID) -> bool:
        """
        Mark a PROCESSING document as COMPLETED.

        Args:
            document_id: Document UUID

        Returns:
            bool: True if the row was updated
        """
        updated = await self._transition(
            document_id,
            (DocumentStatus.PROCESSING,),
            status=DocumentStatus.COMPLETED,
            error_message=None,
        )
        if updated:
            logger.info(
                f"{__name__}:mark_completed - Document marked as COMPLETED",
                extra={"document_id": str(document_id)},
            )
        else:
            logger.warning(
                f"{__name__}:mark_completed - Document was not processing",
                extra={"document_id": str(document_id)},
            )
        return updated

    async def mark_failed(self, document_id: UUID, error_message: str) -> bool:
        """
        Mark a PENDING or PROCESSING document as ERROR.

        Args:
            document_id: Document UUID
            error_message: Human-readable error description

        Returns:
            bool: True if the row was updated
        """
        error_message = error_message or "Unknown error"
        truncated_error = error_message[: self._error_message_max_length]

        updated = await self._transition(
            document_id,
            (DocumentStatus.PENDING, DocumentStatus.PROCESSING),
            status=DocumentStatus.ERROR,
            error_message=truncated_error,
        )
        logger.info(
            f"{__name__}:mark_failed - "
            f"{'Document marked as ERROR' if updated else 'Document already terminal'}",
            extra={"document_id": str(document_id), "error_message": truncated_error},
        )
        return updated

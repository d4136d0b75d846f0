"""
Repository for attachment metadata rows.
Wraps SQLAlchemy errors into PersistenceError so callers see one failure type.
"""
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.exceptions import PersistenceError
from gateway.models.attachment import NoteAttachment


class AttachmentRepository:
    """Repository for attachment database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        note_id: str,
        user_id: str,
        filename: str,
        file_path: str,
        file_type: Optional[str],
        file_size: Optional[int]
    ) -> NoteAttachment:
        """
        Insert and commit one attachment row.

        Args:
            db: Database session
            note_id: Note the file belongs to
            user_id: Owner ID
            filename: Original filename
            file_path: Object key of the stored file
            file_type: MIME type
            file_size: Size in bytes

        Returns:
            The persisted NoteAttachment

        Raises:
            PersistenceError: If the insert fails
        """
        attachment = NoteAttachment(
            note_id=note_id,
            user_id=user_id,
            filename=filename,
            file_path=file_path,
            file_type=file_type,
            file_size=file_size
        )
        try:
            db.add(attachment)
            await db.commit()
            await db.refresh(attachment)
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError("Database insert failed", details=str(e)) from e
        return attachment

    @staticmethod
    async def get_for_user(
        db: AsyncSession,
        attachment_id: str,
        user_id: str
    ) -> Optional[NoteAttachment]:
        """Attachment by ID, only if owned by user_id."""
        try:
            result = await db.execute(
                select(NoteAttachment).where(
                    NoteAttachment.id == attachment_id,
                    NoteAttachment.user_id == user_id
                )
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Database select failed", details=str(e)) from e
        return result.scalar_one_or_none()

    @staticmethod
    async def delete_by_id(db: AsyncSession, attachment_id: str) -> None:
        """
        Delete a row by ID and commit.

        Raises:
            PersistenceError: If the delete fails
        """
        try:
            await db.execute(
                delete(NoteAttachment).where(NoteAttachment.id == attachment_id)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError("Database delete failed", details=str(e)) from e

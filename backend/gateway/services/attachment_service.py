"""
Attachment recorder: keeps attachment rows in step with the object store.

Ordering rules:
- Upload: object PUT first, row insert only after the PUT succeeded. A failed
  insert leaves an orphan object in the bucket; it is not rolled back.
- Delete: ownership checked first, object DELETE attempted, row always
  removed. The row is authoritative, so store-side failures are logged and
  swallowed.
"""
import logging
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gateway.exceptions import NotFoundError
from gateway.models.attachment import NoteAttachment
from gateway.repositories.attachment_repository import AttachmentRepository
from gateway.schemas.storage_config import StorageConfig
from gateway.storage.object_client import ObjectClient, ensure_upload_size
from gateway.utils.logging import log_attachment_uploaded, log_attachment_deleted
from gateway.utils.metrics import attachments_uploaded_total, attachments_deleted_total

logger = logging.getLogger(__name__)


def file_extension(filename: str) -> str:
    """Text after the last dot; the whole name when there is no dot."""
    return filename.rsplit(".", 1)[-1]


def build_object_key(
    user_id: str,
    note_id: str,
    filename: str,
    epoch_ms: Optional[int] = None
) -> str:
    """
    Generate the object key for an upload.

    Pattern: notes/{user_id}/{note_id}/{epoch_ms}.{ext}

    The millisecond timestamp keeps concurrent uploads to the same note
    apart; collisions are not otherwise prevented.
    """
    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return f"notes/{user_id}/{note_id}/{epoch_ms}.{file_extension(filename)}"


class AttachmentRecorder:
    """Coordinates ObjectClient calls with attachment rows."""

    def __init__(self, object_client: ObjectClient):
        self._objects = object_client

    async def record_upload(
        self,
        db: AsyncSession,
        config: StorageConfig,
        user_id: str,
        note_id: str,
        filename: str,
        content_type: Optional[str],
        data: bytes
    ) -> NoteAttachment:
        """
        Store the file and record it.

        Args:
            db: Database session
            config: Owner's storage config
            user_id: Owner ID
            note_id: Note the file is attached to
            filename: Original filename (drives the key extension)
            content_type: MIME type of the file
            data: File contents

        Returns:
            The recorded NoteAttachment

        Raises:
            ValidationError: File too large (nothing signed or sent)
            StorageError: Object PUT failed (nothing recorded)
            PersistenceError: Row insert failed (object already stored)
        """
        ensure_upload_size(len(data))

        start_time = time.time()
        key = build_object_key(user_id, note_id, filename)
        logger.info(f"Uploading attachment for note {note_id} with key: {key}")

        stored_key = await self._objects.upload(data, key, config, content_type=content_type)

        attachment = await AttachmentRepository.create(
            db,
            note_id=note_id,
            user_id=user_id,
            filename=filename,
            file_path=stored_key,
            file_type=content_type,
            file_size=len(data)
        )

        attachments_uploaded_total.inc()
        log_attachment_uploaded(
            logger,
            attachment_id=attachment.id,
            user_id=user_id,
            object_key=stored_key,
            note_id=note_id,
            file_size=len(data),
            duration_ms=(time.time() - start_time) * 1000
        )
        return attachment

    async def remove(
        self,
        db: AsyncSession,
        config: StorageConfig,
        user_id: str,
        attachment_id: str
    ) -> None:
        """
        Delete an attachment owned by user_id.

        Raises:
            NotFoundError: No such attachment for this user
            PersistenceError: Row lookup or delete failed
        """
        attachment = await AttachmentRepository.get_for_user(db, attachment_id, user_id)
        if attachment is None:
            logger.warning(f"Attachment {attachment_id} not found for user {user_id}")
            raise NotFoundError("Attachment not found")

        object_deleted = True
        try:
            await self._objects.delete(attachment.file_path, config)
        except Exception as e:
            # Row removal goes ahead regardless
            object_deleted = False
            logger.error(
                f"Object delete failed for {attachment.file_path} "
                f"(continuing with database delete): {e}"
            )

        await AttachmentRepository.delete_by_id(db, attachment.id)

        attachments_deleted_total.inc()
        log_attachment_deleted(
            logger,
            attachment_id=attachment.id,
            user_id=user_id,
            object_key=attachment.file_path,
            object_deleted=object_deleted
        )

"""
NoteAttachment model for tracking files stored in object storage.

Stores metadata about files uploaded to the user's S3-compatible bucket.
The actual file bytes live in the bucket, not the database.

Lifecycle:
1. Client posts a multipart upload -> object PUT to the bucket
2. Only after the PUT succeeds a row is inserted here (file_path = object key)
3. Client posts {attachmentId} -> object DELETE attempted, row always removed
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, Index

from gateway.models.base import Base, generate_uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoteAttachment(Base):
    """
    Attachment metadata model.

    Attributes:
        id: Unique identifier (UUID)
        note_id: Note the file is attached to
        user_id: Owner (identity provider uid)
        filename: Original filename as uploaded
        file_path: Object key in the bucket
        file_type: MIME type reported by the client
        file_size: File size in bytes
        created_at: When the row was recorded
    """
    __tablename__ = "experiment_note_attachments"

    id = Column(String, primary_key=True, default=generate_uuid)
    note_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    filename = Column(String, nullable=False)

    # Object key, e.g. notes/{user_id}/{note_id}/{epoch_ms}.png
    file_path = Column(String, nullable=False)

    file_type = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow
    )

    __table_args__ = (
        # Ownership-scoped lookups on delete
        Index('ix_note_attachments_id_user', 'id', 'user_id'),
    )

    def __repr__(self):
        return (
            f"<NoteAttachment(id={self.id}, note={self.note_id}, "
            f"user={self.user_id}, path={self.file_path})>"
        )

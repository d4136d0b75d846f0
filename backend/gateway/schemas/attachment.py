"""
Pydantic schemas for the attachment endpoint.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime


class AttachmentResponse(BaseModel):
    """Attachment record returned after a successful upload."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    note_id: str
    user_id: str
    filename: str
    file_path: str = Field(..., description="Object key in the bucket")
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: datetime


class DeleteAttachmentRequest(BaseModel):
    """JSON body of a delete request."""
    model_config = ConfigDict(populate_by_name=True)

    attachment_id: str = Field(..., alias="attachmentId", min_length=1)


class DeleteAttachmentResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every failed response."""
    error: str
    details: Optional[Any] = None

"""
Pydantic schemas for storage config and API request/response validation.
"""
from gateway.schemas.storage_config import StorageConfig
from gateway.schemas.attachment import (
    AttachmentResponse,
    DeleteAttachmentRequest,
    DeleteAttachmentResponse,
    ErrorResponse,
)

__all__ = [
    "StorageConfig",
    "AttachmentResponse",
    "DeleteAttachmentRequest",
    "DeleteAttachmentResponse",
    "ErrorResponse",
]

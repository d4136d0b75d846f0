"""
Repository layer for database operations.
"""
from gateway.repositories.attachment_repository import AttachmentRepository

__all__ = ["AttachmentRepository"]

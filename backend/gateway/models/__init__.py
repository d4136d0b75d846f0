"""
Database models package.
"""
from gateway.models.base import Base
from gateway.models.attachment import NoteAttachment
from gateway.models.user_preference import UserPreference

__all__ = [
    "Base",
    "NoteAttachment",
    "UserPreference",
]

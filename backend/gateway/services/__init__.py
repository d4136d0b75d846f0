"""
Business logic services.
"""
from gateway.services.config_resolver import ConfigResolver
from gateway.services.attachment_service import AttachmentRecorder

__all__ = [
    "ConfigResolver",
    "AttachmentRecorder",
]

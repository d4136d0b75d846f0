"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- user_id
- note_id
- attachment_id
- object_key
- duration_ms

Usage:
    from gateway.utils.logging import configure_logging, log_attachment_uploaded

    configure_logging('attachments-api', 'INFO')
    log_attachment_uploaded(logger, attachment_id='123', user_id='456', object_key='notes/...')
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (attachments-api)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    user_id: Optional[str] = None,
    note_id: Optional[str] = None,
    attachment_id: Optional[str] = None,
    object_key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        user_id: Optional user ID
        note_id: Optional note ID
        attachment_id: Optional attachment ID
        object_key: Optional object key in the bucket
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if user_id:
        extra["user_id"] = user_id
    if note_id:
        extra["note_id"] = note_id
    if attachment_id:
        extra["attachment_id"] = attachment_id
    if object_key:
        extra["object_key"] = object_key
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Attachment event functions

def log_attachment_uploaded(
    logger: logging.Logger,
    attachment_id: str,
    user_id: str,
    object_key: str,
    note_id: Optional[str] = None,
    file_size: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log a completed upload (object stored and row recorded).

    Args:
        logger: Logger instance
        attachment_id: Attachment row ID (required)
        user_id: Owner ID (required)
        object_key: Object key in the bucket (required)
        note_id: Optional note ID
        file_size: Optional size in bytes
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="attachment_uploaded",
        user_id=user_id,
        note_id=note_id,
        attachment_id=attachment_id,
        object_key=object_key,
        duration_ms=duration_ms,
        **kwargs
    )
    if file_size is not None:
        extra["file_size"] = file_size

    logger.info(f"Attachment uploaded: {attachment_id}", extra=extra)


def log_attachment_deleted(
    logger: logging.Logger,
    attachment_id: str,
    user_id: str,
    object_key: Optional[str] = None,
    object_deleted: Optional[bool] = None,
    **kwargs
):
    """
    Log removal of an attachment row.

    Args:
        logger: Logger instance
        attachment_id: Attachment row ID (required)
        user_id: Owner ID (required)
        object_key: Optional object key in the bucket
        object_deleted: Whether the store-side delete succeeded
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="attachment_deleted",
        user_id=user_id,
        attachment_id=attachment_id,
        object_key=object_key,
        **kwargs
    )
    if object_deleted is not None:
        extra["object_deleted"] = object_deleted

    logger.info(f"Attachment deleted: {attachment_id}", extra=extra)


# Object store event functions

def log_storage_request(
    logger: logging.Logger,
    operation: str,
    object_key: str,
    status: int,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log a signed request to the object store.

    Args:
        logger: Logger instance
        operation: put or delete (required)
        object_key: Object key (required)
        status: HTTP status returned by the store (required)
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_request",
        object_key=object_key,
        duration_ms=duration_ms,
        operation=operation,
        status=status,
        **kwargs
    )

    logger.info(f"Object store {operation} {object_key}: {status}", extra=extra)


def log_storage_failure(
    logger: logging.Logger,
    operation: str,
    object_key: str,
    error: str,
    status: Optional[int] = None,
    **kwargs
):
    """
    Log a failed object store call.

    Args:
        logger: Logger instance
        operation: put or delete (required)
        object_key: Object key (required)
        error: Error message (required)
        status: Optional HTTP status returned by the store
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="storage_failure",
        object_key=object_key,
        operation=operation,
        error=str(error),
        **kwargs
    )
    if status is not None:
        extra["status"] = status

    logger.error(f"Object store {operation} failed: {object_key} - {error}", extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)

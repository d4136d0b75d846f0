"""
Exception hierarchy for the attachments gateway.

Every error carries the HTTP status it maps to, so the API layer can render
any of them with a single handler.
"""
from typing import Any, Optional

from fastapi import status


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class AuthError(GatewayError):
    """Missing or invalid bearer token."""
    status_code = status.HTTP_401_UNAUTHORIZED


class ConfigError(GatewayError):
    """Object storage config missing, disabled or incomplete."""
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(GatewayError):
    """Malformed request: missing fields, oversized file, bad body."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(GatewayError):
    """Attachment row absent for the requesting user."""
    status_code = status.HTTP_404_NOT_FOUND


class PersistenceError(GatewayError):
    """Relational insert/select/delete failed."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StorageError(GatewayError):
    """
    Object store answered with an unexpected status.

    Keeps the raw response pieces around for diagnostics - providers
    return XML error documents that are the only hint about what went wrong
    (bad secret vs. bad canonicalization both show up as 403).
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        status_text: str = "",
        body: str = ""
    ) -> None:
        super().__init__(
            message,
            details={"status": status, "status_text": status_text, "body": body}
            if status is not None else None
        )
        self.status = status
        self.status_text = status_text
        self.body = body

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message}: {self.status} {self.status_text} - {self.body}"

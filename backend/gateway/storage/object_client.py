"""
Object store client issuing SigV4-signed PUT/DELETE requests over httpx.

Works with any S3-compatible provider that accepts UNSIGNED-PAYLOAD
(iDrive E2, MinIO, R2, AWS S3) using path-style addressing:

    {endpoint}/{bucket}/{key}

No retries and no timeouts: a failed call surfaces immediately and the
caller decides what to do with it.
"""
import logging
import time
from typing import Optional

import httpx

from gateway.config import settings
from gateway.exceptions import StorageError, ValidationError
from gateway.schemas.storage_config import StorageConfig
from gateway.storage.signer import sign_request
from gateway.utils.logging import log_storage_request, log_storage_failure
from gateway.utils.metrics import storage_requests_total, storage_request_duration_seconds

logger = logging.getLogger(__name__)


def upload_limit_message(limit: int) -> str:
    return f"File size exceeds {limit // (1024 * 1024)}MB limit"


def ensure_upload_size(size: Optional[int], limit: Optional[int] = None) -> None:
    """
    Reject files above the upload limit before any signing or network work.

    Raises:
        ValidationError: If size exceeds the limit (exactly the limit is allowed)
    """
    if limit is None:
        limit = settings.max_upload_bytes
    if size is not None and size > limit:
        raise ValidationError(upload_limit_message(limit))


class ObjectClient:
    """
    Signed object operations against a user's bucket.

    The StorageConfig is passed per call; the client itself only owns the
    HTTP connection pool.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            http_client: Pre-built client (takes precedence over transport)
            transport: Custom transport, e.g. httpx.MockTransport in tests
        """
        self._client = http_client or httpx.AsyncClient(transport=transport, timeout=None)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        operation: str,
        method: str,
        key: str,
        config: StorageConfig,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None
    ) -> httpx.Response:
        signed = sign_request(method, key, config, content_type=content_type)

        start_time = time.time()
        try:
            response = await self._client.request(
                method,
                signed.url,
                headers=signed.headers,
                content=content,
            )
        except httpx.HTTPError as e:
            storage_requests_total.labels(operation=operation, outcome="error").inc()
            log_storage_failure(logger, operation, key, error=str(e))
            raise StorageError(f"Object store {operation} failed: {e}") from e

        duration = time.time() - start_time
        storage_request_duration_seconds.labels(operation=operation).observe(duration)
        log_storage_request(
            logger,
            operation,
            key,
            status=response.status_code,
            duration_ms=duration * 1000,
            bucket=config.bucket_name,
        )
        return response

    async def upload(
        self,
        data: bytes,
        key: str,
        config: StorageConfig,
        content_type: Optional[str] = None
    ) -> str:
        """
        PUT raw bytes to the bucket.

        Args:
            data: File contents, sent as the request body unmodified
            key: Object key
            config: Storage config of the owning user
            content_type: MIME type sent as Content-Type

        Returns:
            The object key

        Raises:
            StorageError: On any non-2xx response or transport failure
        """
        response = await self._send("upload", "PUT", key, config, content=data, content_type=content_type)

        if not response.is_success:
            storage_requests_total.labels(operation="upload", outcome="failure").inc()
            log_storage_failure(
                logger, "upload", key,
                error=response.text,
                status=response.status_code,
            )
            raise StorageError(
                "Object store upload failed",
                status=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
            )

        storage_requests_total.labels(operation="upload", outcome="success").inc()
        return key

    async def delete(self, key: str, config: StorageConfig) -> None:
        """
        DELETE an object. A 404 counts as success (already gone).

        Raises:
            StorageError: On any other non-2xx response or transport failure
        """
        response = await self._send("delete", "DELETE", key, config)

        if response.status_code == 404:
            storage_requests_total.labels(operation="delete", outcome="not_found").inc()
            logger.info(f"Object {key} not found in bucket (already deleted)")
            return

        if not response.is_success:
            storage_requests_total.labels(operation="delete", outcome="failure").inc()
            log_storage_failure(
                logger, "delete", key,
                error=response.text,
                status=response.status_code,
            )
            raise StorageError(
                "Object store delete failed",
                status=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
            )

        storage_requests_total.labels(operation="delete", outcome="success").inc()


# Singleton instance (shares one connection pool across requests)
_object_client: Optional[ObjectClient] = None


def get_object_client() -> ObjectClient:
    """
    Get the shared ObjectClient instance.

    Used as a FastAPI dependency; override in tests to inject a client
    backed by httpx.MockTransport.
    """
    global _object_client
    if _object_client is None:
        _object_client = ObjectClient()
    return _object_client


async def close_object_client() -> None:
    """Close the shared client on shutdown."""
    global _object_client
    if _object_client is not None:
        await _object_client.aclose()
        _object_client = None

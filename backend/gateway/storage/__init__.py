"""
Storage module for per-user S3-compatible object storage.

Requests are signed locally with SigV4 (see signer.py) and sent with httpx;
the backend streams file bytes through to the user's bucket.
"""
from gateway.storage.signer import sign_request, SignedRequest, SigningContext
from gateway.storage.object_client import ObjectClient, ensure_upload_size, get_object_client

__all__ = [
    "sign_request",
    "SignedRequest",
    "SigningContext",
    "ObjectClient",
    "ensure_upload_size",
    "get_object_client",
]

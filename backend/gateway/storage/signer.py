"""
AWS Signature Version 4 request signing for S3-compatible stores.

Builds the Authorization header from scratch (no SDK) for path-style object
requests:

    canonical request -> string to sign -> derived key -> signature

Only two headers are signed (host, x-amz-date) and the payload hash is the
literal UNSIGNED-PAYLOAD, so the body is never read for signing. The
signature therefore covers the request line and headers, not the bytes.

Everything here is pure: the same inputs (including the clock) always
produce the same signature, and nothing is shared between calls.
"""
import hashlib
import hmac
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import reduce
from itertools import accumulate
from typing import Dict, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from gateway.schemas.storage_config import StorageConfig

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
SCOPE_TERMINATOR = "aws4_request"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
SIGNED_HEADERS = "host;x-amz-date"

_SCHEME_PREFIX_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class SigningContext:
    """Intermediate values of one signing computation."""
    timestamp: str
    date_stamp: str
    credential_scope: str
    canonical_request: str
    string_to_sign: str
    key_chain: Tuple[bytes, ...] = field(repr=False)  # kDate, kRegion, kService, kSigning
    signature: str = ""


@dataclass(frozen=True)
class SignedRequest:
    """URL and headers ready to hand to an HTTP client."""
    url: str
    headers: Dict[str, str]


def hmac_sha256(key: bytes, message: str) -> bytes:
    """HMAC-SHA256 of a UTF-8 message."""
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _secret_key(secret_access_key: str) -> bytes:
    return f"AWS4{secret_access_key}".encode("utf-8")


def derive_signing_key(secret_access_key: str, scope_parts: Sequence[str]) -> bytes:
    """
    Fold HMAC-SHA256 over the scope parts, starting from "AWS4" + secret.

    derive_signing_key(secret, [date_stamp, region, "s3", "aws4_request"])
    yields kSigning.
    """
    return reduce(hmac_sha256, scope_parts, _secret_key(secret_access_key))


def derive_key_chain(secret_access_key: str, scope_parts: Sequence[str]) -> Tuple[bytes, ...]:
    """Every intermediate key of derive_signing_key, secret excluded."""
    chain = accumulate(scope_parts, hmac_sha256, initial=_secret_key(secret_access_key))
    return tuple(chain)[1:]


def format_amz_timestamp(now: datetime) -> str:
    """Compact ISO-8601 in UTC: YYYYMMDDTHHMMSSZ."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def host_from_endpoint(endpoint: str) -> str:
    """
    Host (and port, if any) of the endpoint, without scheme.

    Falls back to stripping a leading http(s):// when the endpoint does not
    parse as a URL.
    """
    try:
        host = urlsplit(endpoint).netloc
    except ValueError:
        logger.warning(f"Invalid endpoint URL: {endpoint}")
        host = ""
    if not host:
        host = _SCHEME_PREFIX_RE.sub("", endpoint)
    return host


def canonical_uri(bucket_name: str, key: str) -> str:
    return f"/{bucket_name}/{key}"


def build_canonical_request(method: str, uri: str, host: str, timestamp: str) -> str:
    """
    METHOD
    /bucket/key
    <empty query string>
    host:...
    x-amz-date:...
    <blank line ending the header block>
    host;x-amz-date
    UNSIGNED-PAYLOAD
    """
    canonical_headers = f"host:{host}\nx-amz-date:{timestamp}\n"
    return "\n".join([
        method,
        uri,
        "",  # query string
        canonical_headers,
        SIGNED_HEADERS,
        UNSIGNED_PAYLOAD,
    ])


def build_string_to_sign(timestamp: str, credential_scope: str, canonical_request: str) -> str:
    return "\n".join([
        ALGORITHM,
        timestamp,
        credential_scope,
        sha256_hex(canonical_request),
    ])


def build_signing_context(
    method: str,
    key: str,
    config: StorageConfig,
    now: Optional[datetime] = None
) -> SigningContext:
    """
    Run the full SigV4 computation for one request.

    Args:
        method: HTTP method (PUT, DELETE)
        key: Object key inside the bucket
        config: Validated storage config
        now: Signing time; defaults to the current UTC time

    Returns:
        SigningContext with every intermediate value
    """
    method = method.upper()
    timestamp = format_amz_timestamp(now or datetime.now(timezone.utc))
    date_stamp = timestamp[:8]

    scope_parts = [date_stamp, config.region, SERVICE, SCOPE_TERMINATOR]
    credential_scope = "/".join(scope_parts)

    host = host_from_endpoint(config.endpoint)
    canonical_request = build_canonical_request(
        method,
        canonical_uri(config.bucket_name, key),
        host,
        timestamp,
    )
    string_to_sign = build_string_to_sign(timestamp, credential_scope, canonical_request)

    key_chain = derive_key_chain(config.secret_access_key, scope_parts)
    signature = hmac.new(key_chain[-1], string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    logger.debug(f"Canonical request for {method} {key}:\n{canonical_request}")
    logger.debug(f"String to sign for {method} {key}:\n{string_to_sign}")

    return SigningContext(
        timestamp=timestamp,
        date_stamp=date_stamp,
        credential_scope=credential_scope,
        canonical_request=canonical_request,
        string_to_sign=string_to_sign,
        key_chain=key_chain,
        signature=signature,
    )


def authorization_header(access_key_id: str, context: SigningContext) -> str:
    return (
        f"{ALGORITHM} Credential={access_key_id}/{context.credential_scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, Signature={context.signature}"
    )


def sign_request(
    method: str,
    key: str,
    config: StorageConfig,
    content_type: Optional[str] = None,
    now: Optional[datetime] = None
) -> SignedRequest:
    """
    Sign a path-style object request.

    Args:
        method: HTTP method (PUT, DELETE)
        key: Object key inside the bucket
        config: Validated storage config
        content_type: MIME type, only sent on PUT (never signed)
        now: Signing time; pass a fixed value for reproducible signatures

    Returns:
        SignedRequest with the object URL and the headers to send
    """
    method = method.upper()
    context = build_signing_context(method, key, config, now=now)

    headers = {
        "Authorization": authorization_header(config.access_key_id, context),
        "x-amz-date": context.timestamp,
    }
    if method == "PUT" and content_type:
        headers["Content-Type"] = content_type

    return SignedRequest(
        url=f"{config.endpoint}/{config.bucket_name}/{key}",
        headers=headers,
    )

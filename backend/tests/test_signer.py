"""
Tests for SigV4 request signing.
"""
import hashlib
import hmac
import re
from datetime import datetime, timezone, timedelta

import pytest

from gateway.schemas.storage_config import StorageConfig
from gateway.storage.signer import (
    build_signing_context,
    derive_key_chain,
    derive_signing_key,
    format_amz_timestamp,
    host_from_endpoint,
    sign_request,
)

from conftest import storage_section

FIXED_NOW = datetime(2024, 3, 9, 14, 5, 7, tzinfo=timezone.utc)
KEY = "notes/u1/n1/123.png"

AUTH_RE = re.compile(
    r"^AWS4-HMAC-SHA256 Credential=AKIAEXAMPLE/\d{8}/us-east-1/s3/aws4_request, "
    r"SignedHeaders=host;x-amz-date, Signature=[0-9a-f]{64}$"
)


@pytest.fixture
def config() -> StorageConfig:
    return StorageConfig.model_validate(storage_section())


class TestKeyDerivation:
    """Tests for the HMAC key-derivation chain."""

    def test_matches_published_example(self):
        """AWS documentation example for deriving a signing key."""
        key = derive_signing_key(
            "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
            ["20120215", "us-east-1", "iam", "aws4_request"]
        )
        assert key.hex() == "f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d"

    def test_fold_order(self):
        """Each step is keyed by the previous result."""
        k_date = hmac.new(b"AWS4secret", b"20240309", hashlib.sha256).digest()
        k_region = hmac.new(k_date, b"us-east-1", hashlib.sha256).digest()
        k_service = hmac.new(k_region, b"s3", hashlib.sha256).digest()
        k_signing = hmac.new(k_service, b"aws4_request", hashlib.sha256).digest()

        chain = derive_key_chain("secret", ["20240309", "us-east-1", "s3", "aws4_request"])

        assert chain == (k_date, k_region, k_service, k_signing)
        assert derive_signing_key("secret", ["20240309", "us-east-1", "s3", "aws4_request"]) == k_signing


class TestTimestamps:
    """Tests for x-amz-date formatting."""

    def test_compact_iso8601(self):
        assert format_amz_timestamp(FIXED_NOW) == "20240309T140507Z"

    def test_naive_datetime_treated_as_utc(self):
        assert format_amz_timestamp(datetime(2024, 3, 9, 14, 5, 7)) == "20240309T140507Z"

    def test_other_timezone_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert format_amz_timestamp(datetime(2024, 3, 10, 1, 0, 0, tzinfo=plus_two)) == "20240309T230000Z"


class TestHostFromEndpoint:
    """Tests for host extraction."""

    def test_https_endpoint(self):
        assert host_from_endpoint("https://s3.example.com") == "s3.example.com"

    def test_keeps_port(self):
        assert host_from_endpoint("http://minio:9000") == "minio:9000"

    def test_scheme_less_fallback(self):
        assert host_from_endpoint("s3.example.com") == "s3.example.com"


class TestCanonicalRequest:
    """Tests for the canonical request and string to sign."""

    def test_canonical_request_layout(self, config: StorageConfig):
        context = build_signing_context("PUT", KEY, config, now=FIXED_NOW)

        assert context.canonical_request == (
            "PUT\n"
            "/bkt/notes/u1/n1/123.png\n"
            "\n"
            "host:s3.example.com\n"
            "x-amz-date:20240309T140507Z\n"
            "\n"
            "host;x-amz-date\n"
            "UNSIGNED-PAYLOAD"
        )

    def test_string_to_sign_layout(self, config: StorageConfig):
        context = build_signing_context("DELETE", KEY, config, now=FIXED_NOW)
        request_hash = hashlib.sha256(context.canonical_request.encode()).hexdigest()

        assert context.string_to_sign == (
            "AWS4-HMAC-SHA256\n"
            "20240309T140507Z\n"
            "20240309/us-east-1/s3/aws4_request\n"
            f"{request_hash}"
        )
        assert context.date_stamp == "20240309"

    def test_signature_is_hmac_of_string_to_sign(self, config: StorageConfig):
        context = build_signing_context("PUT", KEY, config, now=FIXED_NOW)
        signing_key = derive_signing_key("secret", ["20240309", "us-east-1", "s3", "aws4_request"])
        expected = hmac.new(signing_key, context.string_to_sign.encode(), hashlib.sha256).hexdigest()

        assert context.signature == expected

    def test_method_is_uppercased(self, config: StorageConfig):
        context = build_signing_context("put", KEY, config, now=FIXED_NOW)
        assert context.canonical_request.startswith("PUT\n")

    def test_secret_not_in_repr(self, config: StorageConfig):
        context = build_signing_context("PUT", KEY, config, now=FIXED_NOW)
        assert "key_chain" not in repr(context)


class TestSignRequest:
    """Tests for the signed URL and headers."""

    def test_authorization_header_format(self, config: StorageConfig):
        signed = sign_request("PUT", KEY, config, content_type="image/png")
        assert AUTH_RE.match(signed.headers["Authorization"])

    def test_deterministic_for_fixed_time(self, config: StorageConfig):
        first = sign_request("PUT", KEY, config, content_type="image/png", now=FIXED_NOW)
        second = sign_request("PUT", KEY, config, content_type="image/png", now=FIXED_NOW)
        assert first == second
        assert first.headers["Authorization"].endswith(
            build_signing_context("PUT", KEY, config, now=FIXED_NOW).signature
        )

    def test_changes_with_time(self, config: StorageConfig):
        first = sign_request("PUT", KEY, config, now=FIXED_NOW)
        later = sign_request("PUT", KEY, config, now=FIXED_NOW + timedelta(seconds=1))
        assert first.headers["Authorization"] != later.headers["Authorization"]

    def test_changes_with_secret(self, config: StorageConfig):
        other = StorageConfig.model_validate(storage_section(secret_access_key="other"))
        assert (
            sign_request("PUT", KEY, config, now=FIXED_NOW).headers["Authorization"]
            != sign_request("PUT", KEY, other, now=FIXED_NOW).headers["Authorization"]
        )

    def test_url_and_date_header(self, config: StorageConfig):
        signed = sign_request("DELETE", KEY, config, now=FIXED_NOW)
        assert signed.url == "https://s3.example.com/bkt/notes/u1/n1/123.png"
        assert signed.headers["x-amz-date"] == "20240309T140507Z"

    def test_content_type_only_on_put(self, config: StorageConfig):
        put = sign_request("PUT", KEY, config, content_type="image/png", now=FIXED_NOW)
        delete = sign_request("DELETE", KEY, config, content_type="image/png", now=FIXED_NOW)

        assert put.headers["Content-Type"] == "image/png"
        assert "Content-Type" not in delete.headers

    def test_content_type_not_signed(self, config: StorageConfig):
        with_type = sign_request("PUT", KEY, config, content_type="image/png", now=FIXED_NOW)
        without_type = sign_request("PUT", KEY, config, now=FIXED_NOW)
        assert with_type.headers["Authorization"] == without_type.headers["Authorization"]

    def test_scheme_less_endpoint_normalized_before_url(self):
        config = StorageConfig.model_validate(storage_section(endpoint="s3.example.com"))
        signed = sign_request("PUT", KEY, config, now=FIXED_NOW)
        assert signed.url == "https://s3.example.com/bkt/notes/u1/n1/123.png"

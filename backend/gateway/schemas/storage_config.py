"""
Typed view of the per-user object storage credentials.

The preference store holds a loosely-typed JSON document; this module is
the only place that document is parsed. Everything downstream receives a
validated, immutable StorageConfig.
"""
import re
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from gateway.config import settings

# Key the storage sub-object lives under in user_preferences.preferences
PREFERENCES_KEY = "s3Config"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")


def normalize_endpoint(endpoint: str, default_scheme: Optional[str] = None) -> str:
    """
    Ensure the endpoint carries a URL scheme.

    "s3.example.com" -> "https://s3.example.com". A trailing slash is dropped
    so "{endpoint}/{bucket}/{key}" never produces a double slash.
    """
    endpoint = endpoint.strip()
    if not endpoint:
        return endpoint
    if not _SCHEME_RE.match(endpoint):
        endpoint = f"{default_scheme or settings.default_endpoint_scheme}{endpoint}"
    return endpoint.rstrip("/")


class StorageConfig(BaseModel):
    """S3-compatible credentials for one user. Built fresh for every request."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""
    bucket_name: str = ""
    endpoint: str = ""
    enabled: bool = False

    @field_validator("endpoint")
    @classmethod
    def _normalize_endpoint(cls, value: str) -> str:
        return normalize_endpoint(value)

    @model_validator(mode="after")
    def _require_fields_when_enabled(self) -> "StorageConfig":
        if not self.enabled:
            return self
        missing = [
            name for name in (
                "access_key_id",
                "secret_access_key",
                "region",
                "bucket_name",
                "endpoint",
            )
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"Missing required storage fields: {', '.join(missing)}")
        return self

    @classmethod
    def from_preferences(cls, preferences: Any) -> "StorageConfig":
        """
        Parse the storage sub-object out of a preferences document.

        Raises:
            ValueError: If the document or its storage section is not a mapping
            pydantic.ValidationError: If a field has the wrong type or is blank
        """
        if not isinstance(preferences, Mapping):
            raise ValueError("Preferences document is not an object")
        section = preferences.get(PREFERENCES_KEY)
        if not isinstance(section, Mapping):
            raise ValueError(f"Preferences have no '{PREFERENCES_KEY}' section")
        # None means "not set" - let the field default (blank) apply
        values = {k: v for k, v in section.items() if v is not None}
        return cls.model_validate(values)

    def __repr__(self) -> str:
        # Never leak the secret into logs
        return (
            f"StorageConfig(access_key_id={self.access_key_id!r}, region={self.region!r}, "
            f"bucket_name={self.bucket_name!r}, endpoint={self.endpoint!r}, enabled={self.enabled})"
        )

    __str__ = __repr__

"""Storage configuration for notepix.

:class:`StorageConfig` is a frozen dataclass that captures the endpoint,
credential and bucket a storage adapter talks to, plus the transport knobs.
An adapter is built from one config and never mutates it; changing settings
means building a new adapter.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

DEFAULT_BUCKET = "obsidian-images"
"""Bucket name used when the host has not stored one yet."""

# Host settings keys, camelCase as persisted by the editor plugin, mapped to
# config field names.
_SETTINGS_KEYS: dict[str, str] = {
    "supabaseUrl": "url",
    "supabaseAnonKey": "key",
    "bucketName": "bucket",
    "publicBaseUrl": "public_base_url",
    "timeoutSeconds": "timeout_seconds",
}


@dataclass(frozen=True)
class StorageConfig:
    """Complete configuration for a storage adapter.

    Parameters
    ----------
    url:
        Project endpoint, e.g. ``https://xyz.supabase.co``.  Trailing slashes
        are ignored.
    key:
        Bearer credential (anon or service key).  Never logged.
    bucket:
        Name of the bucket that receives uploads.
    public_base_url:
        Optional custom domain serving the same ``/storage/v1/object/public/``
        suffix.  When unset, public URLs are built from *url*.
    timeout_seconds:
        HTTP timeout for every storage call.  There is no retry, so this is
        the upper bound on how long one operation waits on the network.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    cache_control:
        ``cache-control`` max-age (seconds, as a string) stored with uploads.
    metrics:
        Optional :class:`~notepix.observability.MetricsHook` implementation.
    debug_dump_payload:
        Write a redacted request/response dump to *stderr* for every call.
    """

    url: str = ""

    key: str = ""

    bucket: str = DEFAULT_BUCKET

    public_base_url: str | None = None

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    cache_control: str = "3600"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.url:
            parsed = urlparse(self.url)
            if parsed.scheme == "http" and parsed.hostname not in (
                "localhost",
                "127.0.0.1",
                "::1",
            ):
                raise ValueError(
                    f"url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                    "Use HTTPS to protect the storage key, or target localhost for testing."
                )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @property
    def endpoint(self) -> str:
        """The project URL without trailing slashes."""
        return self.url.strip().rstrip("/")

    @property
    def is_configured(self) -> bool:
        """True when endpoint, credential and bucket are all non-empty.

        Hosts use this to decide whether paste/drop handlers are active.
        """
        return bool(self.url.strip() and self.key.strip() and self.bucket.strip())

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> StorageConfig:
        """Build a config from a host's persisted settings mapping.

        Accepts the camelCase keys the editor plugin stores as well as the
        field names themselves.  Unknown keys are ignored and string values
        are stripped.
        """
        values: dict[str, Any] = {}
        field_names = {f.name for f in dataclasses.fields(cls)}
        for raw_key, value in settings.items():
            name = _SETTINGS_KEYS.get(raw_key, raw_key)
            if name not in field_names:
                continue
            values[name] = value.strip() if isinstance(value, str) else value
        if not values.get("bucket"):
            values["bucket"] = DEFAULT_BUCKET
        return cls(**values)

    def __repr__(self) -> str:
        """Mask the key to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "key":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"key='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"StorageConfig({', '.join(parts)})"

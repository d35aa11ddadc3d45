"""Credential and payload redaction for safe logging.

Applied to every debug dump before it is written anywhere:

* values under sensitive keys (``authorization``, ``apikey``, ``key``, ...)
  are masked, showing at most the last four characters of the credential;
* the credential itself is scrubbed from every string in the tree;
* ``bytes`` values are replaced with ``<binary:N_bytes>``.
"""

from __future__ import annotations

import re
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "authorization",
    "apikey",
    "api_key",
    "api-key",
    "key",
    "token",
    "secret",
    "password",
    "cookie",
})

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")


def _mask(value: str, secret: str | None) -> str:
    if secret and secret in value:
        suffix = secret[-4:] if len(secret) >= 8 else "****"
        value = value.replace(secret, f"<redacted:...{suffix}>")
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, secret: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secret) for item in value]
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        return _mask(value, secret)
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask(value, secret) if isinstance(value, str) else "<redacted>"
            if isinstance(value, str) and result[key] == value:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a copy of *payload* with credentials and binary data removed.

    The original *payload* is never mutated.

    >>> redact({"apikey": "abc", "body": b"123"})
    {'apikey': '<redacted>', 'body': '<binary:3_bytes>'}
    """
    return _redact_dict(payload, secret)

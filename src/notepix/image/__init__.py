"""Image validation and filename normalization.

Exports
-------
validate_mime_type / validate_size
    Raise a validation error for unsupported or oversized payloads.
mime_to_extension
    Map a supported MIME type to its file extension.
normalize_name
    Build the URL-safe ``<slug>.<ext>`` name for an upload.
"""

from .normalize import normalize_name, normalize_stem
from .validate import (
    MAX_FILE_SIZE,
    MIME_TO_EXTENSION,
    SUPPORTED_MIME_TYPES,
    is_supported_mime_type,
    mime_to_extension,
    validate_mime_type,
    validate_size,
)

__all__ = [
    "MAX_FILE_SIZE",
    "MIME_TO_EXTENSION",
    "SUPPORTED_MIME_TYPES",
    "is_supported_mime_type",
    "mime_to_extension",
    "normalize_name",
    "normalize_stem",
    "validate_mime_type",
    "validate_size",
]

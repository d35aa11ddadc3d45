"""Image validation: MIME type and size checks.

Runs before any upload work is done, so a rejected payload never reaches
the network.
"""

from __future__ import annotations

from notepix.errors import NotepixImageSizeError, NotepixImageTypeError

SUPPORTED_MIME_TYPES: tuple[str, ...] = (
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
)
"""MIME types accepted for upload, in the order they are reported."""

MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MiB
"""Largest accepted payload in bytes (inclusive)."""

MIME_TO_EXTENSION: dict[str, str] = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}


def is_supported_mime_type(mime_type: object) -> bool:
    """Return True if *mime_type* is one of :data:`SUPPORTED_MIME_TYPES`."""
    return isinstance(mime_type, str) and mime_type in MIME_TO_EXTENSION


def mime_to_extension(mime_type: str) -> str:
    """Return the file extension (without dot) for a supported MIME type.

    Raises
    ------
    NotepixImageTypeError
        If *mime_type* is not supported.
    """
    validate_mime_type(mime_type)
    return MIME_TO_EXTENSION[mime_type]


def validate_mime_type(mime_type: str) -> None:
    """Raise :class:`NotepixImageTypeError` for an unsupported MIME type."""
    if not is_supported_mime_type(mime_type):
        raise NotepixImageTypeError(
            message=(
                f"Unsupported MIME type: {mime_type}. "
                f"Supported types: {', '.join(SUPPORTED_MIME_TYPES)}"
            ),
            context={
                "mime_type": mime_type,
                "supported": list(SUPPORTED_MIME_TYPES),
            },
        )


def validate_size(size: int, max_bytes: int = MAX_FILE_SIZE) -> None:
    """Raise :class:`NotepixImageSizeError` unless ``0 <= size <= max_bytes``."""
    if size < 0:
        raise NotepixImageSizeError(
            message=f"File size {size} bytes is negative",
            context={"size_bytes": size, "max_bytes": max_bytes},
        )
    if size > max_bytes:
        raise NotepixImageSizeError(
            message=(
                f"File size {size} bytes exceeds maximum allowed size of "
                f"{max_bytes} bytes ({max_bytes // (1024 * 1024)}MB)"
            ),
            context={"size_bytes": size, "max_bytes": max_bytes},
        )

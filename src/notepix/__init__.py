"""notepix -- upload pasted note images to Supabase Storage.

Public re-exports
-----------------

* **Client:** :class:`NotepixClient`
* **Configuration:** :class:`StorageConfig`
* **Errors:** Every :class:`NotepixError` subclass and :class:`ErrorCode`
* **Models:** :class:`ImageFile`, :data:`UploadResult` and its variants,
  :class:`OperationResult`
* **Capabilities:** :class:`StorageService`, :class:`PathGenerator` and
  their default implementations
* **Use cases:** :class:`UploadImageUseCase`, :class:`DeleteImageUseCase`

Usage::

    from notepix import NotepixClient

    async with NotepixClient(url="https://xyz.supabase.co", key="...", bucket="notes") as client:
        result = await client.upload("My Photo.PNG", "image/png", data)
        print(result.to_markdown() if result.is_success else result.error)
"""

from __future__ import annotations

# ── Client ─────────────────────────────────────────────────────────────
from notepix.client import NotepixClient

# ── Configuration ───────────────────────────────────────────────────────
from notepix.config import DEFAULT_BUCKET, StorageConfig

# ── Errors ──────────────────────────────────────────────────────────────
from notepix.errors import (
    ErrorCode,
    NotepixAuthError,
    NotepixConflictError,
    NotepixError,
    NotepixImageSizeError,
    NotepixImageTypeError,
    NotepixNetworkError,
    NotepixNotFoundError,
    NotepixPermissionError,
    NotepixQuotaError,
    NotepixStorageError,
    NotepixUploadError,
    NotepixValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notepix.models import (
    ImageFile,
    OperationResult,
    UploadFailure,
    UploadResult,
    UploadSuccess,
)

# ── Capabilities ────────────────────────────────────────────────────────
from notepix.paths import DateBasedPathGenerator, FlatPathGenerator, PathGenerator
from notepix.storage import StorageService, SupabaseStorageService

# ── Use cases ───────────────────────────────────────────────────────────
from notepix.usecases import DeleteImageUseCase, UploadImageUseCase

__all__ = [
    "DEFAULT_BUCKET",
    "DateBasedPathGenerator",
    "DeleteImageUseCase",
    "ErrorCode",
    "FlatPathGenerator",
    "ImageFile",
    "NotepixAuthError",
    "NotepixClient",
    "NotepixConflictError",
    "NotepixError",
    "NotepixImageSizeError",
    "NotepixImageTypeError",
    "NotepixNetworkError",
    "NotepixNotFoundError",
    "NotepixPermissionError",
    "NotepixQuotaError",
    "NotepixStorageError",
    "NotepixUploadError",
    "NotepixValidationError",
    "OperationResult",
    "PathGenerator",
    "StorageConfig",
    "StorageService",
    "SupabaseStorageService",
    "UploadFailure",
    "UploadImageUseCase",
    "UploadResult",
    "UploadSuccess",
]

__version__ = "0.1.0"

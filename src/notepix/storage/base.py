"""The storage capability the upload and delete use cases depend on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from notepix.models import ImageFile, OperationResult, UploadResult


@runtime_checkable
class StorageService(Protocol):
    """A remote object store that holds uploaded images.

    Implementations must report every backend failure as data: ``upload``
    returns an :class:`~notepix.models.UploadFailure`, ``delete`` and
    ``test_connection`` return an unsuccessful
    :class:`~notepix.models.OperationResult`.  None of the methods raise.
    """

    async def upload(self, file: ImageFile, path: str) -> UploadResult:
        """Store *file* at *path* without overwriting, returning its public URL."""
        ...

    async def delete(self, path: str) -> OperationResult:
        """Remove the object at *path*."""
        ...

    async def test_connection(self) -> OperationResult:
        """Check credentials and bucket existence without writing anything."""
        ...

    def extract_path_from_url(self, url: str) -> str | None:
        """Return the object path for a URL this store issued, else ``None``."""
        ...

    def is_supabase_url(self, url: str) -> bool:
        """Cheap ownership test used before offering a delete action."""
        ...

"""notepix.storage -- storage capability and the Supabase adapter.

* :mod:`.base` -- the :class:`StorageService` protocol.
* :mod:`.transport` -- async HTTP transport with typed errors.
* :mod:`.supabase` -- :class:`SupabaseStorageService`.
"""

from __future__ import annotations

from .base import StorageService
from .supabase import PUBLIC_OBJECT_MARKER, SupabaseStorageService
from .transport import StorageTransport

__all__ = [
    "PUBLIC_OBJECT_MARKER",
    "StorageService",
    "StorageTransport",
    "SupabaseStorageService",
]

"""High-level async client wiring storage, paths and use cases together.

:class:`NotepixClient` is what an editor integration holds on to.  Build
one from the host's settings; when the settings change, close it and build
a new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from notepix.config import StorageConfig
from notepix.models import OperationResult, UploadResult
from notepix.observability import get_logger
from notepix.paths import DateBasedPathGenerator, PathGenerator
from notepix.storage import StorageService, SupabaseStorageService
from notepix.usecases import DeleteImageUseCase, UploadImageUseCase

log = get_logger("notepix.client")


class NotepixClient:
    """Upload pasted images and delete them again.

    Parameters
    ----------
    config:
        Storage settings.  If omitted, built from ``**kwargs``.
    storage:
        Optional :class:`StorageService` to use instead of
        :class:`SupabaseStorageService`.
    path_generator:
        Optional :class:`PathGenerator`; defaults to
        :class:`DateBasedPathGenerator`.
    **kwargs:
        Forwarded to :class:`StorageConfig` when *config* is omitted.

    Usage::

        async with NotepixClient(url="https://xyz.supabase.co", key="...", bucket="notes") as client:
            result = await client.upload("cat.png", "image/png", data)
            if result.is_success:
                editor.insert(result.to_markdown())
    """

    def __init__(
        self,
        config: StorageConfig | None = None,
        *,
        storage: StorageService | None = None,
        path_generator: PathGenerator | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = config if config is not None else StorageConfig(**kwargs)
        self._storage: StorageService = (
            storage if storage is not None else SupabaseStorageService(self._config)
        )
        self._uploads = UploadImageUseCase(
            self._storage,
            path_generator if path_generator is not None else DateBasedPathGenerator(),
        )
        self._deletes = DeleteImageUseCase(self._storage)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], **kwargs: Any) -> NotepixClient:
        """Build a client from the host's persisted settings mapping."""
        return cls(StorageConfig.from_settings(settings), **kwargs)

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def storage(self) -> StorageService:
        return self._storage

    @property
    def is_configured(self) -> bool:
        """True when endpoint, key and bucket are all set."""
        return self._config.is_configured

    async def upload(
        self,
        name: str,
        mime_type: str,
        data: bytes | bytearray | memoryview,
        size: int | None = None,
    ) -> UploadResult:
        """Validate and upload one image; see :meth:`UploadImageUseCase.execute_from_raw`."""
        return await self._uploads.execute_from_raw(name, mime_type, data, size)

    async def upload_many(
        self,
        files: Iterable[Mapping[str, Any]],
        max_concurrent: int = 4,
    ) -> list[UploadResult]:
        return await self._uploads.execute_many(files, max_concurrent=max_concurrent)

    def is_owned_url(self, url: str) -> bool:
        """True if *url* is an image this client's storage can delete."""
        return self._deletes.can_delete(url)

    async def delete(self, url: str) -> OperationResult:
        """Delete the image behind a public URL this storage issued."""
        return await self._deletes.execute(url)

    async def test_connection(self) -> OperationResult:
        if not self.is_configured:
            return OperationResult(False, "Storage is not configured")
        return await self._storage.test_connection()

    async def close(self) -> None:
        """Close the storage's HTTP resources, if it holds any."""
        aclose = getattr(self._storage, "aclose", None)
        if aclose is not None:
            await aclose()
        log.debug("Client closed", extra={"extra_fields": {"bucket": self._config.bucket}})

    async def __aenter__(self) -> NotepixClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

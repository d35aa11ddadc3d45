"""Use cases: upload an image, delete an uploaded image.

Both depend only on the :class:`~notepix.storage.StorageService` and
:class:`~notepix.paths.PathGenerator` protocols, so any backend or path
layout can be plugged in, including test doubles.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from notepix.errors import NotepixError, NotepixValidationError
from notepix.models import ImageFile, OperationResult, UploadFailure, UploadResult
from notepix.observability import get_logger
from notepix.paths import PathGenerator
from notepix.storage.base import StorageService

log = get_logger("notepix.usecases")


class UploadImageUseCase:
    """Validate an image, pick its storage path, and upload it.

    Parameters
    ----------
    storage:
        Where the bytes go.
    path_generator:
        Decides the object key for each upload.
    """

    def __init__(self, storage: StorageService, path_generator: PathGenerator) -> None:
        self._storage = storage
        self._path_generator = path_generator

    async def execute(self, image: ImageFile) -> UploadResult:
        """Upload an already validated :class:`ImageFile`."""
        path = self._path_generator.generate(image.normalized_name)
        log.debug(
            "Upload path generated",
            extra={"extra_fields": {"op": "upload", "name": image.name, "path": path}},
        )
        return await self._storage.upload(image, path)

    async def execute_from_raw(
        self,
        name: str,
        mime_type: str,
        data: bytes | bytearray | memoryview,
        size: int | None = None,
    ) -> UploadResult:
        """Validate raw host input, then upload it.

        Validation errors come back as :class:`UploadFailure` instead of
        being raised, so callers handle one kind of failure no matter where
        it came from.
        """
        try:
            image = ImageFile.create(name=name, mime_type=mime_type, data=data, size=size)
            return await self.execute(image)
        except NotepixValidationError as exc:
            log.info(
                "Image rejected",
                extra={
                    "extra_fields": {
                        "op": "upload",
                        "name": name,
                        "code": getattr(exc.code, "value", exc.code),
                        "error": exc.message,
                    }
                },
            )
            return UploadFailure(exc.message)
        except NotepixError as exc:
            log.warning(
                "Upload raised instead of reporting",
                extra={"extra_fields": {"op": "upload", "name": name, "error": exc.message}},
            )
            return UploadFailure(exc.message)

    async def execute_many(
        self,
        files: Iterable[Mapping[str, Any]],
        max_concurrent: int = 4,
    ) -> list[UploadResult]:
        """Upload several raw files concurrently.

        Each item is a mapping of :meth:`execute_from_raw` keyword
        arguments.  Results come back in input order, and one failed upload
        does not affect the others.

        Parameters
        ----------
        files:
            Raw file descriptions (``name``, ``mime_type``, ``data`` and
            optionally ``size``).
        max_concurrent:
            Maximum number of uploads in flight at once.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        semaphore = asyncio.Semaphore(max_concurrent)

        async def _one(index: int, raw: Mapping[str, Any]) -> UploadResult:
            async with semaphore:
                try:
                    return await self.execute_from_raw(**raw)
                except Exception as exc:
                    log.warning(
                        "Batch item failed unexpectedly",
                        extra={"extra_fields": {"op": "upload", "index": index, "error": repr(exc)}},
                        exc_info=True,
                    )
                    return UploadFailure(str(exc) or type(exc).__name__)

        return list(await asyncio.gather(*(_one(i, raw) for i, raw in enumerate(files))))


class DeleteImageUseCase:
    """Delete an image given the URL from its markdown reference.

    URLs the storage does not recognise as its own are refused without any
    network call.
    """

    def __init__(self, storage: StorageService) -> None:
        self._storage = storage

    def can_delete(self, url: str) -> bool:
        """Return True if *url* points at an object this storage issued."""
        return (
            self._storage.is_supabase_url(url)
            and self._storage.extract_path_from_url(url) is not None
        )

    async def execute(self, url: str) -> OperationResult:
        path = self._storage.extract_path_from_url(url) if self._storage.is_supabase_url(url) else None
        if path is None:
            log.info(
                "Delete refused for foreign URL",
                extra={"extra_fields": {"op": "delete", "url": url}},
            )
            return OperationResult(False, f"Not an image uploaded to this storage: {url}")
        return await self._storage.delete(path)

"""Supabase Storage adapter.

Wire contract used here (all paths relative to ``/storage/v1``):

* ``POST /object/{bucket}/{path}`` with ``x-upsert: false`` -- upload.
* ``DELETE /object/{bucket}`` with ``{"prefixes": [path]}`` -- delete.
* ``GET /bucket/{bucket}`` -- bucket existence check.
* ``{endpoint}/storage/v1/object/public/{bucket}/{path}`` -- public URL.
"""

from __future__ import annotations

from urllib.parse import quote, unquote, urlsplit

import httpx

from notepix.config import StorageConfig
from notepix.errors import NotepixError, NotepixNotFoundError
from notepix.models import ImageFile, OperationResult, UploadFailure, UploadResult, UploadSuccess
from notepix.observability import NoopMetricsHook, get_logger
from notepix.observability.metrics import DELETE_TOTAL, UPLOAD_FAILURE_TOTAL, UPLOAD_SUCCESS_TOTAL

from .transport import StorageTransport

log = get_logger("notepix.storage")

PUBLIC_OBJECT_MARKER = "/storage/v1/object/public/"


# Backend messages that mean the bucket is missing, whatever the status.
_BUCKET_MISSING_HINTS = ("not found", "does not exist")


def _quote_path(path: str) -> str:
    return quote(path.lstrip("/"), safe="/")


def _describe(exc: Exception) -> str:
    if isinstance(exc, NotepixError):
        return exc.message
    return str(exc) or type(exc).__name__


class SupabaseStorageService:
    """:class:`~notepix.storage.StorageService` backed by Supabase Storage.

    Parameters
    ----------
    config:
        Endpoint, key and bucket.  Read once; build a new service to change
        them.
    transport:
        Optional pre-built :class:`StorageTransport`, mainly for tests.

    Usage::

        async with SupabaseStorageService(StorageConfig(url=..., key=..., bucket="notes")) as storage:
            result = await storage.upload(image, "2026/10/19/abc.png")
    """

    def __init__(
        self,
        config: StorageConfig,
        transport: StorageTransport | None = None,
    ) -> None:
        self._config = config
        self._bucket = config.bucket
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._transport = transport or StorageTransport(config)

    @property
    def bucket(self) -> str:
        """The bucket every upload and delete targets."""
        return self._bucket

    @property
    def config(self) -> StorageConfig:
        """The :class:`StorageConfig` this service was built from."""
        return self._config

    # -- URLs --------------------------------------------------------------

    def public_url(self, path: str) -> str:
        """Return the publicly resolvable URL for *path*."""
        base = (self._config.public_base_url or self._config.endpoint).rstrip("/")
        return f"{base}{PUBLIC_OBJECT_MARKER}{quote(self._bucket, safe='')}/{_quote_path(path)}"

    def _public_prefixes(self) -> list[tuple[str, str, str]]:
        """``(scheme, netloc, path prefix)`` of every base this service issues URLs under."""
        prefixes = []
        for base in (self._config.public_base_url, self._config.endpoint):
            if not base or not base.strip():
                continue
            try:
                parts = urlsplit(base.strip().rstrip("/"))
            except ValueError:
                continue
            if not parts.scheme or not parts.netloc:
                continue
            prefixes.append(
                (parts.scheme.lower(), parts.netloc.lower(), parts.path + PUBLIC_OBJECT_MARKER)
            )
        return prefixes

    def _split_public_url(self, url: object) -> tuple[str, str] | None:
        """Return ``(bucket, path)`` for a public object URL under one of our bases."""
        if not isinstance(url, str):
            return None
        try:
            parts = urlsplit(url.strip())
            scheme, netloc = parts.scheme.lower(), parts.netloc.lower()
        except ValueError:
            return None
        for base_scheme, base_netloc, prefix in self._public_prefixes():
            if scheme != base_scheme or netloc != base_netloc:
                continue
            if not parts.path.startswith(prefix):
                continue
            bucket, sep, path = parts.path[len(prefix):].partition("/")
            if bucket and sep and path:
                return unquote(bucket), unquote(path)
        return None

    def extract_path_from_url(self, url: str) -> str | None:
        """Return the object path encoded in a public URL of this bucket.

        The URL must be on the configured endpoint or ``public_base_url``
        (same scheme and host) and name this bucket.  Anything else gives
        ``None``; delete actions must never act on URLs this service did
        not issue.
        """
        found = self._split_public_url(url)
        if found is None or found[0] != self._bucket:
            return None
        return found[1]

    def is_supabase_url(self, url: str) -> bool:
        """Return True if *url* is a public object URL on this project's hosts."""
        return self._split_public_url(url) is not None

    # -- operations ----------------------------------------------------------

    async def upload(self, file: ImageFile, path: str) -> UploadResult:
        """Upload *file* to *path*; never overwrites and never raises."""
        log.debug(
            "Uploading image",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "bucket": self._bucket,
                    "path": path,
                    "mime_type": file.mime_type,
                    "bytes": file.size,
                }
            },
        )
        try:
            await self._transport.request(
                "POST",
                f"/object/{quote(self._bucket, safe='')}/{_quote_path(path)}",
                op="upload",
                content=file.data,
                headers={
                    "Content-Type": file.mime_type,
                    "x-upsert": "false",
                    "cache-control": f"max-age={self._config.cache_control}",
                },
            )
        except (NotepixError, httpx.HTTPError) as exc:
            code = getattr(exc, "code", "UNKNOWN")
            code = getattr(code, "value", code)
            self._metrics.increment(UPLOAD_FAILURE_TOTAL, tags={"code": code})
            log.warning(
                "Upload failed",
                extra={
                    "extra_fields": {
                        "op": "upload",
                        "bucket": self._bucket,
                        "path": path,
                        "code": code,
                        "error": _describe(exc),
                    }
                },
            )
            return UploadFailure(f"Upload failed: {_describe(exc)}")

        self._metrics.increment(UPLOAD_SUCCESS_TOTAL)
        url = self.public_url(path)
        log.info(
            "Upload complete",
            extra={"extra_fields": {"op": "upload", "path": path, "url": url}},
        )
        return UploadSuccess(url)

    async def delete(self, path: str) -> OperationResult:
        """Delete the object at *path*; failures are returned, not raised."""
        try:
            removed = await self._transport.request(
                "DELETE",
                f"/object/{quote(self._bucket, safe='')}",
                op="delete",
                json={"prefixes": [path]},
            )
            # The API answers 200 with an empty list when nothing matched.
            if isinstance(removed, list) and not removed:
                raise NotepixNotFoundError(
                    message=f"object not found: {path}",
                    context={"path": path},
                )
        except (NotepixError, httpx.HTTPError) as exc:
            self._metrics.increment(DELETE_TOTAL, tags={"outcome": "failure"})
            log.warning(
                "Delete failed",
                extra={
                    "extra_fields": {
                        "op": "delete",
                        "bucket": self._bucket,
                        "path": path,
                        "error": _describe(exc),
                    }
                },
            )
            return OperationResult(False, f"Delete failed: {_describe(exc)}")

        self._metrics.increment(DELETE_TOTAL, tags={"outcome": "success"})
        log.info("Image deleted", extra={"extra_fields": {"op": "delete", "path": path}})
        return OperationResult(True, "Image deleted successfully")

    async def test_connection(self) -> OperationResult:
        """Check that the key is accepted and the bucket exists.

        Uses ``GET /bucket/{bucket}``, which reads bucket metadata and
        writes nothing.
        """
        try:
            await self._transport.request(
                "GET",
                f"/bucket/{quote(self._bucket, safe='')}",
                op="test_connection",
            )
        except NotepixNotFoundError:
            return OperationResult(False, f'Bucket "{self._bucket}" not found')
        except (NotepixError, httpx.HTTPError) as exc:
            message = _describe(exc)
            if any(hint in message.lower() for hint in _BUCKET_MISSING_HINTS):
                return OperationResult(False, f'Bucket "{self._bucket}" not found')
            log.warning(
                "Connection test failed",
                extra={"extra_fields": {"op": "test_connection", "error": message}},
            )
            return OperationResult(False, f"Connection failed: {message}")
        return OperationResult(True, "Connection successful")

    # -- lifecycle -----------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> SupabaseStorageService:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()


"""Async HTTP transport for the Supabase Storage REST API.

Each request goes through the same lifecycle:

1. Send the request with the ``Authorization`` and ``apikey`` headers.
2. On ``2xx`` -- return the parsed JSON body (``{}`` when empty).
3. On any other status -- raise the matching typed error.
4. On a transport failure (timeout, DNS, refused) -- raise
   :class:`NotepixNetworkError`.

There is no retry: a failed call is reported once.  The only bound on how
long a call waits is ``StorageConfig.timeout_seconds``.
"""

from __future__ import annotations

import json as _json
import sys
from typing import Any

import httpx

from notepix.config import StorageConfig
from notepix.errors import (
    NotepixAuthError,
    NotepixConflictError,
    NotepixNetworkError,
    NotepixNotFoundError,
    NotepixPermissionError,
    NotepixQuotaError,
    NotepixStorageError,
)
from notepix.observability import NoopMetricsHook, get_logger
from notepix.observability.metrics import REQUEST_DURATION_MS, REQUESTS_TOTAL, measure

log = get_logger("notepix.transport")

STORAGE_API_PREFIX = "/storage/v1"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _effective_status(response: httpx.Response, body: Any) -> int:
    """Return the status the backend meant.

    The storage API frequently answers ``400`` with the real status code
    (``"404"``, ``"409"``, ...) in the body's ``statusCode`` field.
    """
    if isinstance(body, dict):
        raw = body.get("statusCode")
        try:
            if raw is not None:
                return int(raw)
        except (TypeError, ValueError):
            pass
    return response.status_code


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the appropriate :class:`NotepixError` subclass for a non-2xx
    response.
    """
    body = _parse_body(response)
    status = _effective_status(response, body)

    if isinstance(body, dict):
        backend_message = body.get("message") or body.get("error") or response.text[:500]
        backend_error = body.get("error", "")
    else:
        backend_message = response.text[:500]
        backend_error = ""
    if not backend_message:
        backend_message = response.reason_phrase or f"HTTP {response.status_code}"

    context: dict[str, Any] = {
        "status_code": status,
        "backend_error": backend_error,
        "operation": f"{method} {path}",
    }

    if status == 401:
        raise NotepixAuthError(message=backend_message, context=context)
    if status == 403:
        raise NotepixPermissionError(message=backend_message, context=context)
    if status == 404:
        raise NotepixNotFoundError(message=backend_message, context={**context, "path": path})
    if status == 409:
        raise NotepixConflictError(message=backend_message, context={**context, "path": path})
    if status in (413, 429):
        raise NotepixQuotaError(message=backend_message, context=context)

    raise NotepixStorageError(
        message=backend_message,
        context={**context, "body": body},
    )


def _dump_payload(
    method: str,
    url: str,
    request_headers: dict[str, str],
    response_status: int,
    response_body: Any,
    secret: str,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from notepix.utils.redact import redact

    dump: dict[str, Any] = {
        "method": method,
        "url": url,
        "request_headers": request_headers,
        "response_status": response_status,
        "response_body": response_body,
    }
    print(
        _json.dumps(redact(dump, secret), indent=2, default=str),
        file=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class StorageTransport:
    """Asynchronous HTTP transport bound to one project endpoint.

    Parameters
    ----------
    config:
        A :class:`StorageConfig`; its endpoint, key, timeout and proxy are
        read once, here.
    client:
        Optional pre-built ``httpx.AsyncClient`` (tests pass one backed by
        ``httpx.MockTransport``).  When given, the caller's base URL and
        headers are used as-is.
    """

    def __init__(
        self,
        config: StorageConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        if client is None:
            client = httpx.AsyncClient(
                base_url=config.endpoint + STORAGE_API_PREFIX,
                headers={
                    "Authorization": f"Bearer {config.key}",
                    "apikey": config.key,
                },
                timeout=httpx.Timeout(config.timeout_seconds),
                proxy=config.http_proxy,
            )
        self._client = client

    async def request(self, method: str, path: str, *, op: str, **kwargs: Any) -> Any:
        """Execute one HTTP request against the storage API.

        Parameters
        ----------
        method:
            HTTP method.
        path:
            Path relative to ``/storage/v1`` (e.g. ``/bucket/images``).
        op:
            Logical operation name used in logs and metric tags.
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request`.

        Returns
        -------
        Any
            Parsed JSON response body, or ``{}`` for an empty body.

        Raises
        ------
        NotepixAuthError, NotepixPermissionError, NotepixNotFoundError,
        NotepixConflictError, NotepixQuotaError, NotepixStorageError
            On a non-2xx response.
        NotepixNetworkError
            On a transport-level failure.
        """
        try:
            with measure() as elapsed:
                response = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            self._metrics.increment(
                REQUESTS_TOTAL,
                tags={"method": method, "op": op, "status": "error"},
            )
            log.warning(
                "Storage request network error",
                extra={
                    "extra_fields": {
                        "op": op,
                        "method": method,
                        "path": path,
                        "error": str(exc),
                    }
                },
            )
            raise NotepixNetworkError(
                message=f"Network error: {exc}" if str(exc) else f"Network error: {type(exc).__name__}",
                context={"url": path},
                cause=exc,
            ) from exc

        status_tag = str(response.status_code)
        self._metrics.increment(
            REQUESTS_TOTAL,
            tags={"method": method, "op": op, "status": status_tag},
        )
        self._metrics.timing(
            REQUEST_DURATION_MS,
            elapsed["ms"],
            tags={"method": method, "op": op, "status": status_tag},
        )

        if self._config.debug_dump_payload:
            _dump_payload(
                method,
                str(response.request.url),
                dict(response.request.headers),
                response.status_code,
                _parse_body(response) or response.text[:1000],
                self._config.key,
            )

        if 200 <= response.status_code < 300:
            if not response.content:
                return {}
            return _parse_body(response)

        log.info(
            "Storage request rejected",
            extra={
                "extra_fields": {
                    "op": op,
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                }
            },
        )
        _raise_for_status(response, method, path)

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> StorageTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

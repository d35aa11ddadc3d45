"""Pluggable counters and timings for storage calls.

Hosts pass any object with ``increment`` and ``timing`` methods as
``StorageConfig(metrics=...)``; otherwise :class:`NoopMetricsHook` is used.
The names emitted are the module constants below.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

REQUESTS_TOTAL = "notepix.requests_total"  # method, op, status
REQUEST_DURATION_MS = "notepix.request_duration_ms"  # method, op, status
UPLOAD_SUCCESS_TOTAL = "notepix.upload_success_total"
UPLOAD_FAILURE_TOTAL = "notepix.upload_failure_total"  # code
DELETE_TOTAL = "notepix.delete_total"  # outcome


@runtime_checkable
class MetricsHook(Protocol):
    """What notepix needs from a metrics backend."""

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        ...


class NoopMetricsHook:
    """Discards everything."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        pass


@contextmanager
def measure() -> Iterator[dict[str, float]]:
    """Time the ``with`` body and put the elapsed milliseconds in the yielded dict.

    The caller reports the value itself, once it knows the tags (the HTTP
    status is only known after the request returns)::

        with measure() as elapsed:
            response = await send()
        hook.timing(REQUEST_DURATION_MS, elapsed["ms"], tags=...)
    """
    elapsed = {"ms": 0.0}
    start = time.monotonic()
    try:
        yield elapsed
    finally:
        elapsed["ms"] = (time.monotonic() - start) * 1000

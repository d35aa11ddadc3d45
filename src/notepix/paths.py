"""Storage path generation.

A path is the backend-relative object key an upload is written to.  The
upload use case depends only on the :class:`PathGenerator` protocol, so a
different layout (flat, per-user, content-addressed) can be swapped in
without touching the storage adapter.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class PathGenerator(Protocol):
    """Anything that turns a filename into a fresh storage path."""

    def generate(self, filename: str) -> str:
        """Return a storage path for *filename*.

        Every call must return a path distinct from earlier calls, even for
        the same *filename*.
        """
        ...


def extract_extension(filename: str) -> str | None:
    """Return the lowercased text after the last dot, or ``None``.

    ``None`` is returned when there is no dot or the dot is the final
    character.
    """
    _, dot, suffix = filename.rpartition(".")
    if not dot or not suffix:
        return None
    return suffix.lower()


def _default_id() -> str:
    return str(uuid.uuid4())


def _with_extension(stem: str, filename: str) -> str:
    extension = extract_extension(filename)
    if extension:
        return f"{stem}.{extension}"
    return stem


class DateBasedPathGenerator:
    """Place each file under ``YYYY/MM/DD/<uuid4>.<ext>``.

    The extension is taken from *filename*, not from any MIME type; callers
    pass :attr:`ImageFile.normalized_name`, whose extension already matches
    the validated content type.

    Parameters
    ----------
    clock:
        Returns the current time.  Defaults to local :meth:`datetime.now`;
        inject a fixed clock in tests.
    id_factory:
        Returns the unique component.  Defaults to a random UUID4 string.

    Example
    -------
    >>> gen = DateBasedPathGenerator(clock=lambda: datetime(2024, 6, 15))
    >>> gen.generate("cat.png")  # doctest: +SKIP
    '2024/06/15/a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d.png'
    """

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._clock = clock or datetime.now
        self._id_factory = id_factory or _default_id

    def generate(self, filename: str) -> str:
        now = self._clock()
        date_path = f"{now.year:04d}/{now.month:02d}/{now.day:02d}"
        return f"{date_path}/{_with_extension(self._id_factory(), filename)}"


class FlatPathGenerator:
    """Place every file directly under *prefix* as ``<uuid4>.<ext>``."""

    def __init__(
        self,
        prefix: str = "",
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._prefix = prefix.strip("/")
        self._id_factory = id_factory or _default_id

    def generate(self, filename: str) -> str:
        name = _with_extension(self._id_factory(), filename)
        if self._prefix:
            return f"{self._prefix}/{name}"
        return name

"""Public data models for notepix.

* :class:`ImageFile` -- a validated image payload.  Holding one means the
  MIME type and size checks have already passed.
* :class:`UploadSuccess` / :class:`UploadFailure` -- the two variants of
  :data:`UploadResult`, the outcome of every upload.
* :class:`OperationResult` -- outcome of delete and connection checks.

All types are frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

from notepix.errors import NotepixUploadError
from notepix.image.normalize import normalize_name
from notepix.image.validate import (
    MIME_TO_EXTENSION,
    validate_mime_type,
    validate_size,
)

# ---------------------------------------------------------------------------
# Image file
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageFile:
    """An image payload that has passed validation.

    Build instances with :meth:`create`.  The constructor runs the same
    checks in ``__post_init__`` so there is no way to obtain an instance
    holding an unsupported MIME type or an oversized payload.

    Attributes
    ----------
    name:
        Original filename as reported by the host.
    mime_type:
        One of :data:`notepix.image.SUPPORTED_MIME_TYPES`.
    data:
        Raw bytes, treated as opaque.
    size:
        Declared byte count, checked against :data:`notepix.image.MAX_FILE_SIZE`.
    extension:
        Derived from *mime_type* (``image/jpeg`` gives ``jpg``).
    normalized_name:
        URL-safe ``<slug>.<extension>``.
    """

    name: str
    mime_type: str
    data: bytes = field(repr=False)
    size: int
    extension: str = field(init=False)
    normalized_name: str = field(init=False)

    def __post_init__(self) -> None:
        validate_mime_type(self.mime_type)
        validate_size(self.size)

        # Frozen dataclass: derived fields go through object.__setattr__.
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        extension = MIME_TO_EXTENSION[self.mime_type]
        object.__setattr__(self, "extension", extension)
        object.__setattr__(self, "normalized_name", normalize_name(self.name, extension))

    @classmethod
    def create(
        cls,
        name: str,
        mime_type: str,
        data: bytes | bytearray | memoryview,
        size: int | None = None,
    ) -> ImageFile:
        """Validate raw input and return an :class:`ImageFile`.

        Parameters
        ----------
        name:
            Original filename.
        mime_type:
            MIME type reported by the host.
        data:
            Raw file bytes.
        size:
            Declared byte count.  Defaults to ``len(data)``.

        Raises
        ------
        NotepixImageTypeError
            If *mime_type* is not supported.
        NotepixImageSizeError
            If *size* exceeds 10 MiB.
        """
        if size is None:
            size = len(data)
        return cls(name=name, mime_type=mime_type, data=data, size=size)


# ---------------------------------------------------------------------------
# Upload outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadSuccess:
    """The image was stored and is reachable at *url*."""

    url: str

    is_success: ClassVar[Literal[True]] = True

    def to_markdown(self, alt_text: str = "") -> str:
        """Return ``![alt_text](url)``."""
        return f"![{alt_text}]({self.url})"


@dataclass(frozen=True)
class UploadFailure:
    """The upload did not happen; *error* is a user-facing message."""

    error: str

    is_success: ClassVar[Literal[False]] = False

    def to_markdown(self, alt_text: str = "") -> str:
        raise NotepixUploadError(
            message="Cannot generate markdown for failed upload",
            context={"error": self.error},
        )


UploadResult = Union[UploadSuccess, UploadFailure]
"""Outcome of an upload: exactly one of :class:`UploadSuccess` or
:class:`UploadFailure`."""


# ---------------------------------------------------------------------------
# Other operations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OperationResult:
    """Outcome of a delete or connection test."""

    success: bool
    message: str

"""URL-safe filename normalization."""

from __future__ import annotations

import re

FALLBACK_STEM = "image"

_EXTENSION_RE = re.compile(r"\.[^.]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-+")


def normalize_stem(name: str) -> str:
    """Reduce *name* (without its extension) to ``[a-z0-9-]+``.

    Returns :data:`FALLBACK_STEM` when nothing survives, e.g. for names made
    only of non-Latin characters.
    """
    stem = _EXTENSION_RE.sub("", name)
    stem = stem.lower()
    stem = _WHITESPACE_RE.sub("-", stem)
    stem = _DISALLOWED_RE.sub("", stem)
    stem = _HYPHEN_RUN_RE.sub("-", stem).strip("-")
    return stem or FALLBACK_STEM


def normalize_name(name: str, extension: str) -> str:
    """Return ``<slug>.<extension>`` for an original filename.

    The extension always comes from the caller (the validated MIME type),
    never from *name*, so a misnamed ``photo.gif`` holding PNG bytes comes
    out as ``photo.png``.

    >>> normalize_name("My Photo.PNG", "png")
    'my-photo.png'
    >>> normalize_name("스크린샷.png", "png")
    'image.png'
    """
    return f"{normalize_stem(name)}.{extension}"

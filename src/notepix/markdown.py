"""Markdown text helpers for editor integrations.

The host editor inserts :func:`upload_placeholder` at the cursor while an
upload is running, then swaps it for the outcome with
:func:`resolve_placeholder`.  :func:`find_image_urls` and
:func:`image_url_at` locate image references for the delete action.
"""

from __future__ import annotations

import re

import mistune

from notepix.models import UploadResult, UploadSuccess

# Inline image span on a single line: ![alt](url "optional title")
_IMAGE_SPAN_RE = re.compile(
    r"!\[[^\]\n]*\]\(\s*<?(?P<url>[^)\s>]+)>?(?:\s+\"[^\"\n]*\")?\s*\)"
)

_parser = mistune.create_markdown(renderer="ast", plugins=["strikethrough", "table"])


def upload_placeholder(name: str) -> str:
    """Text shown in the note while *name* is uploading."""
    return f"![Uploading {name}...]()"


def failure_comment(error: str) -> str:
    """HTML comment left in the note when an upload fails."""
    # "--" would terminate the comment early.
    return f"<!-- Upload failed: {error.replace('--', '- -')} -->"


def render_result(result: UploadResult, alt_text: str = "") -> str:
    """Return the markdown image for a success, or the failure comment."""
    if isinstance(result, UploadSuccess):
        return result.to_markdown(alt_text)
    return failure_comment(result.error)


def resolve_placeholder(
    content: str,
    placeholder: str,
    result: UploadResult,
    alt_text: str = "",
) -> str:
    """Replace the first occurrence of *placeholder* in *content*.

    If the placeholder is gone (the user deleted it mid-upload) *content*
    is returned unchanged.
    """
    return content.replace(placeholder, render_result(result, alt_text), 1)


def _walk_images(tokens: list[dict], urls: list[str]) -> None:
    for token in tokens:
        if token.get("type") == "image":
            url = token.get("attrs", {}).get("url")
            if url:
                urls.append(url)
        children = token.get("children")
        if isinstance(children, list):
            _walk_images(children, urls)


def find_image_urls(markdown: str) -> list[str]:
    """Return every image URL in *markdown*, in document order.

    Images nested inside links, emphasis, lists, quotes and tables are
    included; images inside code spans and fenced code are not.
    """
    tokens = _parser(markdown)
    if isinstance(tokens, str):
        return []
    urls: list[str] = []
    _walk_images(tokens, urls)
    return urls


def image_url_at(line: str, column: int) -> str | None:
    """Return the URL of the inline image whose ``![..](..)`` span covers
    *column* on *line*, or ``None``.
    """
    for match in _IMAGE_SPAN_RE.finditer(line):
        if match.start() <= column < match.end():
            return match.group("url")
    return None

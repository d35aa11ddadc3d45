"""Utility helpers shared across notepix."""

from __future__ import annotations

from .redact import redact

__all__ = ["redact"]

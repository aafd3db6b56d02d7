"""Shared utilities for the metadata, trailer, and server packages."""

from __future__ import annotations

from .cache import TTLCache
from .errors import MalformedResponseError, MoodFlixError, TransportError
from .validation import require_positive

__all__ = [
    "MalformedResponseError",
    "MoodFlixError",
    "TTLCache",
    "TransportError",
    "require_positive",
]

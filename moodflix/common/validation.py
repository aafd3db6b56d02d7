"""Validation helpers shared across packages."""

from __future__ import annotations

import re

_IMDB_ID_RE = re.compile(r"^tt\d{7,}$")


def require_positive(value: int, *, name: str) -> int:
    """Return *value* if it is a positive integer, otherwise raise an error."""

    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def require_non_negative(value: float, *, name: str) -> float:
    """Return *value* if it is zero or greater, otherwise raise ``ValueError``."""

    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def is_imdb_id(value: object) -> bool:
    """Return ``True`` when *value* looks like an IMDb title id (``tt`` + digits)."""

    return isinstance(value, str) and bool(_IMDB_ID_RE.match(value))


__all__ = ["is_imdb_id", "require_non_negative", "require_positive"]

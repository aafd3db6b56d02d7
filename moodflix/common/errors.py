"""Exceptions raised by the upstream API clients."""

from __future__ import annotations


class MoodFlixError(Exception):
    """Base class for errors raised by :mod:`moodflix`."""


class TransportError(MoodFlixError):
    """An upstream request failed or returned a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class MalformedResponseError(TransportError):
    """An upstream response body could not be parsed into the expected shape."""


__all__ = ["MalformedResponseError", "MoodFlixError", "TransportError"]

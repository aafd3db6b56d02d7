"""Trailer lookup through the YouTube Data API search endpoint."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from .common.cache import CacheStats, TTLCache
from .common.errors import TransportError
from .common.types import (
    FallbackReason,
    TrailerResult,
    YouTubeSearchItem,
    YouTubeSearchResponse,
)
from .config import DEFAULT_YOUTUBE_SEARCH_URL

LOGGER = logging.getLogger(__name__)

MAX_CANDIDATES = 5
AGGREGATOR_CHANNEL_MARKERS: tuple[str, ...] = ("movieclips", "trailers")


def trailer_cache_key(title: str, year: int | str | None) -> str:
    return f"{title}|{year or ''}"


def build_trailer_query(title: str, year: int | str | None) -> str:
    return f"{title} official trailer {year or ''}".strip()


def is_preferred_candidate(item: YouTubeSearchItem) -> bool:
    """Return ``True`` for uploads that look like an official or curated trailer."""

    video_title = item.snippet.title.lower()
    channel = item.snippet.channelTitle.lower()
    if "official" in video_title and "trailer" in video_title:
        return True
    if "official" in channel:
        return True
    return any(marker in channel for marker in AGGREGATOR_CHANNEL_MARKERS)


def select_best_match(candidates: Sequence[YouTubeSearchItem]) -> YouTubeSearchItem:
    """Pick the first preferred candidate in upstream order, else the first one."""

    if not candidates:
        raise ValueError("candidates must not be empty")
    for item in candidates:
        if is_preferred_candidate(item):
            return item
    return candidates[0]


class TrailerResolver:
    """Resolve a movie title to a YouTube video id.

    :meth:`resolve_trailer` never raises: every failure becomes a fallback
    :class:`TrailerResult` the caller can turn into a manual search link.
    Matches and "no results" answers are cached; quota and transient errors
    are not.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_key: str | None,
        cache: TTLCache[TrailerResult],
        search_url: str = DEFAULT_YOUTUBE_SEARCH_URL,
        logger: logging.Logger | None = None,
    ) -> None:
        self._http_client = http_client
        self._api_key = api_key
        self._cache = cache
        self._search_url = search_url
        self._logger = logger or LOGGER

    @property
    def cache(self) -> TTLCache[TrailerResult]:
        return self._cache

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def resolve_trailer(
        self, title: str, year: int | str | None = None
    ) -> TrailerResult:
        if not title or not title.strip():
            return TrailerResult.unavailable(
                FallbackReason.INVALID_REQUEST, error="Missing required parameter: title"
            )

        key = trailer_cache_key(title, year)
        cached = self._cache.get(key)
        if cached is not None:
            self._logger.debug("Trailer cache hit for %s", title)
            return cached.model_copy(update={"cached": True})

        if not self._api_key:
            self._logger.info("YouTube API key not configured, using fallback")
            return TrailerResult.unavailable(FallbackReason.UNCONFIGURED)

        query = build_trailer_query(title, year)
        try:
            return await self._search(key, query, title)
        except Exception as exc:
            self._logger.exception("Error fetching YouTube trailer for %s", query)
            return TrailerResult.unavailable(
                FallbackReason.TRANSIENT_ERROR, error=str(exc)
            )

    async def _search(self, key: str, query: str, title: str) -> TrailerResult:
        params = {
            "part": "snippet",
            "maxResults": MAX_CANDIDATES,
            "type": "video",
            "q": query,
            "key": self._api_key,
        }
        self._logger.info("Fetching trailer for: %s", query)
        try:
            resp = await self._http_client.get(self._search_url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"YouTube request failed: {exc}", url=self._search_url
            ) from exc

        if resp.status_code == 403:
            self._logger.error("YouTube API quota exceeded or invalid key")
            return TrailerResult.unavailable(
                FallbackReason.QUOTA_EXCEEDED, error="quota_exceeded"
            )
        if not resp.is_success:
            raise TransportError(
                f"YouTube API error: {resp.status_code}",
                status_code=resp.status_code,
                url=self._search_url,
            )

        payload = YouTubeSearchResponse.model_validate(resp.json())
        if not payload.items:
            self._logger.info("No YouTube results found for: %s", query)
            result = TrailerResult.unavailable(FallbackReason.NO_RESULTS)
            self._cache.set(key, result)
            return result

        result = TrailerResult.from_item(select_best_match(payload.items))
        self._cache.set(key, result)
        self._logger.info(
            "Fetched trailer for %s: videoId=%s", title, result.video_id
        )
        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()


__all__ = [
    "AGGREGATOR_CHANNEL_MARKERS",
    "MAX_CANDIDATES",
    "TrailerResolver",
    "build_trailer_query",
    "is_preferred_candidate",
    "select_best_match",
    "trailer_cache_key",
]

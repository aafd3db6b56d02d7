"""Composition root wiring settings, caches, and upstream clients together."""

from __future__ import annotations

import logging
import random
from typing import Optional

import httpx

from . import moods
from .batching import resolve_many
from .common.cache import CacheStats, Clock, TTLCache
from .common.errors import TransportError
from .common.types import MovieRecord, SearchResult, TrailerResult
from .config import Settings
from .metadata import MetadataClient, PlotVariant
from .trailers import TrailerResolver

LOGGER = logging.getLogger(__name__)

STATUS_PROBE_ID = "tt0111161"


class MoodFlixService:
    """Own the process-wide caches and the clients that read through them."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self._settings.http_timeout
        )
        cache_kwargs: dict[str, object] = {
            "max_entries": self._settings.cache_max_entries
        }
        if clock is not None:
            cache_kwargs["clock"] = clock
        self.metadata_cache: TTLCache[MovieRecord] = TTLCache(
            self._settings.metadata_cache_ttl, **cache_kwargs
        )
        self.trailer_cache: TTLCache[TrailerResult] = TTLCache(
            self._settings.trailer_cache_ttl, **cache_kwargs
        )
        self.metadata = MetadataClient(
            self._http_client,
            api_key=self._settings.omdb_api_key,
            cache=self.metadata_cache,
            base_url=self._settings.omdb_base_url,
        )
        self.trailers = TrailerResolver(
            self._http_client,
            api_key=self._settings.youtube_api_key,
            cache=self.trailer_cache,
            search_url=self._settings.youtube_search_url,
        )
        self._rng = rng

    @property
    def settings(self) -> Settings:
        return self._settings

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def search_by_title(self, query: str, page: int = 1) -> SearchResult:
        return await self.metadata.search_by_title(query, page)

    async def lookup_by_id(
        self, imdb_id: str, plot: PlotVariant = "short"
    ) -> Optional[MovieRecord]:
        return await self.metadata.lookup_by_id(imdb_id, plot)

    async def lookup_by_title(
        self, title: str, year: int | str | None = None
    ) -> Optional[MovieRecord]:
        return await self.metadata.lookup_by_title(title, year)

    async def resolve_trailer(
        self, title: str, year: int | str | None = None
    ) -> TrailerResult:
        return await self.trailers.resolve_trailer(title, year)

    async def resolve_many(
        self,
        ids: list[str],
        *,
        batch_size: int | None = None,
        delay: float | None = None,
        plot: PlotVariant = "short",
    ) -> list[MovieRecord]:
        return await resolve_many(
            self.metadata,
            ids,
            batch_size=self._settings.batch_size if batch_size is None else batch_size,
            delay=self._settings.batch_delay if delay is None else delay,
            plot=plot,
        )

    async def prefetch_mood(
        self, mood: str, count: int = moods.DEFAULT_SEED_COUNT
    ) -> list[MovieRecord]:
        return await moods.prefetch_seed_details(
            self.metadata,
            mood,
            count,
            batch_size=self._settings.batch_size,
            delay=self._settings.batch_delay,
            rng=self._rng,
        )

    async def hydrate_search(
        self, query: str, limit: int = moods.DEFAULT_SEARCH_LIMIT
    ) -> list[MovieRecord]:
        return await moods.hydrate_search(
            self.metadata,
            query,
            limit=limit,
            batch_size=self._settings.batch_size,
            delay=self._settings.batch_delay,
        )

    async def recommend_similar(
        self,
        genre: str,
        *,
        exclude_id: str | None = None,
        count: int = moods.DEFAULT_RECOMMENDATION_COUNT,
    ) -> list[MovieRecord]:
        return await moods.recommend_similar(
            self.metadata,
            genre,
            exclude_id=exclude_id,
            count=count,
            batch_size=self._settings.batch_size,
            delay=self._settings.batch_delay,
            rng=self._rng,
        )

    async def api_status(self) -> dict[str, object]:
        """Probe OMDb with a well-known title and report whether it answered."""

        if not self.metadata.configured:
            return {
                "omdb": "unconfigured",
                "youtube": "configured" if self.trailers.configured else "unconfigured",
            }
        try:
            record = await self.metadata.lookup_by_id(STATUS_PROBE_ID, "short")
        except TransportError as exc:
            LOGGER.warning("OMDb status probe failed: %s", exc)
            omdb_status = "error"
            detail: str | None = str(exc)
        else:
            omdb_status = "ok" if record is not None else "error"
            detail = record.title if record is not None else "probe title not found"
        return {
            "omdb": omdb_status,
            "detail": detail,
            "youtube": "configured" if self.trailers.configured else "unconfigured",
        }

    def clear_cache(self) -> None:
        self.metadata.clear_cache()
        self.trailers.clear_cache()

    def cache_stats(self) -> dict[str, CacheStats]:
        return {
            "metadata": self.metadata.cache_stats(),
            "trailers": self.trailers.cache_stats(),
        }


__all__ = ["MoodFlixService", "STATUS_PROBE_ID"]

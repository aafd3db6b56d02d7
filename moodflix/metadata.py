"""Client for the OMDb movie metadata API."""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional, get_args

import httpx
from pydantic import ValidationError

from .common.cache import CacheStats, TTLCache
from .common.errors import MalformedResponseError, TransportError
from .common.types import MovieRecord, OMDbSearchResponse, SearchResult
from .config import DEFAULT_OMDB_BASE_URL

PlotVariant = Literal["short", "full"]

_PLOT_VARIANTS: tuple[str, ...] = get_args(PlotVariant)

LOGGER = logging.getLogger(__name__)


def metadata_cache_key(imdb_id: str, plot: str) -> str:
    return f"{imdb_id}_{plot}"


class MetadataClient:
    """Title search and IMDb id lookups against OMDb.

    Successful id lookups are memoised in ``cache``; "not found" answers are
    never cached so a later call asks the upstream again. Transport failures
    raise :class:`~moodflix.common.errors.TransportError`.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_key: str | None,
        cache: TTLCache[MovieRecord],
        base_url: str = DEFAULT_OMDB_BASE_URL,
        logger: logging.Logger | None = None,
    ) -> None:
        self._http_client = http_client
        self._api_key = api_key
        self._cache = cache
        self._base_url = base_url
        self._logger = logger or LOGGER

    @property
    def cache(self) -> TTLCache[MovieRecord]:
        return self._cache

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _get_json(self, params: Mapping[str, Any]) -> dict[str, Any]:
        query = {"apikey": self._api_key, **params}
        try:
            resp = await self._http_client.get(self._base_url, params=query)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"OMDb request failed: {exc}", url=self._base_url
            ) from exc
        if not resp.is_success:
            raise TransportError(
                f"OMDb returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                url=str(resp.request.url),
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(
                "OMDb returned a non-JSON body",
                status_code=resp.status_code,
                url=str(resp.request.url),
            ) from exc
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "OMDb returned an unexpected payload",
                status_code=resp.status_code,
                url=str(resp.request.url),
            )
        return data

    def _missing_key(self) -> bool:
        if self._api_key:
            return False
        self._logger.error(
            "OMDb API key is not configured. Set OMDB_API_KEY in the environment."
        )
        return True

    async def search_by_title(self, query: str, page: int = 1) -> SearchResult:
        """Search movies by title; blank queries return an empty page."""

        if not query or not query.strip():
            return SearchResult()
        if self._missing_key():
            return SearchResult()

        data = await self._get_json({"s": query, "type": "movie", "page": page})
        try:
            parsed = OMDbSearchResponse.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Unexpected OMDb search payload for {query!r}"
            ) from exc

        if parsed.response == "False":
            self._logger.warning("OMDb search error for %r: %s", query, parsed.error)
            return SearchResult()

        try:
            total = int(parsed.total_results or "0")
        except ValueError:
            total = len(parsed.search)
        return SearchResult(items=parsed.search, total_results=total)

    def _parse_record(self, data: dict[str, Any], label: str) -> Optional[MovieRecord]:
        if data.get("Response") == "False":
            self._logger.warning("OMDb lookup error for %s: %s", label, data.get("Error"))
            return None
        try:
            return MovieRecord.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Unexpected OMDb record payload for {label}"
            ) from exc

    async def lookup_by_id(
        self, imdb_id: str, plot: PlotVariant = "short"
    ) -> Optional[MovieRecord]:
        """Return the OMDb record for ``imdb_id`` or ``None`` when OMDb has none."""

        if plot not in _PLOT_VARIANTS:
            raise ValueError("plot must be 'short' or 'full'")
        if not imdb_id:
            self._logger.warning("lookup_by_id called without an IMDb id")
            return None

        key = metadata_cache_key(imdb_id, plot)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if self._missing_key():
            return None

        data = await self._get_json({"i": imdb_id, "plot": plot})
        record = self._parse_record(data, imdb_id)
        if record is not None:
            self._cache.set(key, record)
        return record

    async def lookup_by_title(
        self, title: str, year: int | str | None = None
    ) -> Optional[MovieRecord]:
        """Return the OMDb record best matching an exact title and optional year."""

        if not title or not title.strip():
            self._logger.warning("lookup_by_title called without a title")
            return None
        if self._missing_key():
            return None

        params: dict[str, Any] = {"t": title}
        if year:
            params["y"] = year
        data = await self._get_json(params)
        return self._parse_record(data, repr(title))

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()


__all__ = ["MetadataClient", "PlotVariant", "metadata_cache_key"]

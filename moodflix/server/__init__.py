"""FastMCP server exposing the MoodFlix lookup, trailer, and mood tools."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated, Any, Literal

from fastmcp.server import FastMCP
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .. import moods
from ..config import Settings
from ..service import MoodFlixService


logger = logging.getLogger(__name__)

settings = Settings()
SERVER_NAME = "MoodFlix"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


try:
    __version__ = importlib.metadata.version("moodflix")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"


ImdbId = Annotated[
    str,
    Field(
        description="IMDb title identifier",
        examples=["tt0133093"],
    ),
]

MovieTitle = Annotated[
    str,
    Field(
        description="Movie title as displayed to users",
        examples=["Inception"],
    ),
]

ReleaseYear = Annotated[
    int | str | None,
    Field(
        description="Release year used to narrow the match",
        examples=[2010],
    ),
]


class MoodFlixServer(FastMCP):
    """FastMCP server with an attached :class:`MoodFlixService`."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        service: MoodFlixService | None = None,
    ) -> None:
        self._app_settings = settings or Settings()
        self._service = service
        self._owns_service = service is None

        class _ServerLifespan:
            def __init__(self, moodflix_server: "MoodFlixServer") -> None:
                self._moodflix_server = moodflix_server

            async def __aenter__(self) -> None:  # noqa: D401 - matching protocol
                return None

            async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
                await self._moodflix_server.close()

        def _lifespan(app: FastMCP) -> _ServerLifespan:  # noqa: ARG001
            return _ServerLifespan(self)

        super().__init__(name=SERVER_NAME, lifespan=_lifespan)

    @property
    def app_settings(self) -> Settings:
        return self._app_settings

    def configure(self, settings: Settings) -> None:
        """Replace the settings; a service built from the old ones is discarded."""

        self._app_settings = settings
        if self._owns_service:
            self._service = None

    @property
    def service(self) -> MoodFlixService:
        if self._service is None:
            self._service = MoodFlixService(self._app_settings)
            self._owns_service = True
        return self._service

    @service.setter
    def service(self, service: MoodFlixService | None) -> None:
        self._service = service
        self._owns_service = service is None

    async def close(self) -> None:
        """Close the service, forgetting it only if this server built it."""

        if self._service is None:
            return
        await self._service.aclose()
        if self._owns_service:
            self._service = None


server = MoodFlixServer(settings=settings)


def _movie_tool(name: str, *, title: str, operation: str):
    return server.tool(
        name,
        title=title,
        meta={"category": "movies", "operation": operation},
    )


@_movie_tool("search-movies", title="Search movies by title", operation="search")
async def search_movies(
    query: Annotated[
        str,
        Field(description="Title search terms", examples=["matrix"]),
    ],
    page: Annotated[
        int,
        Field(description="Result page, 10 rows per page", ge=1, examples=[1]),
    ] = 1,
) -> dict[str, Any]:
    """Search OMDb by title and return one page of summaries."""

    result = await server.service.search_by_title(query, page)
    return result.to_payload()


@_movie_tool("lookup-movie", title="Look up a movie by IMDb id", operation="lookup")
async def lookup_movie(
    imdb_id: ImdbId,
    plot: Annotated[
        Literal["short", "full"],
        Field(description="Plot length to request", examples=["full"]),
    ] = "short",
) -> dict[str, Any] | None:
    """Return the full OMDb record for an IMDb id, or null when OMDb has none."""

    record = await server.service.lookup_by_id(imdb_id, plot)
    return record.to_payload() if record is not None else None


@_movie_tool(
    "lookup-movie-by-title", title="Look up a movie by exact title", operation="lookup"
)
async def lookup_movie_by_title(
    title: MovieTitle, year: ReleaseYear = None
) -> dict[str, Any] | None:
    """Return the OMDb record matching an exact title and optional year."""

    record = await server.service.lookup_by_title(title, year)
    return record.to_payload() if record is not None else None


@_movie_tool("get-trailer", title="Find a movie trailer", operation="trailer")
async def get_trailer(title: MovieTitle, year: ReleaseYear = None) -> dict[str, Any]:
    """Find the YouTube trailer for a movie; falls back instead of failing."""

    result = await server.service.resolve_trailer(title, year)
    return result.to_payload()


@_movie_tool("resolve-movies", title="Resolve many IMDb ids", operation="batch")
async def resolve_movies(
    ids: Annotated[
        list[str],
        Field(description="IMDb ids to resolve", examples=[["tt0133093", "tt1375666"]]),
    ],
    batch_size: Annotated[
        int | None,
        Field(description="Concurrent lookups per batch", ge=1, examples=[3]),
    ] = None,
    delay: Annotated[
        float | None,
        Field(description="Pause between batches in seconds", ge=0, examples=[0.1]),
    ] = None,
) -> list[dict[str, Any]]:
    """Resolve IMDb ids in paced batches, skipping ids that cannot be fetched."""

    records = await server.service.resolve_many(ids, batch_size=batch_size, delay=delay)
    return [record.to_payload() for record in records]


@_movie_tool("mood-movies", title="Movies for a mood", operation="mood")
async def mood_movies(
    mood: Annotated[
        str,
        Field(description="Mood name", examples=["hype", "chill"]),
    ],
    count: Annotated[
        int,
        Field(description="Number of seed movies to fetch", ge=1, examples=[8]),
    ] = moods.DEFAULT_SEED_COUNT,
) -> list[dict[str, Any]]:
    """Return curated movies for a mood, with placeholders if OMDb is down."""

    records = await server.service.prefetch_mood(mood, count)
    return [record.to_payload() for record in records]


@_movie_tool("search-and-hydrate", title="Search with full details", operation="search")
async def search_and_hydrate(
    query: Annotated[
        str,
        Field(description="Title search terms", examples=["inception"]),
    ],
    limit: Annotated[
        int,
        Field(description="Maximum number of results to hydrate", ge=1, examples=[12]),
    ] = moods.DEFAULT_SEARCH_LIMIT,
) -> list[dict[str, Any]]:
    """Search by title and replace each row with its full record when possible."""

    records = await server.service.hydrate_search(query, limit)
    return [record.to_payload() for record in records]


@_movie_tool("more-like-this", title="Recommend similar movies", operation="recommend")
async def more_like_this(
    genre: Annotated[
        str,
        Field(description="Genre to draw recommendations from", examples=["Action"]),
    ],
    exclude_id: Annotated[
        str | None,
        Field(description="IMDb id of the movie being viewed", examples=["tt0133093"]),
    ] = None,
    count: Annotated[
        int,
        Field(description="Number of recommendations", ge=1, examples=[6]),
    ] = moods.DEFAULT_RECOMMENDATION_COUNT,
) -> list[dict[str, Any]]:
    """Recommend movies sharing a genre with the one being viewed."""

    records = await server.service.recommend_similar(
        genre, exclude_id=exclude_id, count=count
    )
    return [record.to_payload() for record in records]


@_movie_tool("list-moods", title="List supported moods", operation="mood")
async def list_moods() -> dict[str, Any]:
    """Return supported moods with their genres and seed counts."""

    return moods.mood_stats()


@_movie_tool("cache-stats", title="Cache statistics", operation="debug")
async def cache_stats() -> dict[str, Any]:
    """Report the size and keys of the metadata and trailer caches."""

    return dict(server.service.cache_stats())


@_movie_tool("clear-cache", title="Clear caches", operation="debug")
async def clear_cache() -> dict[str, Any]:
    """Drop every cached metadata record and trailer result."""

    server.service.clear_cache()
    return {"cleared": True}


@_movie_tool("api-status", title="Upstream API status", operation="debug")
async def api_status() -> dict[str, Any]:
    """Probe OMDb with a known title and report which upstreams are configured."""

    return await server.service.api_status()


@server.custom_route("/api/getTrailer", methods=["GET", "OPTIONS"])
async def get_trailer_route(request: Request) -> Response:
    """Serve trailer lookups to the browser client."""

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    title = request.query_params.get("title")
    if not title:
        return JSONResponse(
            {"error": "Missing required parameter: title"},
            status_code=400,
            headers=CORS_HEADERS,
        )
    year = request.query_params.get("year") or None
    result = await server.service.resolve_trailer(title, year)
    return JSONResponse(result.to_payload(), headers=CORS_HEADERS)


@server.custom_route("/api/health", methods=["GET"])
async def health(request: Request) -> Response:  # noqa: ARG001
    return JSONResponse(
        {"status": "ok", "message": "MoodFlix API server running", "version": __version__}
    )


def main(argv: list[str] | None = None) -> None:
    """Run the server command line interface."""

    from .cli import main as cli_main

    cli_main(argv)


if __name__ == "__main__":
    main()


__all__ = [
    "MoodFlixServer",
    "server",
    "settings",
    "main",
]

"""Type definitions for OMDb and YouTube payloads and the results built from them."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _OMDbModel(BaseModel):
    """Base for OMDb payloads, which use PascalCase keys on the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class OMDbRating(_OMDbModel):
    """One entry of the ``Ratings`` list (IMDb, Rotten Tomatoes, Metacritic)."""

    source: str = Field(alias="Source")
    value: str = Field(alias="Value")


class MovieSummary(_OMDbModel):
    """Row returned by the OMDb title search endpoint."""

    title: str = Field(alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    imdb_id: str = Field(alias="imdbID")
    type: Optional[str] = Field(default=None, alias="Type")
    poster: Optional[str] = Field(default=None, alias="Poster")


class MovieRecord(_OMDbModel):
    """Full OMDb title record.

    ``fallback`` is only set on placeholder records synthesized when the
    upstream could not be reached.
    """

    imdb_id: str = Field(alias="imdbID")
    title: str = Field(alias="Title")
    year: Optional[str] = Field(default=None, alias="Year")
    rated: Optional[str] = Field(default=None, alias="Rated")
    released: Optional[str] = Field(default=None, alias="Released")
    runtime: Optional[str] = Field(default=None, alias="Runtime")
    genre: Optional[str] = Field(default=None, alias="Genre")
    director: Optional[str] = Field(default=None, alias="Director")
    writer: Optional[str] = Field(default=None, alias="Writer")
    actors: Optional[str] = Field(default=None, alias="Actors")
    plot: Optional[str] = Field(default=None, alias="Plot")
    language: Optional[str] = Field(default=None, alias="Language")
    country: Optional[str] = Field(default=None, alias="Country")
    awards: Optional[str] = Field(default=None, alias="Awards")
    poster: Optional[str] = Field(default=None, alias="Poster")
    ratings: List[OMDbRating] = Field(default_factory=list, alias="Ratings")
    imdb_rating: Optional[str] = Field(default=None, alias="imdbRating")
    imdb_votes: Optional[str] = Field(default=None, alias="imdbVotes")
    type: Optional[str] = Field(default=None, alias="Type")
    box_office: Optional[str] = Field(default=None, alias="BoxOffice")
    fallback: bool = Field(default=False, alias="_isFallback")

    @classmethod
    def from_summary(cls, summary: MovieSummary) -> "MovieRecord":
        """Promote a search row to a record carrying only the search fields."""

        return cls(
            imdb_id=summary.imdb_id,
            title=summary.title,
            year=summary.year,
            type=summary.type,
            poster=summary.poster,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the record keyed the way OMDb keys it."""

        payload = self.model_dump(by_alias=True, exclude_none=True)
        if not self.fallback:
            payload.pop("_isFallback", None)
        return payload


class OMDbSearchResponse(_OMDbModel):
    response: str = Field(alias="Response")
    search: List[MovieSummary] = Field(default_factory=list, alias="Search")
    total_results: Optional[str] = Field(default=None, alias="totalResults")
    error: Optional[str] = Field(default=None, alias="Error")


class SearchResult(BaseModel):
    """Page of title search results."""

    items: List[MovieSummary] = Field(default_factory=list)
    total_results: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.model_dump(by_alias=True, exclude_none=True) for item in self.items],
            "totalResults": self.total_results,
        }


class YouTubeVideoId(BaseModel):
    kind: Optional[str] = None
    videoId: Optional[str] = None


class YouTubeSnippet(BaseModel):
    title: str = ""
    channelTitle: str = ""
    publishedAt: Optional[str] = None


class YouTubeSearchItem(BaseModel):
    """Subset of a YouTube Data API search result."""

    id: YouTubeVideoId = Field(default_factory=YouTubeVideoId)
    snippet: YouTubeSnippet = Field(default_factory=YouTubeSnippet)


class YouTubeSearchResponse(BaseModel):
    items: List[YouTubeSearchItem] = Field(default_factory=list)


class FallbackReason(StrEnum):
    """Why a trailer lookup produced no embeddable video."""

    UNCONFIGURED = "unconfigured"
    QUOTA_EXCEEDED = "quota_exceeded"
    NO_RESULTS = "no_results"
    TRANSIENT_ERROR = "transient_error"
    INVALID_REQUEST = "invalid_request"


class TrailerResult(BaseModel):
    """Outcome of a trailer lookup; either a matched video or a fallback."""

    model_config = ConfigDict(frozen=True)

    video_id: Optional[str] = None
    title: Optional[str] = None
    channel_title: Optional[str] = None
    published_at: Optional[str] = None
    cached: bool = False
    fallback: bool = False
    reason: Optional[FallbackReason] = None
    error: Optional[str] = None

    @classmethod
    def unavailable(
        cls, reason: FallbackReason, *, error: str | None = None
    ) -> "TrailerResult":
        return cls(fallback=True, reason=reason, error=error)

    @classmethod
    def from_item(cls, item: YouTubeSearchItem) -> "TrailerResult":
        return cls(
            video_id=item.id.videoId,
            title=item.snippet.title,
            channel_title=item.snippet.channelTitle,
            published_at=item.snippet.publishedAt,
        )

    def to_payload(self) -> dict[str, Any]:
        """Render the result in the shape served by ``/api/getTrailer``."""

        payload: dict[str, Any] = {"videoId": self.video_id}
        if self.cached:
            payload["cached"] = True
        if self.fallback:
            payload["fallback"] = True
            if self.reason is not None:
                payload["reason"] = self.reason.value
        if self.error is not None:
            payload["error"] = self.error
        if self.video_id is not None:
            payload["title"] = self.title
            payload["channelTitle"] = self.channel_title
            payload["publishedAt"] = self.published_at
        return payload


__all__ = [
    "FallbackReason",
    "MovieRecord",
    "MovieSummary",
    "OMDbRating",
    "OMDbSearchResponse",
    "SearchResult",
    "TrailerResult",
    "YouTubeSearchItem",
    "YouTubeSearchResponse",
    "YouTubeSnippet",
    "YouTubeVideoId",
]

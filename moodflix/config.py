from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OMDB_BASE_URL = "https://www.omdbapi.com/"
DEFAULT_YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
DEFAULT_METADATA_CACHE_TTL = 5 * 60.0
DEFAULT_TRAILER_CACHE_TTL = 7 * 24 * 60 * 60.0


class Settings(BaseSettings):
    """Application configuration settings."""

    omdb_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OMDB_API_KEY", "VITE_OMDB_API_KEY"),
    )
    omdb_base_url: str = Field(
        default=DEFAULT_OMDB_BASE_URL, validation_alias="OMDB_BASE_URL"
    )
    youtube_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("YOUTUBE_API_KEY", "VITE_YOUTUBE_API_KEY"),
    )
    youtube_search_url: str = Field(
        default=DEFAULT_YOUTUBE_SEARCH_URL, validation_alias="YOUTUBE_SEARCH_URL"
    )
    metadata_cache_ttl: float = Field(
        default=DEFAULT_METADATA_CACHE_TTL, gt=0, validation_alias="METADATA_CACHE_TTL"
    )
    trailer_cache_ttl: float = Field(
        default=DEFAULT_TRAILER_CACHE_TTL, gt=0, validation_alias="TRAILER_CACHE_TTL"
    )
    cache_max_entries: int | None = Field(
        default=None, gt=0, validation_alias="CACHE_MAX_ENTRIES"
    )
    http_timeout: float = Field(default=10.0, gt=0, validation_alias="HTTP_TIMEOUT")
    batch_size: int = Field(default=3, gt=0, validation_alias="BATCH_SIZE")
    batch_delay: float = Field(default=0.1, ge=0, validation_alias="BATCH_DELAY")

    @field_validator("omdb_api_key", "youtube_api_key", mode="before")
    @classmethod
    def _blank_key_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cache_max_entries", mode="before")
    @classmethod
    def _blank_bound_is_unbounded(cls, value: object) -> object:
        if value in (None, ""):
            return None
        return value

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

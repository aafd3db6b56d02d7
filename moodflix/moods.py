"""Mood to genre mapping, curated seed ids, and the batch consumers built on them."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

from .batching import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE, resolve_many
from .common.errors import TransportError
from .common.types import MovieRecord
from .common.validation import is_imdb_id, require_positive

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .metadata import MetadataClient

LOGGER = logging.getLogger(__name__)

MOOD_TO_GENRES: dict[str, tuple[str, ...]] = {
    "chill": ("Drama", "Romance", "Indie"),
    "hype": ("Action", "Adventure", "Thriller"),
    "sad": ("Drama", "Romance"),
    "nostalgic": ("Family", "Drama", "Musical", "Comedy"),
    "spooky": ("Horror", "Thriller"),
    "funny": ("Comedy", "Family", "Romance"),
    "thoughtful": ("Documentary", "Biography", "Drama"),
}

PLACEHOLDER_PLOT = "Movie details temporarily unavailable. Please try again later."
DEFAULT_SEED_COUNT = 8
DEFAULT_SEARCH_LIMIT = 12
DEFAULT_RECOMMENDATION_COUNT = 6

DEFAULT_SEEDS_PATH = Path(__file__).resolve().parent / "data" / "genre_seeds.json"

GenreSeeds = dict[str, list[str]]


def load_genre_seeds(path: Path | None = None) -> GenreSeeds:
    """Load and validate the genre → IMDb id catalogue.

    Reads the packaged ``data/genre_seeds.json`` unless *path* is given.
    Raises ``ValueError`` when a genre is empty or lists a malformed id.
    """

    with (path or DEFAULT_SEEDS_PATH).open("r", encoding="utf-8") as handle:
        loaded = json.load(handle)
    if not isinstance(loaded, dict) or not loaded:
        raise ValueError("genre seeds must be a non-empty JSON object")

    seeds: GenreSeeds = {}
    for genre, ids in loaded.items():
        if not isinstance(ids, list) or not ids:
            raise ValueError(f"Genre {genre} has no seeds or invalid format")
        invalid = [str(imdb_id) for imdb_id in ids if not is_imdb_id(imdb_id)]
        if invalid:
            raise ValueError(
                f"Genre {genre} has invalid IMDb IDs: {', '.join(invalid)}"
            )
        seeds[str(genre)] = list(ids)
    return seeds


GENRE_SEEDS: GenreSeeds = load_genre_seeds()


def _normalize_mood(mood: str) -> str:
    return mood.lower().strip()


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _shuffled(values: Sequence[str], rng: random.Random | None) -> list[str]:
    shuffled = list(values)
    (rng or random).shuffle(shuffled)
    return shuffled


def available_moods() -> list[str]:
    return list(MOOD_TO_GENRES)


def genres_for_mood(mood: str) -> list[str]:
    return list(MOOD_TO_GENRES.get(_normalize_mood(mood), ()))


def is_mood_supported(mood: str) -> bool:
    return _normalize_mood(mood) in MOOD_TO_GENRES


def available_genres(seeds: Mapping[str, Sequence[str]] | None = None) -> list[str]:
    return list(GENRE_SEEDS if seeds is None else seeds)


def seed_count_for_genre(
    genre: str, seeds: Mapping[str, Sequence[str]] | None = None
) -> int:
    return len((GENRE_SEEDS if seeds is None else seeds).get(genre, ()))


def seed_ids_for_mood(
    mood: str,
    count: int = DEFAULT_SEED_COUNT,
    *,
    rng: random.Random | None = None,
    seeds: Mapping[str, Sequence[str]] | None = None,
) -> list[str]:
    """Return up to *count* distinct seed ids drawn from the mood's genres."""

    catalogue = GENRE_SEEDS if seeds is None else seeds
    genres = genres_for_mood(mood)
    if not genres:
        LOGGER.warning("No genres found for mood: %s", mood)
        return []

    collected: list[str] = []
    for genre in genres:
        genre_seeds = catalogue.get(genre)
        if genre_seeds:
            collected.extend(genre_seeds)
        else:
            LOGGER.warning("No seeds found for genre: %s", genre)
    return _shuffled(_dedupe(collected), rng)[:count]


def random_seeds_from_genres(
    genres: Iterable[str],
    count_per_genre: int = 3,
    *,
    rng: random.Random | None = None,
    seeds: Mapping[str, Sequence[str]] | None = None,
) -> list[str]:
    """Sample up to *count_per_genre* ids from each genre, deduplicated."""

    catalogue = GENRE_SEEDS if seeds is None else seeds
    collected: list[str] = []
    for genre in genres:
        genre_seeds = catalogue.get(genre)
        if genre_seeds:
            collected.extend(_shuffled(genre_seeds, rng)[:count_per_genre])
    return _dedupe(collected)


def mood_stats(
    seeds: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, dict[str, object]]:
    catalogue = GENRE_SEEDS if seeds is None else seeds
    stats: dict[str, dict[str, object]] = {}
    for mood, genres in MOOD_TO_GENRES.items():
        unique = _dedupe(
            imdb_id for genre in genres for imdb_id in catalogue.get(genre, ())
        )
        stats[mood] = {
            "genres": len(genres),
            "total_seeds": sum(len(catalogue.get(genre, ())) for genre in genres),
            "unique_seeds": len(unique),
            "genre_list": list(genres),
        }
    return stats


def build_placeholder_records(mood: str, ids: Sequence[str]) -> list[MovieRecord]:
    """Synthesize renderable stand-ins for ids whose details are unavailable."""

    genre = ", ".join(genres_for_mood(mood))
    return [
        MovieRecord(
            imdb_id=imdb_id,
            title=f"Movie {imdb_id}",
            year="N/A",
            poster="N/A",
            genre=genre,
            plot=PLACEHOLDER_PLOT,
            type="movie",
            fallback=True,
        )
        for imdb_id in ids
    ]


async def prefetch_seed_details(
    client: "MetadataClient",
    mood: str,
    count: int = DEFAULT_SEED_COUNT,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    rng: random.Random | None = None,
    seeds: Mapping[str, Sequence[str]] | None = None,
) -> list[MovieRecord]:
    """Fetch details for a mood's seed ids.

    When nothing resolves, one placeholder per requested id is returned so
    callers always have something to render.
    """

    seed_ids = seed_ids_for_mood(mood, count, rng=rng, seeds=seeds)
    if not seed_ids:
        LOGGER.warning("No seed IDs found for mood: %s", mood)
        return []

    LOGGER.info("Prefetching %d movies for mood: %s", len(seed_ids), mood)
    movies = await resolve_many(
        client, seed_ids, batch_size=batch_size, delay=delay, logger=LOGGER
    )
    LOGGER.info(
        "Fetched %d/%d movies for mood: %s", len(movies), len(seed_ids), mood
    )
    if not movies:
        LOGGER.warning(
            "No movies fetched for mood: %s. API may be unavailable.", mood
        )
        return build_placeholder_records(mood, seed_ids)
    return movies


async def hydrate_search(
    client: "MetadataClient",
    query: str,
    *,
    limit: int = DEFAULT_SEARCH_LIMIT,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
) -> list[MovieRecord]:
    """Search by title and replace the first *limit* rows with full records.

    Rows whose details cannot be fetched are kept as search-level records.
    An unreachable search upstream yields an empty list.
    """

    require_positive(limit, name="limit")
    if not query or not query.strip():
        return []

    try:
        page = await client.search_by_title(query, 1)
    except TransportError:
        LOGGER.exception("Search error for %r", query)
        return []
    summaries = page.items[:limit]
    if not summaries:
        return []

    resolved = await resolve_many(
        client,
        [summary.imdb_id for summary in summaries],
        batch_size=batch_size,
        delay=delay,
        logger=LOGGER,
    )
    by_id = {record.imdb_id: record for record in resolved}
    movies = [
        by_id.get(summary.imdb_id) or MovieRecord.from_summary(summary)
        for summary in summaries
    ]
    LOGGER.info("Search completed: %d movies found for %r", len(movies), query)
    return movies


async def recommend_similar(
    client: "MetadataClient",
    genre: str,
    *,
    exclude_id: str | None = None,
    count: int = DEFAULT_RECOMMENDATION_COUNT,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    rng: random.Random | None = None,
    seeds: Mapping[str, Sequence[str]] | None = None,
) -> list[MovieRecord]:
    """Return up to *count* records from *genre*'s seeds, excluding one id."""

    catalogue = GENRE_SEEDS if seeds is None else seeds
    genre_seeds = catalogue.get(genre, ())
    if not genre_seeds:
        LOGGER.info("No seeds found for genre: %s", genre)
        return []

    candidates = [imdb_id for imdb_id in genre_seeds if imdb_id != exclude_id]
    selected = _shuffled(candidates, rng)[:count]
    return await resolve_many(
        client, selected, batch_size=batch_size, delay=delay, logger=LOGGER
    )


__all__ = [
    "GENRE_SEEDS",
    "MOOD_TO_GENRES",
    "PLACEHOLDER_PLOT",
    "available_genres",
    "available_moods",
    "build_placeholder_records",
    "genres_for_mood",
    "hydrate_search",
    "is_mood_supported",
    "load_genre_seeds",
    "mood_stats",
    "prefetch_seed_details",
    "random_seeds_from_genres",
    "recommend_similar",
    "seed_count_for_genre",
    "seed_ids_for_mood",
]

"""Resolve many IMDb ids through the metadata client in paced batches."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional, Protocol, Sequence

from .common.types import MovieRecord
from .common.validation import require_non_negative, require_positive

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY = 0.1

LOGGER = logging.getLogger(__name__)


class MovieLookup(Protocol):
    async def lookup_by_id(
        self, imdb_id: str, plot: str = "short"
    ) -> Optional[MovieRecord]:
        ...


async def _settle(
    client: MovieLookup, imdb_id: str, plot: str, log: logging.Logger
) -> Optional[MovieRecord]:
    try:
        return await client.lookup_by_id(imdb_id, plot)
    except Exception:
        log.exception("Failed to fetch movie %s", imdb_id)
        return None


async def iter_resolve_in_batches(
    client: MovieLookup,
    ids: Sequence[str],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    plot: str = "short",
    logger: logging.Logger | None = None,
) -> AsyncIterator[list[MovieRecord]]:
    """Yield the records resolved by each batch of ``ids``.

    Lookups inside a batch run concurrently; the next batch starts only after
    every lookup of the current one settled and ``delay`` seconds passed.
    Ids that are unknown upstream or whose lookup raised are dropped.
    """

    require_positive(batch_size, name="batch_size")
    require_non_negative(delay, name="delay")
    log = logger or LOGGER

    total = len(ids)
    for i in range(0, total, batch_size):
        batch = ids[i : i + batch_size]
        results = await asyncio.gather(
            *(_settle(client, imdb_id, plot, log) for imdb_id in batch)
        )
        yield [record for record in results if record is not None]
        log.info("Resolved %d/%d ids", min(i + batch_size, total), total)
        if i + batch_size < total:
            await asyncio.sleep(delay)


async def resolve_many(
    client: MovieLookup,
    ids: Sequence[str],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    plot: str = "short",
    logger: logging.Logger | None = None,
) -> list[MovieRecord]:
    """Resolve ``ids`` in batches and return the records that could be fetched."""

    log = logger or LOGGER
    records: list[MovieRecord] = []
    async for batch in iter_resolve_in_batches(
        client, ids, batch_size=batch_size, delay=delay, plot=plot, logger=log
    ):
        records.extend(batch)
    log.info(
        "Resolved %d/%d movies",
        len(records),
        len(ids),
        extra={
            "event": "resolve_many_summary",
            "requested": len(ids),
            "resolved": len(records),
        },
    )
    return records


__all__ = [
    "DEFAULT_BATCH_DELAY",
    "DEFAULT_BATCH_SIZE",
    "MovieLookup",
    "iter_resolve_in_batches",
    "resolve_many",
]

import asyncio
import logging

import pytest

from moodflix import batching
from moodflix.common.types import MovieRecord


class FakeLookup:
    def __init__(self, *, missing=(), failing=()):
        self.missing = set(missing)
        self.failing = set(failing)
        self.events: list[str] = []

    async def lookup_by_id(self, imdb_id, plot="short"):
        self.events.append(f"lookup:{imdb_id}")
        if imdb_id in self.failing:
            raise RuntimeError(f"upstream failure for {imdb_id}")
        if imdb_id in self.missing:
            return None
        return MovieRecord(imdb_id=imdb_id, title=f"Movie {imdb_id}")


def _patch_sleep(monkeypatch, events):
    async def fake_sleep(delay):
        events.append(f"sleep:{delay}")

    monkeypatch.setattr(batching.asyncio, "sleep", fake_sleep)


def test_resolve_many_drops_failed_lookups(monkeypatch, caplog):
    lookup = FakeLookup(failing={"tt0000002"})
    _patch_sleep(monkeypatch, lookup.events)
    ids = ["tt0000001", "tt0000002", "tt0000003", "tt0000004"]

    with caplog.at_level(logging.INFO, logger="moodflix.batching"):
        records = asyncio.run(batching.resolve_many(lookup, ids, batch_size=2, delay=0))

    assert [record.imdb_id for record in records] == [
        "tt0000001",
        "tt0000003",
        "tt0000004",
    ]
    assert "Failed to fetch movie tt0000002" in caplog.text
    assert "Resolved 3/4 movies" in caplog.text


def test_resolve_many_drops_missing_records(monkeypatch):
    lookup = FakeLookup(missing={"tt0000001"})
    _patch_sleep(monkeypatch, lookup.events)

    records = asyncio.run(
        batching.resolve_many(lookup, ["tt0000001", "tt0000002"], batch_size=3, delay=0.1)
    )

    assert [record.imdb_id for record in records] == ["tt0000002"]


def test_resolve_many_paces_batches_without_trailing_sleep(monkeypatch, caplog):
    lookup = FakeLookup()
    _patch_sleep(monkeypatch, lookup.events)
    ids = [f"tt000000{i}" for i in range(1, 6)]

    with caplog.at_level(logging.INFO, logger="moodflix.batching"):
        records = asyncio.run(batching.resolve_many(lookup, ids, batch_size=2, delay=0.1))

    assert len(records) == 5
    assert lookup.events == [
        "lookup:tt0000001",
        "lookup:tt0000002",
        "sleep:0.1",
        "lookup:tt0000003",
        "lookup:tt0000004",
        "sleep:0.1",
        "lookup:tt0000005",
    ]
    assert "Resolved 2/5 ids" in caplog.text
    assert "Resolved 4/5 ids" in caplog.text
    assert "Resolved 5/5 ids" in caplog.text


def test_resolve_many_gathers_each_batch(monkeypatch):
    calls: list[int] = []
    orig_gather = asyncio.gather

    async def fake_gather(*coros):
        calls.append(len(coros))
        return await orig_gather(*coros)

    monkeypatch.setattr(batching.asyncio, "gather", fake_gather)
    _patch_sleep(monkeypatch, [])

    ids = [f"tt100000{i}" for i in range(7)]
    asyncio.run(batching.resolve_many(FakeLookup(), ids, batch_size=3, delay=0))

    assert calls == [3, 3, 1]


def test_resolve_many_preserves_input_order(monkeypatch):
    class ReversedLatency(FakeLookup):
        async def lookup_by_id(self, imdb_id, plot="short"):
            # later ids finish first
            for _ in range(10 - int(imdb_id[-1])):
                await asyncio.sleep(0)
            return MovieRecord(imdb_id=imdb_id, title=imdb_id)

    ids = ["tt0000001", "tt0000002", "tt0000003"]
    records = asyncio.run(batching.resolve_many(ReversedLatency(), ids, batch_size=3))

    assert [record.imdb_id for record in records] == ids


def test_resolve_many_passes_plot_variant(monkeypatch):
    seen = []

    class PlotLookup:
        async def lookup_by_id(self, imdb_id, plot="short"):
            seen.append(plot)
            return None

    asyncio.run(batching.resolve_many(PlotLookup(), ["tt0000001"], plot="full"))
    assert seen == ["full"]


def test_resolve_many_empty_input_makes_no_calls(monkeypatch):
    lookup = FakeLookup()
    _patch_sleep(monkeypatch, lookup.events)

    assert asyncio.run(batching.resolve_many(lookup, [])) == []
    assert lookup.events == []


def test_iter_resolve_in_batches_yields_per_batch(monkeypatch):
    lookup = FakeLookup(missing={"tt0000002"})
    _patch_sleep(monkeypatch, [])

    async def collect():
        return [
            [record.imdb_id for record in batch]
            async for batch in batching.iter_resolve_in_batches(
                lookup, ["tt0000001", "tt0000002", "tt0000003"], batch_size=2, delay=0
            )
        ]

    assert asyncio.run(collect()) == [["tt0000001"], ["tt0000003"]]


@pytest.mark.parametrize("batch_size", [0, -1])
def test_resolve_many_rejects_invalid_batch_size(batch_size):
    with pytest.raises(ValueError, match="batch_size must be positive"):
        asyncio.run(batching.resolve_many(FakeLookup(), ["tt0000001"], batch_size=batch_size))


def test_resolve_many_rejects_negative_delay():
    with pytest.raises(ValueError, match="delay must not be negative"):
        asyncio.run(batching.resolve_many(FakeLookup(), ["tt0000001"], delay=-0.5))


def test_resolve_many_summary_log_extra(monkeypatch, caplog):
    _patch_sleep(monkeypatch, [])
    with caplog.at_level(logging.INFO, logger="moodflix.batching"):
        asyncio.run(batching.resolve_many(FakeLookup(), ["tt0000001", "tt0000002"]))

    summary = [r for r in caplog.records if getattr(r, "event", None) == "resolve_many_summary"]
    assert len(summary) == 1
    assert summary[0].requested == 2
    assert summary[0].resolved == 2

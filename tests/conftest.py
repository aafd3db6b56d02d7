import sys
from pathlib import Path

import pytest

# Ensure package root is importable when tests are executed directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_API_ENV_VARS = (
    "OMDB_API_KEY",
    "VITE_OMDB_API_KEY",
    "YOUTUBE_API_KEY",
    "VITE_YOUTUBE_API_KEY",
    "CACHE_MAX_ENTRIES",
    "BATCH_SIZE",
    "BATCH_DELAY",
    "METADATA_CACHE_TTL",
    "TRAILER_CACHE_TTL",
    "HTTP_TIMEOUT",
    "OMDB_BASE_URL",
    "YOUTUBE_SEARCH_URL",
)


@pytest.fixture(autouse=True)
def _isolate_api_env(monkeypatch):
    """Keep developer credentials out of the tests."""
    for name in _API_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

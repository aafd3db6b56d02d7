import pytest
from pydantic import ValidationError

from moodflix.config import (
    DEFAULT_METADATA_CACHE_TTL,
    DEFAULT_TRAILER_CACHE_TTL,
    Settings,
)


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.omdb_api_key is None
    assert settings.youtube_api_key is None
    assert settings.metadata_cache_ttl == DEFAULT_METADATA_CACHE_TTL == 300
    assert settings.trailer_cache_ttl == DEFAULT_TRAILER_CACHE_TTL == 604800
    assert settings.cache_max_entries is None
    assert settings.http_timeout == 10.0
    assert settings.batch_size == 3
    assert settings.batch_delay == 0.1


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("OMDB_API_KEY", "omdb-key")
    monkeypatch.setenv("YOUTUBE_API_KEY", "yt-key")
    monkeypatch.setenv("BATCH_SIZE", "5")
    monkeypatch.setenv("CACHE_MAX_ENTRIES", "100")
    settings = Settings(_env_file=None)
    assert settings.omdb_api_key == "omdb-key"
    assert settings.youtube_api_key == "yt-key"
    assert settings.batch_size == 5
    assert settings.cache_max_entries == 100


def test_settings_accept_frontend_key_names(monkeypatch):
    monkeypatch.setenv("VITE_OMDB_API_KEY", "vite-omdb")
    monkeypatch.setenv("VITE_YOUTUBE_API_KEY", "vite-yt")
    settings = Settings(_env_file=None)
    assert settings.omdb_api_key == "vite-omdb"
    assert settings.youtube_api_key == "vite-yt"


def test_settings_blank_keys_are_unset(monkeypatch):
    monkeypatch.setenv("OMDB_API_KEY", "   ")
    monkeypatch.setenv("CACHE_MAX_ENTRIES", "")
    settings = Settings(_env_file=None)
    assert settings.omdb_api_key is None
    assert settings.cache_max_entries is None


@pytest.mark.parametrize(
    "name, value",
    [
        ("BATCH_SIZE", "0"),
        ("BATCH_SIZE", "notint"),
        ("BATCH_DELAY", "-1"),
        ("METADATA_CACHE_TTL", "0"),
        ("CACHE_MAX_ENTRIES", "-3"),
    ],
)
def test_settings_reject_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_populate_by_field_name():
    settings = Settings(_env_file=None, omdb_api_key="direct", batch_delay=0)
    assert settings.omdb_api_key == "direct"
    assert settings.batch_delay == 0

import json

import httpx
import pytest
from click.testing import CliRunner

from moodflix import cli
from moodflix.service import MoodFlixService

GODFATHER = {
    "Title": "The Godfather",
    "Year": "1972",
    "Genre": "Crime, Drama",
    "imdbID": "tt0068646",
    "Type": "movie",
    "Response": "True",
}


@pytest.fixture
def upstream(monkeypatch):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        params = request.url.params
        if "youtube" in request.url.host:
            return httpx.Response(200, json={"items": []})
        if "s" in params:
            return httpx.Response(
                200,
                json={
                    "Search": [
                        {"Title": "The Godfather", "Year": "1972", "imdbID": "tt0068646", "Type": "movie"}
                    ],
                    "totalResults": "1",
                    "Response": "True",
                },
            )
        if params.get("i") == "tt0068646":
            return httpx.Response(200, json=GODFATHER)
        if params.get("i", "").startswith("tt"):
            return httpx.Response(500)
        return httpx.Response(200, json={"Response": "False", "Error": "Incorrect IMDb ID."})

    def factory(settings):
        return MoodFlixService(
            settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    monkeypatch.setattr(cli, "MoodFlixService", factory)
    return seen


def _invoke(*args):
    return CliRunner().invoke(
        cli.main,
        ["--log-level", "critical", "--omdb-api-key", "omdb", "--youtube-api-key", "yt", *args],
    )


def test_cli_search(upstream):
    result = _invoke("search", "godfather", "--page", "2")
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["totalResults"] == 1
    assert payload["items"][0]["imdbID"] == "tt0068646"
    assert upstream[0].url.params["page"] == "2"


def test_cli_search_hydrate(upstream):
    result = _invoke("search", "godfather", "--hydrate")
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload[0]["Genre"] == "Crime, Drama"


def test_cli_lookup(upstream):
    result = _invoke("lookup", "tt0068646", "--plot", "full")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["Title"] == "The Godfather"
    assert upstream[0].url.params["plot"] == "full"


def test_cli_lookup_not_found(upstream):
    result = _invoke("lookup", "nope")
    assert result.exit_code == 1
    assert "No movie found for nope" in result.output


def test_cli_lookup_upstream_error(upstream):
    result = _invoke("lookup", "tt9999999")
    assert result.exit_code == 1
    assert "500" in result.output


def test_cli_trailer_no_results(upstream):
    result = _invoke("trailer", "The Godfather", "--year", "1972")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "videoId": None,
        "fallback": True,
        "reason": "no_results",
    }


def test_cli_trailer_without_key(upstream):
    result = CliRunner().invoke(
        cli.main, ["--log-level", "critical", "trailer", "The Godfather"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["reason"] == "unconfigured"
    assert upstream == []


def test_cli_mood_rejects_unknown_mood(upstream):
    result = _invoke("mood", "angry")
    assert result.exit_code == 2
    assert "unsupported mood" in result.output
    assert upstream == []


def test_cli_mood_placeholders_when_upstream_fails(upstream):
    result = _invoke("mood", "spooky", "--count", "2")
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload) == 2
    assert all(record["_isFallback"] for record in payload)

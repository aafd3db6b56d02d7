"""Command-line interface for one-off lookups against the upstream APIs."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, TypeVar

import click

from .common.errors import TransportError
from .config import Settings
from .moods import available_moods, is_mood_supported
from .service import MoodFlixService

T = TypeVar("T")


def _run(settings: Settings, call: Callable[[MoodFlixService], Awaitable[T]]) -> T:
    async def _invoke() -> T:
        service = MoodFlixService(settings)
        try:
            return await call(service)
        finally:
            await service.aclose()

    try:
        return asyncio.run(_invoke())
    except TransportError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.group()
@click.option(
    "--omdb-api-key",
    envvar="OMDB_API_KEY",
    show_envvar=True,
    required=False,
    help="OMDb API key",
)
@click.option(
    "--youtube-api-key",
    envvar="YOUTUBE_API_KEY",
    show_envvar=True,
    required=False,
    help="YouTube Data API key",
)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    show_envvar=True,
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug"], case_sensitive=False
    ),
    default="warning",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def main(
    ctx: click.Context,
    omdb_api_key: str | None,
    youtube_api_key: str | None,
    log_level: str,
) -> None:
    """Query OMDb and YouTube the way the MoodFlix server does."""

    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.WARNING))
    overrides: dict[str, Any] = {}
    if omdb_api_key:
        overrides["omdb_api_key"] = omdb_api_key
    if youtube_api_key:
        overrides["youtube_api_key"] = youtube_api_key
    ctx.obj = Settings(**overrides)


@main.command()
@click.argument("query")
@click.option("--page", type=int, default=1, show_default=True, help="Result page")
@click.option(
    "--hydrate/--no-hydrate",
    default=False,
    show_default=True,
    help="Replace search rows with full records",
)
@click.pass_obj
def search(settings: Settings, query: str, page: int, hydrate: bool) -> None:
    """Search movies by title."""

    if hydrate:
        records = _run(settings, lambda service: service.hydrate_search(query))
        _echo_json([record.to_payload() for record in records])
        return
    result = _run(settings, lambda service: service.search_by_title(query, page))
    _echo_json(result.to_payload())


@main.command()
@click.argument("imdb_id")
@click.option(
    "--plot",
    type=click.Choice(["short", "full"]),
    default="short",
    show_default=True,
    help="Plot length",
)
@click.pass_obj
def lookup(settings: Settings, imdb_id: str, plot: str) -> None:
    """Look up a movie by IMDb id."""

    record = _run(settings, lambda service: service.lookup_by_id(imdb_id, plot))  # type: ignore[arg-type]
    if record is None:
        raise click.ClickException(f"No movie found for {imdb_id}")
    _echo_json(record.to_payload())


@main.command()
@click.argument("title")
@click.option("--year", required=False, help="Release year")
@click.pass_obj
def trailer(settings: Settings, title: str, year: str | None) -> None:
    """Find the YouTube trailer for a movie."""

    result = _run(settings, lambda service: service.resolve_trailer(title, year))
    _echo_json(result.to_payload())


@main.command()
@click.argument("mood")
@click.option("--count", type=int, default=8, show_default=True, help="Movies to fetch")
@click.pass_obj
def mood(settings: Settings, mood: str, count: int) -> None:
    """Fetch curated movies for a mood."""

    if not is_mood_supported(mood):
        raise click.BadParameter(
            f"unsupported mood; choose from {', '.join(available_moods())}",
            param_hint="MOOD",
        )
    records = _run(settings, lambda service: service.prefetch_mood(mood, count))
    _echo_json([record.to_payload() for record in records])


__all__ = ["main"]

"""Command line interface for :mod:`moodflix.server`."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from . import MoodFlixServer, server
from ..config import Settings


logger = logging.getLogger(__name__)

moodflix_server: MoodFlixServer = server

TRANSPORTS = ("stdio", "sse", "streamable-http")
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


@dataclass
class Transport:
    """Where and how FastMCP should serve the tools."""

    name: str = "stdio"
    host: str | None = None
    port: int | None = None
    path: str | None = None

    @property
    def is_http(self) -> bool:
        return self.name != "stdio"

    def run_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"transport": self.name}
        if self.is_http:
            kwargs["host"] = self.host
            kwargs["port"] = self.port
            if self.path:
                kwargs["path"] = self.path
        return kwargs


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve MoodFlix movie, trailer, and mood tools over MCP"
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        help="Transport protocol (env: MCP_TRANSPORT, default: stdio)",
    )
    parser.add_argument("--bind", help="Host address for HTTP transports (env: MCP_HOST)")
    parser.add_argument("--port", type=int, help="Port for HTTP transports (env: MCP_PORT)")
    parser.add_argument("--mount", help="Mount path for HTTP transports (env: MCP_MOUNT)")
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Read API keys and cache settings from this dotenv file instead of ./.env",
    )
    parser.add_argument(
        "--batch-size", type=int, help="Concurrent OMDb lookups per batch (env: BATCH_SIZE)"
    )
    parser.add_argument(
        "--batch-delay",
        type=float,
        help="Seconds to pause between batches (env: BATCH_DELAY)",
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=LOG_LEVELS,
        help="Logging verbosity (env: LOG_LEVEL, default: info)",
    )
    return parser


def _resolve_transport(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> Transport:
    """Combine flags with ``MCP_*`` variables; the environment wins."""

    transport = Transport(
        name=os.getenv("MCP_TRANSPORT") or args.transport or "stdio",
        host=os.getenv("MCP_HOST") or os.getenv("MCP_BIND") or args.bind,
        path=os.getenv("MCP_MOUNT") or args.mount,
    )
    if transport.name not in TRANSPORTS:
        parser.error(f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}")

    env_port = os.getenv("MCP_PORT")
    if env_port is None:
        transport.port = args.port
    else:
        try:
            transport.port = int(env_port)
        except ValueError:
            parser.error("MCP_PORT must be an integer")

    if transport.is_http and (transport.host is None or transport.port is None):
        parser.error(f"{transport.name} needs a host and port (--bind/--port or MCP_HOST/MCP_PORT)")
    if not transport.is_http and transport.path:
        parser.error("a mount path only applies to HTTP transports")
    return transport


def _load_settings(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> Settings:
    overrides: dict[str, Any] = {}
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.batch_delay is not None:
        overrides["batch_delay"] = args.batch_delay
    if args.env_file is not None:
        if not args.env_file.is_file():
            parser.error(f"env file not found: {args.env_file}")
        overrides["_env_file"] = args.env_file
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        parser.error(f"invalid settings: {errors}")


def _report_upstreams(settings: Settings) -> None:
    if settings.omdb_api_key:
        logger.info("OMDb configured at %s", settings.omdb_base_url)
    else:
        logger.warning(
            "OMDB_API_KEY is not set; searches and lookups will return empty results"
        )
    if not settings.youtube_api_key:
        logger.warning(
            "YOUTUBE_API_KEY is not set; trailers will fall back to search links"
        )
    logger.info(
        "Caching metadata for %ss and trailers for %ss; batches of %d every %ss",
        settings.metadata_cache_ttl,
        settings.trailer_cache_ttl,
        settings.batch_size,
        settings.batch_delay,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for running the MoodFlix server."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    level = args.log_level or (os.getenv("LOG_LEVEL") or "info").lower()
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))

    transport = _resolve_transport(args, parser)
    settings = _load_settings(args, parser)
    _report_upstreams(settings)

    moodflix_server.configure(settings)
    moodflix_server.run(**transport.run_kwargs())


__all__ = ["Transport", "main", "moodflix_server"]

"""Operator CLI for the Concert Companion backend.

Usage::

    # Create the SQLite schema (idempotent)
    python -m src.cli.concerts init-db

    # Run the concert aggregation for a stored user and print the JSON
    python -m src.cli.concerts lookup 31abcxyz --limit 5 --artists 10 --country-code GB

Reads the same ``.env`` / environment variables as the web server.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from src.config.settings import Settings
from src.providers.user_store.sqlite_user_repository import SQLiteUserRepository
from src.utils.errors import ConcertCompanionError, NotFoundError
from src.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_init_db(args: argparse.Namespace, settings: Settings) -> int:
    """Create the users / user_artists tables."""
    db_path = args.db or settings.database_path
    repository = SQLiteUserRepository(db_path=db_path)
    await repository.initialize()
    print(f"Database ready: {db_path}")
    return 0


async def _handle_lookup(args: argparse.Namespace, settings: Settings) -> int:
    """Aggregate upcoming concerts for one stored user."""
    from src.providers.event.ticketmaster_provider import TicketmasterProvider
    from src.services.concert_service import ConcertAggregationService

    repository = SQLiteUserRepository(db_path=args.db or settings.database_path)
    await repository.initialize()

    async with httpx.AsyncClient(timeout=30.0) as client:
        service = ConcertAggregationService(
            user_repository=repository,
            concert_search=TicketmasterProvider(http_client=client, settings=settings),
            max_concurrency=settings.concert_search_concurrency,
        )
        try:
            result = await service.aggregate_for_user(
                args.spotify_id,
                events_per_artist=args.limit,
                artist_limit=args.artists,
                country_code=args.country_code,
            )
        except NotFoundError as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            return 1
        except ConcertCompanionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the concerts CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.concerts",
        description="Concert Companion database and lookup tools.",
    )
    parser.add_argument("--db", help="SQLite database path (default: DATABASE_PATH)")
    subparsers = parser.add_subparsers(dest="command", help="Concert Companion commands")

    subparsers.add_parser("init-db", help="Create the database schema")

    lookup_parser = subparsers.add_parser(
        "lookup", help="Find upcoming concerts for a stored user's top artists"
    )
    lookup_parser.add_argument("spotify_id", help="Spotify user ID")
    lookup_parser.add_argument("--limit", type=int, help="Events per artist (1-10, default 3)")
    lookup_parser.add_argument("--artists", type=int, help="Top artists to search (1-20, default 5)")
    lookup_parser.add_argument("--country-code", help="ISO-3166 alpha-2 country override")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the concerts tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = Settings()
    # stdout carries the command output (lookup prints JSON).
    configure_logging(log_level=settings.log_level, stream=sys.stderr)

    if args.command == "init-db":
        exit_code = asyncio.run(_handle_init_db(args, settings))
    elif args.command == "lookup":
        exit_code = asyncio.run(_handle_lookup(args, settings))
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""
Main CLI entry point for the SecondTurn BGG package.
"""

import argparse
import json
import logging
from typing import List, Optional

from ..error_handling import SearchError
from ..logging_config import setup_logging
from ..models import BGGModel, SearchFilters
from ..service import BGGService

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="secondturn-bgg",
        description="Search BoardGameGeek and suggest localized titles for game versions",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-file", type=str, default=None, help="Log file name or absolute path")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search games by title")
    search.add_argument("query", help="Title to search for")
    search.add_argument("--type", dest="game_type", choices=["base-game", "expansion"], default=None,
                        help="Only base games or only expansions")
    search.add_argument("--light", action="store_true", help="Single request, no metadata enrichment")

    details = subparsers.add_parser("details", help="Show details for one game")
    details.add_argument("game_id", help="BGG game id")

    versions = subparsers.add_parser("versions", help="Suggest localized titles for each version of a game")
    versions.add_argument("game_id", help="BGG game id")

    return parser


def _dump(value) -> object:
    if isinstance(value, BGGModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


def print_json(value) -> None:
    print(json.dumps(_dump(value), indent=2, ensure_ascii=False))


def _banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def run_search(service: BGGService, args: argparse.Namespace) -> int:
    if args.light:
        bgg_type = SearchFilters(game_type=args.game_type).bgg_type if args.game_type else None
        results = service.search_light(args.query, game_type=bgg_type)
    else:
        filters = SearchFilters(game_type=args.game_type) if args.game_type else None
        results = service.search_games(args.query, filters)

    if args.json:
        print_json(results)
        return 0

    _banner(f"SEARCH RESULTS FOR '{args.query}'")
    if not results:
        print("No games found.")
        return 0
    for result in results:
        year = f" ({result.year_published})" if result.year_published else ""
        kind = "expansion" if result.is_expansion else "base game"
        rank = f" | rank {result.rank}" if result.rank else ""
        print(f"{result.id:>8} | {result.name}{year} | {kind}{rank}")
    print(f"\nTotal: {len(results)}")
    return 0


def run_details(service: BGGService, args: argparse.Namespace) -> int:
    game = service.get_game_details(args.game_id)
    if game is None:
        print(f"Game {args.game_id} not found.")
        return 1

    if args.json:
        print_json(game)
        return 0

    _banner(f"{game.name} ({game.year_published or 'n/a'})")
    print(f"Type: {'expansion' if game.is_expansion else 'base game'}")
    if game.min_players or game.max_players:
        print(f"Players: {game.min_players}-{game.max_players}")
    if game.playing_time:
        print(f"Playing time: {game.playing_time} min")
    if game.rank:
        print(f"BGG rank: {game.rank}")
    if game.rating:
        print(f"Rating: {game.rating:.2f}")
    if game.designers:
        print(f"Designers: {', '.join(game.designers)}")
    print(f"Versions: {len(game.versions)}")
    print(f"Alternate names: {len(game.alternate_names)}")
    return 0


def run_versions(service: BGGService, args: argparse.Namespace) -> int:
    if service.get_game_details(args.game_id) is None:
        print(f"Game {args.game_id} not found.")
        return 1

    matched = service.get_language_matched_versions(args.game_id)
    if args.json:
        print_json(matched)
        return 0

    _banner(f"VERSIONS OF {args.game_id}")
    if not matched:
        print("No versions listed.")
        return 0
    for match in matched:
        version = match.version
        language = version.primary_language or "unknown"
        print(f"{version.id:>8} | {version.name} | {language}")
        print(f"  └─ Suggested: {match.suggested_alternate_name} "
              f"({match.language_match.value}, {match.confidence:.0%}) - {match.reasoning}")
        if version.dimensions and version.dimensions.has_dimensions:
            print(f"  └─ Box: {version.dimensions.metric}")
    return 0


COMMANDS = {
    "search": run_search,
    "details": run_details,
    "versions": run_versions,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, level=getattr(logging, args.log_level))

    service = BGGService()
    try:
        return COMMANDS[args.command](service, args)
    except SearchError as e:
        retry = f" Retry in {e.retry_after}s." if e.retry_after else ""
        print(f"Search failed: {e.message}{retry}")
        return 1
    except KeyboardInterrupt:
        print("\nProcess interrupted by user")
        return 130
    finally:
        service.close()


if __name__ == "__main__":
    raise SystemExit(main())

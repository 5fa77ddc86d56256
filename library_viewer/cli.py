"""Print a Steam library view or dashboard from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Optional

from dotenv import load_dotenv

from .client import LibraryClient
from .stats import SORT_KEYS
from .viewer import LibraryViewer

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("steam_id", help="17-digit Steam ID of the library owner")
    parser.add_argument(
        "--sort-by",
        choices=SORT_KEYS,
        default="playtime",
        help="Game ordering (default: playtime)",
    )
    parser.add_argument(
        "--dashboard",
        action="store_true",
        help="Show the dashboard summary instead of the game list.",
    )
    parser.add_argument(
        "--base-url",
        help="Library service URL. Defaults to LIBRARY_API_BASE_URL or localhost.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser.parse_args(argv)


def _build_client(base_url: Optional[str]) -> LibraryClient:
    client = LibraryClient.from_env()
    if not base_url:
        return client
    timeout = client.timeout
    client.close()
    return LibraryClient(base_url, timeout)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    with _build_client(args.base_url) as client:
        viewer = LibraryViewer(client)
        if args.dashboard:
            result = viewer.load_dashboard(args.steam_id)
            payload = result.dashboard if result else None
        else:
            result = viewer.search(args.steam_id, args.sort_by)
            payload = result.view if result else None

    if result is None:
        return 1
    print(result.message.text, file=sys.stderr)
    if payload is None:
        return 1
    print(payload.model_dump_json(by_alias=True, indent=2))
    return 0 if result.message.level == "success" else 1


if __name__ == "__main__":
    raise SystemExit(main())

"""Statistics and display helpers computed from canonical game records."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Any, Optional, Union

from .models import (
    Achievements,
    Badge,
    DashboardFlags,
    DashboardSummary,
    DisplayDashboard,
    DisplayGame,
    GameRecord,
    GameStats,
    LibraryView,
    PlaytimeCategories,
    SortKey,
)
from .normalizer import coerce_number
from .validator import find_malformed

logger = logging.getLogger(__name__)

PLAYTIME_INVALID = "invalid"
NEVER_PLAYED = "never played"
MINUTES_PER_HOUR = 60

COLLECTOR_GAMES = 50
MARATHON_MINUTES = 6000

CASUAL_MAX_MINUTES = 180
REGULAR_MAX_MINUTES = 1200

SORT_KEYS = ("name", "playtime")

# Above this, numbers switch to exponent notation instead of long digit runs.
PLAIN_NUMBER_LIMIT = 1e15


def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _format_number(value: float) -> str:
    if abs(value) >= PLAIN_NUMBER_LIMIT:
        return f"{value:g}"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _minutes(game: GameRecord) -> int:
    return 0 if game.playtime_invalid else game.playtime_minutes


def format_playtime(minutes: Any) -> str:
    """Render a playtime for display.

    Unparsable or negative input gives ``"invalid"``, zero gives
    ``"never played"``, anything under an hour is shown in minutes
    (``"59min"``) and the rest in hours with one decimal (``"1.5h"``).
    """
    number = coerce_number(minutes)
    if number is None or number < 0:
        return PLAYTIME_INVALID
    if number == 0:
        return NEVER_PLAYED
    if number < MINUTES_PER_HOUR:
        return f"{_format_number(number)}min"
    return f"{_format_number(round1(number / MINUTES_PER_HOUR))}h"


def format_game_playtime(game: GameRecord) -> str:
    if game.playtime_invalid:
        return PLAYTIME_INVALID
    return format_playtime(game.playtime_minutes)


def to_display(game: GameRecord) -> DisplayGame:
    return DisplayGame(
        **game.model_dump(exclude={"has_icon"}),
        playtime_text=format_game_playtime(game),
    )


def compute_stats(games: Sequence[GameRecord]) -> GameStats:
    if not games:
        return GameStats()

    total_minutes = 0
    games_with_playtime = 0
    most_played: Optional[GameRecord] = None
    for game in games:
        minutes = _minutes(game)
        total_minutes += minutes
        if minutes > 0:
            games_with_playtime += 1
        if most_played is None or minutes > _minutes(most_played):
            most_played = game

    total_hours = round1(total_minutes / MINUTES_PER_HOUR)
    average_hours = (
        round1(total_hours / games_with_playtime) if games_with_playtime else 0.0
    )
    if most_played is not None and _minutes(most_played) == 0:
        most_played = None

    return GameStats(
        total_games=len(games),
        total_minutes=total_minutes,
        total_hours=total_hours,
        average_hours=average_hours,
        most_played_game=most_played,
        games_with_playtime=games_with_playtime,
    )


def format_dashboard(summary: Optional[DashboardSummary]) -> DisplayDashboard:
    """Prepare a dashboard summary for display.

    The average here divides by every game in the library, unlike
    :func:`compute_stats`, which only counts games that were played.
    """
    if summary is None:
        return DisplayDashboard()

    if summary.total_hours < 1:
        total_hours_text = f"{summary.total_minutes}min"
    else:
        total_hours_text = f"{_format_number(summary.total_hours)}h"

    has_games = summary.total_games > 0
    has_playtime = summary.total_minutes > 0
    average_hours = 0.0
    if has_games and has_playtime:
        average_hours = round1(
            summary.total_minutes / summary.total_games / MINUTES_PER_HOUR
        )

    most_recent = summary.most_recent_game
    return DisplayDashboard(
        total_games=summary.total_games,
        total_hours=total_hours_text,
        total_minutes=summary.total_minutes,
        top5_games=[to_display(game) for game in summary.top5_most_played],
        most_recent_game=to_display(most_recent) if most_recent else None,
        generated_at=summary.generated_at,
        stats=DashboardFlags(
            has_games=has_games,
            has_playtime=has_playtime,
            average_hours=(
                f"{_format_number(average_hours)}h" if average_hours > 0 else "0h"
            ),
        ),
    )


def compute_achievements(totals: Union[GameStats, DashboardSummary]) -> Achievements:
    if totals.total_games >= COLLECTOR_GAMES:
        collector = Badge(active=True)
    else:
        collector = Badge(active=False, needed=COLLECTOR_GAMES - totals.total_games)

    if totals.total_minutes >= MARATHON_MINUTES:
        marathon = Badge(active=True)
    else:
        remaining = (MARATHON_MINUTES - totals.total_minutes) / MINUTES_PER_HOUR
        marathon = Badge(active=False, needed=math.floor(remaining + 0.5))

    return Achievements(collector=collector, marathon=marathon)


def sort_games(games: Iterable[GameRecord], sort_by: str = "playtime") -> list[GameRecord]:
    """Order games by name (A-Z) or by playtime (most played first); ties keep input order."""
    if sort_by == "name":
        return sorted(games, key=lambda game: game.name)
    if sort_by == "playtime":
        return sorted(games, key=_minutes, reverse=True)
    raise ValueError(f"sort_by must be one of {SORT_KEYS}, got {sort_by!r}")


def categorize_by_playtime(games: Iterable[GameRecord]) -> PlaytimeCategories:
    buckets: dict[str, list[GameRecord]] = {
        "never_played": [],
        "casual": [],
        "regular": [],
        "hardcore": [],
    }
    for game in games:
        minutes = _minutes(game)
        if minutes == 0:
            buckets["never_played"].append(game)
        elif minutes <= CASUAL_MAX_MINUTES:
            buckets["casual"].append(game)
        elif minutes <= REGULAR_MAX_MINUTES:
            buckets["regular"].append(game)
        else:
            buckets["hardcore"].append(game)
    return PlaytimeCategories(**buckets)


def build_library_view(
    steam_id: str, sort_by: SortKey, games: Sequence[GameRecord]
) -> LibraryView:
    malformed = find_malformed(games)
    if malformed:
        logger.warning(
            "Library of %s has %d malformed records at positions %s",
            steam_id,
            len(malformed),
            malformed,
        )
    ordered = sort_games(games, sort_by)
    stats = compute_stats(games)
    logger.debug(
        "Library view for %s: %d games, %s total hours",
        steam_id,
        stats.total_games,
        stats.total_hours,
    )
    return LibraryView(
        steam_id=steam_id,
        sort_by=sort_by,
        games=[to_display(game) for game in ordered],
        stats=stats,
        achievements=compute_achievements(stats),
        categories=categorize_by_playtime(ordered),
        malformed_count=len(malformed),
    )

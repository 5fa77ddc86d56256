"""Tests for the statistics and display helpers in :mod:`library_viewer.stats`."""

from __future__ import annotations

import logging

import pytest

from library_viewer.models import DashboardSummary, GameRecord, GameStats
from library_viewer.normalizer import normalize, normalize_many
from library_viewer.stats import (
    NEVER_PLAYED,
    PLAYTIME_INVALID,
    build_library_view,
    categorize_by_playtime,
    compute_achievements,
    compute_stats,
    format_dashboard,
    format_game_playtime,
    format_playtime,
    round1,
    sort_games,
)


def _game(app_id: str, minutes: int, name: str | None = None) -> GameRecord:
    return GameRecord(app_id=app_id, name=name or f"Game {app_id}", playtime_minutes=minutes)


def _library(*minutes: int) -> list[GameRecord]:
    return [_game(str(idx), value) for idx, value in enumerate(minutes, start=1)]


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0, NEVER_PLAYED),
        ("0", NEVER_PLAYED),
        (1, "1min"),
        (59, "59min"),
        (60, "1h"),
        (90, "1.5h"),
        (125, "2.1h"),
        (6000, "100h"),
        ("120", "2h"),
        (-5, PLAYTIME_INVALID),
        ("abc", PLAYTIME_INVALID),
        (None, PLAYTIME_INVALID),
        (True, PLAYTIME_INVALID),
    ],
)
def test_format_playtime(minutes: object, expected: str) -> None:
    assert format_playtime(minutes) == expected


def test_format_game_playtime_keeps_invalid_apart_from_zero() -> None:
    broken = normalize({"appId": "1", "name": "Broken", "playtimeMinutes": "abc"})
    unplayed = normalize({"appId": "2", "name": "Unplayed", "playtimeMinutes": 0})

    assert broken.playtime_minutes == unplayed.playtime_minutes == 0
    assert format_game_playtime(broken) == PLAYTIME_INVALID
    assert format_game_playtime(unplayed) == NEVER_PLAYED


@pytest.mark.parametrize(
    ("value", "expected"),
    [(36.8333, 36.8), (0.25, 0.3), (2.05001, 2.1), (1.0, 1.0)],
)
def test_round1_rounds_half_up(value: float, expected: float) -> None:
    assert round1(value) == expected


def test_format_playtime_huge_values_use_exponent() -> None:
    assert format_playtime(1e300) == "1.66667e+298h"


def test_compute_stats_empty() -> None:
    stats = compute_stats([])

    assert stats == GameStats(
        total_games=0,
        total_minutes=0,
        total_hours=0.0,
        average_hours=0.0,
        most_played_game=None,
        games_with_playtime=0,
    )


def test_compute_stats_end_to_end() -> None:
    stats = compute_stats(_library(0, 30, 600, 6000))

    assert stats.total_games == 4
    assert stats.total_minutes == 6630
    assert stats.total_hours == 110.5
    assert stats.games_with_playtime == 3
    assert stats.most_played_game is not None
    assert stats.most_played_game.playtime_minutes == 6000
    assert stats.average_hours == 36.8
    assert compute_achievements(stats).marathon.active is True


def test_compute_stats_ties_pick_first() -> None:
    games = [_game("a", 100), _game("b", 100)]

    assert compute_stats(games).most_played_game == games[0]
    assert compute_stats(list(reversed(games))).most_played_game == games[1]


def test_compute_stats_totals_ignore_order() -> None:
    games = _library(10, 0, 700, 45)

    forward = compute_stats(games)
    backward = compute_stats(list(reversed(games)))

    assert forward.total_minutes == backward.total_minutes
    assert forward.total_hours == backward.total_hours
    assert forward.games_with_playtime == backward.games_with_playtime


def test_compute_stats_all_unplayed() -> None:
    stats = compute_stats(_library(0, 0))

    assert stats.most_played_game is None
    assert stats.average_hours == 0
    assert stats.total_games == 2


def test_compute_stats_counts_invalid_playtime_as_zero() -> None:
    games = normalize_many(
        [
            {"appId": "1", "name": "Broken", "playtimeMinutes": "abc"},
            {"appId": "2", "name": "Played", "playtimeMinutes": 120},
        ]
    )

    stats = compute_stats(games)

    assert stats.total_minutes == 120
    assert stats.games_with_playtime == 1
    assert stats.most_played_game is not None
    assert stats.most_played_game.name == "Played"


def test_collector_badge_threshold() -> None:
    fifty = compute_achievements(compute_stats(_library(*([0] * 50))))
    forty_nine = compute_achievements(compute_stats(_library(*([0] * 49))))

    assert fifty.collector.active is True
    assert fifty.collector.needed == 0
    assert forty_nine.collector.active is False
    assert forty_nine.collector.needed == 1


def test_marathon_badge_reports_hours_left() -> None:
    achievements = compute_achievements(compute_stats(_library(3000, 30)))

    assert achievements.marathon.active is False
    # 2970 minutes left is 49.5 hours, rounded up
    assert achievements.marathon.needed == 50


def test_achievements_from_dashboard_summary() -> None:
    summary = DashboardSummary(total_games=50, total_minutes=6000, total_hours=100.0)

    achievements = compute_achievements(summary)

    assert achievements.collector.active and achievements.marathon.active


def test_format_dashboard() -> None:
    summary = DashboardSummary(
        total_games=4,
        total_minutes=6630,
        total_hours=110.5,
        top5_most_played=[_game("730", 6000, "CS2"), _game("570", 45, "Dota 2")],
        most_recent_game=_game("999", 0, "New"),
        generated_at="2024-05-01T10:00:00",
    )

    display = format_dashboard(summary)

    assert display.total_games == 4
    assert display.total_hours == "110.5h"
    assert display.total_minutes == 6630
    assert [game.playtime_text for game in display.top5_games] == ["100h", "45min"]
    assert display.most_recent_game is not None
    assert display.most_recent_game.playtime_text == NEVER_PLAYED
    assert display.generated_at == "2024-05-01T10:00:00"
    assert display.stats.has_games is True
    assert display.stats.has_playtime is True
    # divides by every game: 6630 / 4 / 60 = 27.625
    assert display.stats.average_hours == "27.6h"


def test_dashboard_and_stats_averages_differ() -> None:
    games = _library(0, 30, 600, 6000)
    stats = compute_stats(games)
    summary = DashboardSummary(
        total_games=stats.total_games,
        total_minutes=stats.total_minutes,
        total_hours=stats.total_hours,
    )

    assert stats.average_hours == 36.8
    assert format_dashboard(summary).stats.average_hours == "27.6h"


def test_format_dashboard_under_an_hour_uses_minutes() -> None:
    summary = DashboardSummary(total_games=2, total_minutes=30, total_hours=0.5)

    display = format_dashboard(summary)

    assert display.total_hours == "30min"
    assert display.stats.average_hours == "0.3h"


def test_format_dashboard_empty() -> None:
    for display in (format_dashboard(None), format_dashboard(DashboardSummary())):
        assert display.total_games == 0
        assert display.top5_games == []
        assert display.most_recent_game is None
        assert display.stats.has_games is False
        assert display.stats.has_playtime is False
        assert display.stats.average_hours == "0h"


def test_sort_games() -> None:
    games = [_game("1", 10, "beta"), _game("2", 500, "Alpha"), _game("3", 10, "Gamma")]

    assert [game.app_id for game in sort_games(games, "playtime")] == ["2", "1", "3"]
    assert [game.name for game in sort_games(games, "name")] == ["Alpha", "Gamma", "beta"]
    with pytest.raises(ValueError):
        sort_games(games, "rating")


def test_categorize_by_playtime() -> None:
    categories = categorize_by_playtime(_library(0, 1, 180, 181, 1200, 1201))

    assert [game.playtime_minutes for game in categories.never_played] == [0]
    assert [game.playtime_minutes for game in categories.casual] == [1, 180]
    assert [game.playtime_minutes for game in categories.regular] == [181, 1200]
    assert [game.playtime_minutes for game in categories.hardcore] == [1201]


def test_build_library_view() -> None:
    games = [
        _game("1", 100, "Tie A"),
        _game("2", 0, "Unplayed"),
        _game("3", 100, "Tie B"),
    ]

    view = build_library_view("76561198010872093", "name", games)

    assert [game.name for game in view.games] == ["Tie A", "Tie B", "Unplayed"]
    assert view.games[2].playtime_text == NEVER_PLAYED
    assert view.stats.total_minutes == 200
    assert view.stats.most_played_game == games[0]
    assert view.achievements.collector.needed == 47
    assert len(view.categories.casual) == 2


def test_build_library_view_reports_malformed_records(
    caplog: pytest.LogCaptureFixture,
) -> None:
    games = normalize_many(
        [
            {"appId": "1", "name": "Fine", "playtimeMinutes": 10},
            {"appId": "2", "name": "  ", "playtimeMinutes": 5},
            {"appId": "3", "name": "Broken", "playtimeMinutes": "abc"},
        ]
    )

    with caplog.at_level(logging.WARNING, logger="library_viewer.stats"):
        view = build_library_view("76561198010872093", "playtime", games)

    assert view.malformed_count == 2
    assert "2 malformed records at positions [1, 2]" in caplog.text


def test_build_library_view_well_formed_is_quiet(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="library_viewer.stats"):
        view = build_library_view("76561198010872093", "name", _library(10, 20))

    assert view.malformed_count == 0
    assert "malformed" not in caplog.text

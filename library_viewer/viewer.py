"""Viewer controller: validates input, calls the service and builds views."""

from __future__ import annotations

import logging
from typing import Optional

from .client import LibraryApiError, LibraryClient
from .models import (
    DashboardResult,
    MessageLevel,
    SearchParams,
    SearchResult,
    ViewerMessage,
    ViewerState,
)
from .stats import SORT_KEYS, build_library_view, format_dashboard
from .validator import INVALID_ID_HINT, is_valid_identifier

logger = logging.getLogger(__name__)

MISSING_ID_MESSAGE = "Please enter a Steam ID."
EMPTY_LIBRARY_MESSAGE = (
    "No games found. Check that the Steam ID is correct and the profile is public."
)


def _message(level: MessageLevel, text: str) -> ViewerMessage:
    return ViewerMessage(level=level, text=text)


def describe_error(exc: LibraryApiError, action: str = "load games") -> str:
    prefix = f"Could not {action}. "
    if exc.timeout:
        return prefix + "The request timed out. Please try again."
    if exc.network:
        return prefix + "Check your internet connection and that the server is running."
    return prefix + (str(exc) or "Please try again in a few moments.")


def loaded_message(count: int) -> str:
    return f"{count} game{'s' if count != 1 else ''} loaded"


class LibraryViewer:
    """Runs searches for one user session and keeps its state explicit.

    The loading flags only reject re-entrant calls; a second search while one
    is running returns ``None`` instead of being queued.
    """

    def __init__(self, client: LibraryClient, state: Optional[ViewerState] = None) -> None:
        self.client = client
        self.state = state if state is not None else ViewerState()

    def _check_identifier(self, steam_id: Optional[str]) -> tuple[str, Optional[ViewerMessage]]:
        cleaned = (steam_id or "").strip()
        if not cleaned:
            return cleaned, _message("error", MISSING_ID_MESSAGE)
        if not is_valid_identifier(cleaned):
            return cleaned, _message("error", INVALID_ID_HINT)
        return cleaned, None

    def search(self, steam_id: Optional[str], sort_by: str = "playtime") -> Optional[SearchResult]:
        if self.state.is_loading:
            logger.debug("Ignoring search for %s while another search runs", steam_id)
            return None

        cleaned, problem = self._check_identifier(steam_id)
        if problem:
            return SearchResult(message=problem)
        if sort_by not in SORT_KEYS:
            return SearchResult(
                message=_message("error", 'Sort order must be "name" or "playtime".')
            )

        self.state.last_search = SearchParams(steam_id=cleaned, sort_by=sort_by)
        self.state.is_loading = True
        try:
            logger.debug("Searching library of %s sorted by %s", cleaned, sort_by)
            games = self.client.get_user_games(cleaned, sort_by)
        except LibraryApiError as exc:
            logger.warning("Library search for %s failed: %s", cleaned, exc)
            return SearchResult(message=_message("error", describe_error(exc)))
        finally:
            self.state.is_loading = False

        if not games:
            return SearchResult(message=_message("warning", EMPTY_LIBRARY_MESSAGE))

        self.state.current_games = games
        view = build_library_view(cleaned, sort_by, games)
        return SearchResult(view=view, message=_message("success", loaded_message(len(games))))

    def load_dashboard(self, steam_id: Optional[str]) -> Optional[DashboardResult]:
        if self.state.is_dashboard_loading:
            logger.debug("Ignoring dashboard request for %s while one runs", steam_id)
            return None

        cleaned, problem = self._check_identifier(steam_id)
        if problem:
            return DashboardResult(message=problem)

        self.state.is_dashboard_loading = True
        try:
            summary = self.client.get_user_dashboard(cleaned)
        except LibraryApiError as exc:
            logger.warning("Dashboard for %s failed: %s", cleaned, exc)
            return DashboardResult(
                message=_message("error", describe_error(exc, "load the dashboard"))
            )
        finally:
            self.state.is_dashboard_loading = False

        dashboard = format_dashboard(summary)
        if not dashboard.stats.has_games:
            return DashboardResult(
                dashboard=dashboard, message=_message("warning", EMPTY_LIBRARY_MESSAGE)
            )
        return DashboardResult(dashboard=dashboard, message=_message("success", "Dashboard loaded"))

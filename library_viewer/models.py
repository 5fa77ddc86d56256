"""Pydantic models shared across the Steam Library Viewer."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

SortKey = Literal["name", "playtime"]
MessageLevel = Literal["success", "error", "warning", "info"]


class ValueModel(BaseModel):
    """Immutable value object serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )


class GameRecord(ValueModel):
    """Canonical game entry, the only shape seen after normalization."""

    app_id: str
    name: str = ""
    playtime_minutes: int = Field(default=0, ge=0)
    icon_url: str = ""
    playtime_invalid: bool = False

    @computed_field(alias="hasIcon")
    @property
    def has_icon(self) -> bool:
        icon = self.icon_url.strip()
        return bool(icon) and "undefined" not in icon


class DisplayGame(GameRecord):
    playtime_text: str


class DashboardSummary(ValueModel):
    """Aggregate computed by the remote service for one user."""

    total_games: int = 0
    total_minutes: int = 0
    total_hours: float = 0.0
    top5_most_played: list[GameRecord] = Field(default_factory=list)
    most_recent_game: Optional[GameRecord] = None
    generated_at: str = ""


class GameStats(ValueModel):
    total_games: int = 0
    total_minutes: int = 0
    total_hours: float = 0.0
    average_hours: float = 0.0
    most_played_game: Optional[GameRecord] = None
    games_with_playtime: int = 0


class DashboardFlags(ValueModel):
    has_games: bool = False
    has_playtime: bool = False
    average_hours: str = "0h"


class DisplayDashboard(ValueModel):
    total_games: int = 0
    total_hours: str = "0h"
    total_minutes: int = 0
    top5_games: list[DisplayGame] = Field(default_factory=list)
    most_recent_game: Optional[DisplayGame] = None
    generated_at: Optional[str] = None
    stats: DashboardFlags = Field(default_factory=DashboardFlags)


class Badge(ValueModel):
    """Achievement state; ``needed`` is what is left to unlock it (0 once active)."""

    active: bool
    needed: int = 0


class Achievements(ValueModel):
    collector: Badge
    marathon: Badge


class PlaytimeCategories(ValueModel):
    never_played: list[GameRecord] = Field(default_factory=list)
    casual: list[GameRecord] = Field(default_factory=list)
    regular: list[GameRecord] = Field(default_factory=list)
    hardcore: list[GameRecord] = Field(default_factory=list)


class LibraryView(ValueModel):
    """Everything the rendering layer needs to draw a library search."""

    steam_id: str
    sort_by: SortKey = "playtime"
    games: list[DisplayGame] = Field(default_factory=list)
    stats: GameStats = Field(default_factory=GameStats)
    achievements: Achievements
    categories: PlaytimeCategories = Field(default_factory=PlaytimeCategories)
    malformed_count: int = 0


class ViewerMessage(ValueModel):
    level: MessageLevel = "info"
    text: str


class SearchResult(ValueModel):
    message: ViewerMessage
    view: Optional[LibraryView] = None


class DashboardResult(ValueModel):
    message: ViewerMessage
    dashboard: Optional[DisplayDashboard] = None


class SearchParams(ValueModel):
    steam_id: str
    sort_by: SortKey = "playtime"


class ViewerState(BaseModel):
    """Mutable state owned by a single viewer session."""

    is_loading: bool = False
    is_dashboard_loading: bool = False
    current_games: list[GameRecord] = Field(default_factory=list)
    last_search: Optional[SearchParams] = None

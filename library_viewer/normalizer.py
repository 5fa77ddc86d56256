"""Turn raw library payloads into the canonical record shapes.

The remote service answers with two naming conventions for the same data: a
camelCase shape that already matches :class:`GameRecord` and the snake_case
shape used by the Steam Web API (``app_id``/``appid``, ``playtime_forever``,
``img_icon_url``). The shape is detected once, here, so the rest of the
package only ever sees canonical records.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Literal, Optional

from pydantic.alias_generators import to_camel

from .models import DashboardSummary, GameRecord

logger = logging.getLogger(__name__)

RawShape = Literal["snake", "camel"]
SNAKE_ID_KEYS = ("app_id", "appid")
DASHBOARD_TOP_LIMIT = 5


class InvalidInputError(TypeError):
    """Raised when a caller hands the normalizer something that is not a record."""


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_playtime(value: Any) -> Optional[int]:
    """Parse a raw playtime into whole minutes.

    Missing values mean "never played" and give ``0``. ``None`` is returned
    only for values that are present but unusable (non-numeric or negative).
    Fractional minutes are truncated (``12.7`` becomes ``12``).
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value if value >= 0 else None
    number = coerce_number(value)
    if number is None or number < 0:
        return None
    return int(number)


def _populated(value: Any) -> bool:
    return value is not None and value != ""


def _snake_id(raw: Mapping[str, Any]) -> Any:
    for key in SNAKE_ID_KEYS:
        if _populated(raw.get(key)):
            return raw[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def detect_shape(raw: Mapping[str, Any]) -> RawShape:
    if _snake_id(raw) is not None and not _populated(raw.get("appId")):
        return "snake"
    return "camel"


def _build_record(
    app_id: Any, name: Any, playtime: Any, icon_url: Any, invalid: bool = False
) -> GameRecord:
    minutes = None if invalid else parse_playtime(playtime)
    if minutes is None:
        logger.debug("Unparsable playtime %r for app %s", playtime, app_id)
    return GameRecord(
        app_id=_text(app_id),
        name=_text(name),
        playtime_minutes=minutes or 0,
        icon_url=_text(icon_url),
        playtime_invalid=minutes is None,
    )


def _from_snake(raw: Mapping[str, Any]) -> GameRecord:
    return _build_record(
        _snake_id(raw),
        raw.get("name"),
        raw.get("playtime_forever") or 0,
        raw.get("img_icon_url") or "",
    )


def _from_camel(raw: Mapping[str, Any]) -> GameRecord:
    playtime = raw.get("playtimeMinutes")
    if playtime is None:
        playtime = raw.get("playtimeForever")
    icon_url = raw.get("iconUrl")
    if icon_url is None:
        icon_url = raw.get("imgIconUrl")
    return _build_record(
        raw.get("appId"),
        raw.get("name"),
        playtime,
        icon_url,
        invalid=raw.get("playtimeInvalid") is True,
    )


def normalize(raw: Any) -> GameRecord:
    """Return the canonical record for a raw game entry of either shape."""
    if isinstance(raw, GameRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Expected a game record mapping, got {type(raw).__name__}"
        )
    if detect_shape(raw) == "snake":
        return _from_snake(raw)
    return _from_camel(raw)


def normalize_many(raws: Sequence[Any]) -> list[GameRecord]:
    if isinstance(raws, (str, bytes, Mapping)) or not isinstance(raws, Sequence):
        raise InvalidInputError(
            f"Expected a sequence of game records, got {type(raws).__name__}"
        )
    games = [normalize(raw) for raw in raws]
    logger.debug("Normalized %d game records", len(games))
    return games


def _pick(raw: Mapping[str, Any], snake_key: str) -> Any:
    value = raw.get(snake_key)
    if value is None:
        value = raw.get(to_camel(snake_key))
    return value


def _count(value: Any) -> int:
    return parse_playtime(value) or 0


def _optional_record(raw: Any) -> Optional[GameRecord]:
    if not raw:
        return None
    return normalize(raw)


def normalize_dashboard(raw: Any) -> DashboardSummary:
    """Map the dashboard payload onto :class:`DashboardSummary`.

    Keys are read in snake_case first, then in camelCase.
    """
    if isinstance(raw, DashboardSummary):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Expected a dashboard mapping, got {type(raw).__name__}"
        )
    top_games = normalize_many(_pick(raw, "top5_most_played") or [])
    if len(top_games) > DASHBOARD_TOP_LIMIT:
        logger.warning(
            "Dashboard listed %d top games; keeping the first %d",
            len(top_games),
            DASHBOARD_TOP_LIMIT,
        )
    return DashboardSummary(
        total_games=_count(_pick(raw, "total_games")),
        total_minutes=_count(_pick(raw, "total_minutes")),
        total_hours=coerce_number(_pick(raw, "total_hours")) or 0.0,
        top5_most_played=top_games[:DASHBOARD_TOP_LIMIT],
        most_recent_game=_optional_record(_pick(raw, "most_recent_game")),
        generated_at=_text(_pick(raw, "generated_at")),
    )

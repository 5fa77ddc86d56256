"""Format checks for Steam identifiers and canonical records."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from .models import GameRecord

# Two overlapping shapes of a 64-bit Steam ID; this is a format check, not a checksum.
STEAM_ID_PATTERNS = (
    re.compile(r"765611980[0-9]{8}"),
    re.compile(r"76561198[0-9]{9}"),
)
INVALID_ID_HINT = "Invalid Steam ID. It must have 17 digits and start with 765611980."


def is_valid_identifier(value: Any) -> bool:
    """Return ``True`` when ``value`` looks like a Steam ID. Callers must trim."""
    if not isinstance(value, str) or not value:
        return False
    return any(pattern.fullmatch(value) for pattern in STEAM_ID_PATTERNS)


def is_well_formed(record: GameRecord) -> bool:
    return bool(
        record.app_id.strip()
        and record.name.strip()
        and not record.playtime_invalid
    )


def find_malformed(records: Iterable[GameRecord]) -> list[int]:
    """Return the positions of records that fail :func:`is_well_formed`."""
    return [idx for idx, record in enumerate(records) if not is_well_formed(record)]

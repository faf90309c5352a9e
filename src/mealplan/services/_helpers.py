"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mealplan.domain.errors import ConfigError


def today_in(timezone: str) -> date:
    """Today's date on the board's wall clock."""
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown timezone: {timezone!r}"
        raise ConfigError(msg, timezone=timezone) from exc
    return datetime.now(tz).date()

"""Day range helpers — keys, labels, and week grouping.

Days are keyed by ISO date (``2019-01-07``).  Labels are presentation only
and come from a ``str.format`` template with ``weekday``, ``month``,
``day`` and ``year`` fields, e.g. ``"{weekday} ({month}/{day})"``.
"""

from __future__ import annotations

from datetime import date, timedelta

DEFAULT_LABEL_FORMAT = "{weekday} ({month}/{day})"


def day_range(start: date, end: date) -> tuple[date, ...]:
    """Every date from *start* through *end*, inclusive."""
    if end < start:
        return ()
    return tuple(start + timedelta(days=i) for i in range((end - start).days + 1))


def day_key(day: date) -> str:
    return day.isoformat()


def day_label(day: date, label_format: str = DEFAULT_LABEL_FORMAT) -> str:
    """Render a human label such as ``Monday (1/7)``."""
    return label_format.format(
        weekday=day.strftime("%A"),
        month=day.month,
        day=day.day,
        year=day.year,
    )


def days_in(start: date, today: date) -> int:
    """Number of whole days elapsed since *start* (negative before it)."""
    return (today - start).days


def make_weeks(day_count: int, elapsed_days: int) -> list[list[int]]:
    """Group day indices into weeks of seven, dropping fully-past weeks.

    The final week is always kept so a finished period still renders.
    """
    weeks: list[list[int]] = []
    for i in range(day_count):
        if i % 7 == 0:
            weeks.append([])
        weeks[-1].append(i)
    if not weeks:
        return []
    weeks_in = min(max(elapsed_days // 7, 0), len(weeks) - 1)
    return weeks[weeks_in:]


def relative_day_text(delta: int, today_text: str = "today") -> str:
    """Describe a day offset: today-text, tomorrow, yesterday, in N days, N days ago."""
    if delta == 0:
        return today_text
    if delta == 1:
        return "tomorrow"
    if delta == -1:
        return "yesterday"
    if delta > 1:
        return f"in {delta} days"
    return f"{-delta} days ago"

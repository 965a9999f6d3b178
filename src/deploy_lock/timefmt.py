"""Time formatters for lock messages.

``locked()`` describes when a lock was created ("5 minutes ago" or
"at 2026-10-19 12:00:00 UTC"), ``expires()`` when it expires ("in 5 minutes"
or "at 12:30:00 UTC"). Both are given aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Protocol


class TimeFormatter(Protocol):
    def locked(self, created_at: datetime, now: datetime) -> str: ...

    def expires(self, expire_at: datetime, now: datetime) -> str: ...


class AbsoluteTimeFormatter:
    def locked(self, created_at: datetime, now: datetime) -> str:
        return "at " + created_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    def expires(self, expire_at: datetime, now: datetime) -> str:
        utc = expire_at.astimezone(timezone.utc)
        if utc.date() == now.astimezone(timezone.utc).date():
            return "at " + utc.strftime("%H:%M:%S UTC")
        return "at " + utc.strftime("%Y-%m-%d %H:%M:%S UTC")


class RelativeTimeFormatter:
    def locked(self, created_at: datetime, now: datetime) -> str:
        return f"{distance_in_words(created_at, now)} ago"

    def expires(self, expire_at: datetime, now: datetime) -> str:
        return f"in {distance_in_words(expire_at, now)}"


def distance_in_words(a: datetime, b: datetime) -> str:
    """Approximate distance between two times, e.g. "about 2 hours"."""
    seconds = abs((b - a).total_seconds())
    minutes = round(seconds / 60)

    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < 1440:
        return f"about {round(minutes / 60)} hours"
    if minutes < 2520:
        return "1 day"
    if minutes < 43200:
        return _plural(round(minutes / 1440), "day")
    if minutes < 86400:
        return "about 1 month"
    if minutes < 525600:
        return _plural(round(minutes / 43200), "month")
    return f"over {_plural(int(minutes // 525600), 'year')}"


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


FORMATTERS = {
    "relative": RelativeTimeFormatter,
    "absolute": AbsoluteTimeFormatter,
}


def get_formatter(name: str) -> TimeFormatter:
    try:
        return FORMATTERS[name]()
    except KeyError:
        raise ValueError(f"unknown time format: {name!r}") from None

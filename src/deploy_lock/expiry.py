"""Parse user-supplied lock expiry times.

The ISO parser accepts only absolute dates/times. The natural parser also
understands durations ("30 minutes", "in 2h", "1 day from now"),
"tomorrow" and a bare "HH:MM" (next occurrence, UTC).
"""

import re
from datetime import datetime, time, timedelta, timezone
from typing import Protocol

_UNITS = {
    "s": "seconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "m": "minutes",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hr": "hours",
    "hrs": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
}

_DURATION = re.compile(
    r"^(?:in\s+)?(?P<amount>\d+)\s*(?P<unit>[a-z]+)(?:\s+from\s+now)?$"
)
_CLOCK = re.compile(r"^(?:at\s+)?(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


class ExpiryParser(Protocol):
    def parse(self, text: str, now: datetime) -> datetime | None: ...


class IsoExpiryParser:
    def parse(self, text: str, now: datetime) -> datetime | None:
        try:
            parsed = datetime.fromisoformat(text.strip())
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)


class NaturalExpiryParser:
    def __init__(self):
        self._iso = IsoExpiryParser()

    def parse(self, text: str, now: datetime) -> datetime | None:
        value = text.strip().lower()

        match = _DURATION.match(value)
        if match:
            unit = _UNITS.get(match["unit"])
            if unit is None:
                return None
            try:
                return now + timedelta(**{unit: int(match["amount"])})
            except (OverflowError, ValueError):
                return None

        if value == "tomorrow":
            return now + timedelta(days=1)

        match = _CLOCK.match(value)
        if match:
            hour, minute = int(match["hour"]), int(match["minute"])
            if hour > 23 or minute > 59:
                return None
            candidate = datetime.combine(now.date(), time(hour, minute), tzinfo=timezone.utc)
            if candidate <= now:
                candidate += timedelta(days=1)
            return candidate

        return self._iso.parse(text, now)


PARSERS = {
    "natural": NaturalExpiryParser,
    "iso": IsoExpiryParser,
}


def get_parser(name: str) -> ExpiryParser:
    try:
        return PARSERS[name]()
    except KeyError:
        raise ValueError(f"unknown expiry format: {name!r}") from None

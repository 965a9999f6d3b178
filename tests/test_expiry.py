"""Tests for expiry.py — parsing lock expiry input."""

from datetime import datetime, timedelta, timezone

import pytest

from deploy_lock.expiry import IsoExpiryParser, NaturalExpiryParser, get_parser

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("30 minutes", NOW + timedelta(minutes=30)),
        ("in 2 hours", NOW + timedelta(hours=2)),
        ("2h", NOW + timedelta(hours=2)),
        ("1 day from now", NOW + timedelta(days=1)),
        ("in 1 week", NOW + timedelta(weeks=1)),
        ("tomorrow", NOW + timedelta(days=1)),
        ("18:30", datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)),
        ("at 09:15", datetime(2026, 10, 20, 9, 15, tzinfo=timezone.utc)),
        ("2026-10-21T08:00:00+00:00", datetime(2026, 10, 21, 8, 0, tzinfo=timezone.utc)),
        ("2026-10-21", datetime(2026, 10, 21, tzinfo=timezone.utc)),
    ],
)
def test_natural(text, expected):
    assert NaturalExpiryParser().parse(text, NOW) == expected


@pytest.mark.parametrize(
    "text",
    ["whenever", "3 fortnights", "25:00", "12:75", "", "99999999999 days", "in 999999999 weeks"],
)
def test_natural_unparseable(text):
    assert NaturalExpiryParser().parse(text, NOW) is None


def test_iso():
    parser = IsoExpiryParser()
    assert parser.parse("2026-10-21 08:00", NOW) == datetime(2026, 10, 21, 8, 0, tzinfo=timezone.utc)
    assert parser.parse("2026-10-21T10:00:00+02:00", NOW) == datetime(
        2026, 10, 21, 8, 0, tzinfo=timezone.utc
    )
    assert parser.parse("2 hours", NOW) is None


def test_get_parser():
    assert isinstance(get_parser("natural"), NaturalExpiryParser)
    assert isinstance(get_parser("iso"), IsoExpiryParser)
    with pytest.raises(ValueError):
        get_parser("chronic")

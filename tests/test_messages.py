"""Tests for messages.py — lock notices."""

from datetime import datetime, timedelta, timezone

from deploy_lock.config import LockConfig
from deploy_lock.messages import expired_message, lock_message, unlock_command
from deploy_lock.record import LockRecord
from deploy_lock.timefmt import AbsoluteTimeFormatter, RelativeTimeFormatter

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
CONFIG = LockConfig(application="myapp", stage="production", identity="alice")


def _record(expire_at=None):
    return LockRecord(
        created_at=NOW - timedelta(minutes=5),
        owner="bob",
        expire_at=expire_at,
        message="Deploying main branch",
    )


def test_relative_with_expiry():
    msg = lock_message(_record(NOW + timedelta(minutes=10)), CONFIG, RelativeTimeFormatter(), NOW)
    assert msg.splitlines() == [
        "Deploy to myapp (production) was locked 5 minutes ago by 'bob'",
        "Message: Deploying main branch",
        "Expires in 10 minutes",
    ]


def test_absolute_with_expiry():
    msg = lock_message(_record(NOW + timedelta(minutes=10)), CONFIG, AbsoluteTimeFormatter(), NOW)
    assert "was locked at 2026-10-19 11:55:00 UTC by 'bob'" in msg
    assert "Expires at 12:10:00 UTC" in msg


def test_no_expiry_needs_manual_removal():
    msg = lock_message(_record(), CONFIG, RelativeTimeFormatter(), NOW)
    assert msg.endswith(
        "Lock must be manually removed with: deploy-lock --stage production unlock --force"
    )


def test_unlock_command_without_stage():
    assert unlock_command(LockConfig(identity="alice")) == "deploy-lock unlock --force"


def test_expired_message():
    msg = expired_message(_record(NOW - timedelta(minutes=1)), CONFIG, RelativeTimeFormatter(), NOW)
    assert msg == (
        "Deleting expired deploy lock for myapp (production) "
        "(locked by 'bob' 5 minutes ago)..."
    )


def test_expired_lock_says_expired():
    record = _record(NOW - timedelta(minutes=1))
    relative = lock_message(record, CONFIG, RelativeTimeFormatter(), NOW)
    assert relative.splitlines()[-1] == "Expired 1 minute ago"
    absolute = lock_message(record, CONFIG, AbsoluteTimeFormatter(), NOW)
    assert absolute.splitlines()[-1] == "Expired at 2026-10-19 11:59:00 UTC"

"""Deploy lock lifecycle: fetch, check, refresh, acquire, release.

One RunContext lives for one workflow run. The store is read at most once
per run; afterwards the cached record is the source of truth for the run.

Concurrent runs are not mutually excluded: the store has no atomic
test-and-set, so two runs that both see "no lock" will both write one and
the later write wins. The lock is advisory.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from deploy_lock import log, messages
from deploy_lock.config import LockConfig
from deploy_lock.errors import LockedError, MalformedRecordError
from deploy_lock.record import LockRecord
from deploy_lock.store import RemoteStore
from deploy_lock.timefmt import TimeFormatter, get_formatter


class _DefaultExpiry:
    def __repr__(self) -> str:
        return "DEFAULT_EXPIRY"


# Use now + default_lock_expiry. None means the lock never expires.
DEFAULT_EXPIRY = _DefaultExpiry()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunContext:
    lock: LockRecord | None = None
    fetched: bool = False
    removed: bool = False
    created: bool = False
    custom: bool = False


class LockCoordinator:
    def __init__(
        self,
        store: RemoteStore,
        config: LockConfig,
        formatter: TimeFormatter | None = None,
    ):
        self.store = store
        self.config = config
        self.formatter = formatter or get_formatter(config.time_format)

    @property
    def path(self) -> str:
        return self.config.lock_path

    @property
    def expiry_window(self) -> timedelta:
        return timedelta(seconds=self.config.default_lock_expiry)

    def fetch(self, ctx: RunContext) -> LockRecord | None:
        """Current lock, read from the store once per run."""
        if ctx.removed or ctx.fetched:
            return ctx.lock

        text = self.store.read(self.path)
        try:
            ctx.lock = LockRecord.parse(text)
        except MalformedRecordError as e:
            log.warning(f"Ignoring unreadable deploy lock at {self.path}: {e}")
            ctx.lock = None
        ctx.fetched = True
        return ctx.lock

    def status(self, ctx: RunContext) -> LockRecord | None:
        """Read-only view of the lock; never reclaims or aborts."""
        return self.fetch(ctx)

    def now(self) -> datetime:
        return _now()

    def describe(self, record: LockRecord) -> str:
        return messages.lock_message(record, self.config, self.formatter, _now())

    def acquire(
        self,
        ctx: RunContext,
        message: str | None = None,
        expiry=DEFAULT_EXPIRY,
        custom: bool = False,
    ) -> LockRecord:
        """Write a lock for this run, unless one is already cached."""
        if ctx.lock is not None:
            log.info("Deploy lock already created.")
            return ctx.lock

        now = _now()
        if message is None:
            message = self._default_message()
        if expiry is DEFAULT_EXPIRY:
            expiry = now + self.expiry_window

        record = LockRecord(
            created_at=now,
            owner=self.config.identity,
            expire_at=expiry,
            message=message,
            custom=custom or ctx.custom,
        )
        self.store.write(self.path, record.dump())

        ctx.lock = record
        ctx.fetched = True
        ctx.created = True
        ctx.custom = record.custom
        return record

    def lock(self, ctx: RunContext, message: str, expiry: datetime | None = None) -> LockRecord:
        """Explicit lock. Never auto-refreshed or auto-removed."""
        ctx.custom = True
        return self.acquire(ctx, message=message, expiry=expiry, custom=True)

    def check(self, ctx: RunContext) -> None:
        """Gate a deploy. Raises LockedError if someone else holds the lock."""
        if ctx.created:
            return

        record = self.fetch(ctx)
        if record is None:
            return

        now = _now()
        if record.is_expired(now):
            log.info(messages.expired_message(record, self.config, self.formatter, now))
            self._remove(ctx)
            return

        ctx.custom = record.custom
        message = messages.lock_message(record, self.config, self.formatter, now)
        log.important(message)

        if record.expire_at and record.owner == self.config.identity:
            self._countdown()
            return

        raise LockedError(message, record=record)

    def refresh(self, ctx: RunContext) -> None:
        """Push out the expiry of a lock that is about to expire."""
        record = self.fetch(ctx)
        if record is None:
            return

        if record.custom:
            log.info("Not refreshing custom deploy lock.")
            return

        now = _now()
        if record.expire_at and record.expire_at < now + self.expiry_window:
            log.info("Resetting lock expiry to default...")
            record.owner = self.config.identity
            record.expire_at = now + self.expiry_window
            self.store.write(self.path, record.dump())

    def release(self, ctx: RunContext, force: bool = False) -> None:
        if ctx.custom and not force:
            log.info("Not removing custom deploy lock.")
            return
        self._remove(ctx)

    def _remove(self, ctx: RunContext) -> None:
        self.store.delete(self.path)
        ctx.lock = None
        ctx.removed = True
        ctx.created = False

    def _default_message(self) -> str:
        if self.config.branch:
            return f"Deploying {self.config.branch} branch"
        return f"Deploying {self.config.target}"

    def _countdown(self) -> None:
        identity = self.config.identity
        for i in range(self.config.countdown_seconds, 0, -1):
            log.countdown(
                f"Deploy lock was created by you ({identity}). Continuing deploy in {i}..."
            )
            time.sleep(1)
        log.countdown_done()

"""Human-facing lock notices."""

from datetime import datetime

from deploy_lock.config import LockConfig
from deploy_lock.record import LockRecord
from deploy_lock.timefmt import TimeFormatter


def unlock_command(config: LockConfig) -> str:
    if config.stage:
        return f"deploy-lock --stage {config.stage} unlock --force"
    return "deploy-lock unlock --force"


def lock_message(
    record: LockRecord, config: LockConfig, formatter: TimeFormatter, now: datetime
) -> str:
    """Who holds the lock, since when, why, and when (or how) it goes away."""
    lines = [
        f"Deploy to {config.target} was locked "
        f"{formatter.locked(record.created_at, now)} by '{record.owner}'",
        f"Message: {record.message}",
    ]
    if record.expire_at and record.expire_at < now:
        lines.append(f"Expired {formatter.locked(record.expire_at, now)}")
    elif record.expire_at:
        lines.append(f"Expires {formatter.expires(record.expire_at, now)}")
    else:
        lines.append(f"Lock must be manually removed with: {unlock_command(config)}")
    return "\n".join(lines)


def expired_message(
    record: LockRecord, config: LockConfig, formatter: TimeFormatter, now: datetime
) -> str:
    return (
        f"Deleting expired deploy lock for {config.target} "
        f"(locked by '{record.owner}' {formatter.locked(record.created_at, now)})..."
    )

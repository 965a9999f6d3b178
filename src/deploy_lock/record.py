"""Lock record model + YAML serialization."""

from dataclasses import dataclass
from datetime import datetime, timezone

import yaml

from deploy_lock.errors import MalformedRecordError


@dataclass
class LockRecord:
    created_at: datetime
    owner: str
    expire_at: datetime | None = None
    message: str = ""
    custom: bool = False

    def is_expired(self, now: datetime) -> bool:
        """A lock without an expiry never expires."""
        return self.expire_at is not None and self.expire_at < now

    def to_dict(self) -> dict:
        return {
            "created_at": self.created_at.isoformat(),
            "owner": self.owner,
            "expire_at": self.expire_at.isoformat() if self.expire_at else None,
            "message": self.message,
            "custom": self.custom,
        }

    def dump(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)

    @classmethod
    def parse(cls, text: bytes | str | None) -> "LockRecord | None":
        """Parse a stored record. Returns None for an empty blob.

        Raises MalformedRecordError for anything that is not a valid record.
        """
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedRecordError(f"lock record is not UTF-8: {e}") from e

        if text is None or not text.strip():
            return None

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MalformedRecordError(f"lock record is not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise MalformedRecordError("lock record is not a mapping")

        # "username" is the key older lock files used for the owner
        owner = data.get("owner", data.get("username"))
        if not isinstance(owner, str) or not owner:
            raise MalformedRecordError("lock record has no owner")

        message = data.get("message") or ""
        custom = data.get("custom", False)
        if not isinstance(custom, bool):
            raise MalformedRecordError(f"invalid custom flag: {custom!r}")

        expire_at = data.get("expire_at")
        return cls(
            created_at=_parse_time(data.get("created_at"), "created_at"),
            owner=owner,
            expire_at=_parse_time(expire_at, "expire_at") if expire_at else None,
            message=str(message),
            custom=custom,
        )


def _parse_time(value, field: str) -> datetime:
    """Accept ISO strings or YAML timestamps. Naive values are UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise MalformedRecordError(f"invalid {field}: {value!r}") from e
    else:
        raise MalformedRecordError(f"invalid {field}: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

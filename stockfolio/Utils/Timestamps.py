from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form every timestamp is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 value into a naive UTC datetime, or None if it can't be read."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError):
            # e.g. 0001-01-01T00:00:00+01:00 falls before datetime.min in UTC
            return None
    return parsed


def normalize_timestamp(value: Any) -> datetime:
    """Keep a client supplied timestamp when it is valid, otherwise stamp the current time."""
    parsed = parse_timestamp(value)
    return parsed if parsed is not None else utc_now()


def to_iso(value: datetime) -> str:
    # millisecond precision with a Z suffix, e.g. 2024-01-05T10:00:00.000Z
    return value.isoformat(timespec="milliseconds") + "Z"

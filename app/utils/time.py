from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored on the millisecond difference."""
    delta_ms = int((end - start).total_seconds() * 1000)
    return delta_ms // 60000

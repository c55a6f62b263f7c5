from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """Return the first instant of the calendar month containing ``now`` (UTC)."""
    current = now or utc_now()
    return current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

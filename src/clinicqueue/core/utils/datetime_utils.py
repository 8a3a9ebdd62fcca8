"""
Date and time utility functions for ClinicQueue application.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional

Clock = Callable[[], datetime]


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def clinic_today(now: datetime, tz: tzinfo) -> date:
    """Calendar date of ``now`` in the clinic's timezone."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def end_of_clinic_day(day: date, tz: tzinfo) -> datetime:
    """UTC instant at which the given clinic day ends (next local midnight)."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return (start + timedelta(days=1)).astimezone(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

# salon_scheduling/utils/time_utils.py
"""Small datetime helpers shared by the scheduling services.

All helpers work on timezone-aware datetimes; naive values are treated as UTC.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

MINUTE = timedelta(minutes=1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive input is assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 string (a trailing ``Z`` is accepted) into aware UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def add_minutes(base: datetime, minutes: float) -> datetime:
    return base + timedelta(minutes=minutes)


def difference_in_minutes(a: datetime, b: datetime) -> int:
    """Whole minutes between a and b (a - b), rounded to the nearest minute."""
    return round((a - b) / MINUTE)


def clamp_datetime(
        value: datetime,
        min_value: Optional[datetime] = None,
        max_value: Optional[datetime] = None
) -> datetime:
    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value
    return value


def round_up_to_interval(value: datetime, interval_minutes: int) -> datetime:
    """Ceil value onto the epoch-aligned grid of interval_minutes."""
    step = timedelta(minutes=interval_minutes)
    offset = ensure_utc(value) - _EPOCH
    steps = -((-offset) // step)
    rounded = _EPOCH + steps * step
    return rounded.astimezone(value.tzinfo) if value.tzinfo else rounded


@dataclass(frozen=True)
class Interval:
    """Half-open span [start, end)."""
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def minutes(self) -> int:
        return difference_in_minutes(self.end, self.start)

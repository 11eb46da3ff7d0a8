"""
Time helpers.

All instants are handled as timezone-aware UTC datetimes. Some backends (SQLite)
drop the offset on the way back from storage; `as_utc` restores it.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_slot_to_utc(slot_date: date, slot_time: time, zone_name: str) -> datetime:
    """Resolve a calendar date + wall-clock time in `zone_name` to a UTC instant."""
    zone = timezone.utc if zone_name.upper() == "UTC" else ZoneInfo(zone_name)
    local = datetime.combine(slot_date, slot_time).replace(tzinfo=zone)
    return local.astimezone(timezone.utc)

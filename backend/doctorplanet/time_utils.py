from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" and "YYYY-MM-DDTHH:MM" (naive) are interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def get_zone(name: str | None):
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def to_local(dt: datetime, tz_name: str | None) -> datetime:
    """UTC-naive -> aware datetime in the store timezone."""
    return dt.replace(tzinfo=timezone.utc).astimezone(get_zone(tz_name))


def _local_midnight_utc(local_day: date, tz_name: str | None) -> datetime:
    midnight = datetime(local_day.year, local_day.month, local_day.day, tzinfo=get_zone(tz_name))
    return midnight.astimezone(timezone.utc).replace(tzinfo=None)


def local_business_date(now: datetime, tz_name: str | None) -> date:
    return to_local(now, tz_name).date()


def local_day_start(now: datetime, tz_name: str | None) -> datetime:
    """Local midnight of `now`'s business day, as UTC-naive."""
    return _local_midnight_utc(local_business_date(now, tz_name), tz_name)


def local_month_start(now: datetime, tz_name: str | None) -> datetime:
    """First local midnight of `now`'s month, as UTC-naive."""
    return _local_midnight_utc(local_business_date(now, tz_name).replace(day=1), tz_name)


def local_year_start(now: datetime, tz_name: str | None) -> datetime:
    return _local_midnight_utc(local_business_date(now, tz_name).replace(month=1, day=1), tz_name)

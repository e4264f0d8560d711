# app/utils/date_utils.py

from datetime import datetime, date, time, timezone
from typing import Optional, Union


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime; naive input is taken as UTC"""
    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_booking_date(value: Union[str, date]) -> datetime:
    """Midnight UTC of the booked day. Accepts YYYY-MM-DD or a full timestamp"""
    if isinstance(value, datetime):
        return datetime.combine(to_utc(value).date(), time(), tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc)
    try:
        day = date.fromisoformat(value)
    except ValueError:
        day = parse_iso_datetime(value).date()
    return datetime.combine(day, time(), tzinfo=timezone.utc)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB keeps naive UTC datetimes"""
    if value is None:
        return None
    return to_utc(value).replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return to_utc(value).isoformat().replace("+00:00", "Z")

"""Datetime helpers shared by the flow, the handoff store and the job payload.

All instants are timezone-aware UTC datetimes. Epoch milliseconds are the
wire format for the handoff record and the job payload.
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_to_ms(dt: datetime) -> datetime:
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds (sub-ms precision is dropped)."""
    return (ensure_utc(dt) - EPOCH) // _ONE_MS


def from_epoch_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def format_utc(dt: datetime) -> str:
    """Human readable UTC time, e.g. 'Mon, 19 Oct 2026 12:00:00 GMT'."""
    return format_datetime(ensure_utc(dt), usegmt=True)

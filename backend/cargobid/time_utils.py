# Overview: UTC clock, ISO-8601 parsing for quote deadlines, and "Z" timestamps for JSON.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

UTC = timezone.utc


def _as_utc(dt: datetime) -> datetime:
    # Naive values are already UTC by convention.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utcnow() -> datetime:
    """Current time in UTC, stored naive like every timestamp column."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read a deadline such as "2026-11-01", "2026-11-01T08:30" or
    "2026-11-01T08:30:00-03:00". Offsets are folded into UTC and the result
    is naive. Blank input gives None; anything unparseable raises ValueError.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    return _as_utc(datetime.fromisoformat(text)).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Second-precision ISO-8601 ending in "Z", e.g. "2026-11-01T08:30:00Z"."""
    if dt is None:
        return None
    return _as_utc(dt).replace(microsecond=0, tzinfo=None).isoformat() + "Z"

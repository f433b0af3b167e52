"""UTC timestamp helpers used by fetchers and reports."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO 8601 timestamps as served by the GitHub API and changelogs.

    Accepts ``2024-03-01T10:00:00Z``, offsets, naive timestamps and bare
    dates. Returns None when the value cannot be parsed.

    Example:
        >>> parse_iso_datetime("2024-03-01").day
        1
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for pattern in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d", "%Y/%m/%d"):
        try:
            return ensure_utc(datetime.strptime(value.strip(), pattern))
        except ValueError:
            continue
    return None


def format_timestamp(dt: Optional[datetime]) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SSZ``; empty string for None."""
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_file_stamp(dt: datetime) -> str:
    """Compact stamp for report file names, e.g. ``20240301-100000``."""
    return ensure_utc(dt).strftime("%Y%m%d-%H%M%S")

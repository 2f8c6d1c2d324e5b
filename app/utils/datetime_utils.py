"""
UTC helpers shared by models, services and the log formatter.

Timestamps are written timezone-aware and read back through ensure_utc,
because SQLite returns naive values where PostgreSQL returns aware ones.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (column default for timestamps)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a stored timestamp to aware UTC.

    Naive values are taken to be UTC already; aware values in another zone
    are converted.

    Example:
        >>> ensure_utc(datetime(2026, 3, 1, 8, 15)).isoformat()
        '2026-03-01T08:15:00+00:00'
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_utc(dt: datetime | None) -> str | None:
    """
    ISO 8601 text with a trailing 'Z', as used in JSON log lines.

    Example:
        >>> to_iso_utc(datetime(2026, 3, 1, 8, 15, tzinfo=timezone.utc))
        '2026-03-01T08:15:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")

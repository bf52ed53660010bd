"""UTC datetime helpers.

Firestore timestamps decode to aware UTC datetimes; records built from
documents and permission-error records use these so every datetime the API
returns is timezone-aware.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a stored timestamp to aware UTC; naive values are taken as UTC.

    Non-datetime values (e.g. a field written by an older client as a string)
    come back as None rather than failing the whole record.
    """
    if not isinstance(dt, datetime):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)

# critico/api/schemas/_datetime_serializer.py
from datetime import datetime, timezone


def serialize_dt(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        # stored as UTC, sqlite drops the offset
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()

"""
Firestore query helpers shared by the services.

NOTE: For firebase_admin SDK, we use positional arguments for where() which still work.
The deprecation warning is just a warning - the functionality is still supported.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "user_type", "==", "official")
        query = where_filter(query, "reported_by.email", "==", "a@b.c")
    """
    return query.where(field_path, op_string, value)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Parse various timestamp formats to timezone-aware datetime (UTC).

    Firestore returns DatetimeWithNanoseconds; seeded/mock data may carry
    ISO strings or naive datetimes.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    if hasattr(value, "to_datetime"):
        return to_datetime(value.to_datetime())
    return None


def snapshot_to_dict(doc) -> Dict:
    """Document snapshot -> dict with its id folded in."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data

"""Timestamp normalization helpers.

Rules:
- Naive ``datetime`` values (no tzinfo) are assumed to be UTC.
- ISO-8601 strings ending with 'Z' are treated as UTC; offsets are preserved
  and converted.
- Date-only strings (``2024-03-01``) and ``date`` objects mean midnight UTC.
"""
from datetime import date, datetime, timezone
from typing import Any

UTC = timezone.utc


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 source timestamp into a tz-aware UTC datetime.

    Args:
        value: ISO-8601 string, ``datetime`` or ``date``

    Returns:
        tz-aware datetime in UTC

    Raises:
        ValueError: value is missing, has an unsupported type or is not ISO-8601
    """
    if value is None:
        raise ValueError("timestamp value is None")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("empty timestamp string")
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"unsupported timestamp type: {type(value).__name__}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)

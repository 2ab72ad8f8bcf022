"""Datetime parsing helpers for report timestamps."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_report_timestamp(value: object) -> datetime | None:
    """Parse a report timestamp into an aware UTC datetime.

    Accepts datetimes, epoch milliseconds (what the upstream JavaScript
    clients send for ``Date.now()``), ISO-8601 and RFC-2822 strings.
    Returns ``None`` when the value is missing or unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        raw = str(value).strip()
        if not raw:
            return None
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = parsedate_to_datetime(raw)
            except (TypeError, ValueError):
                return None
            if dt is None:
                return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(UTC)
    except (OverflowError, ValueError):
        # Offsets that push the value past datetime.min/max.
        return None

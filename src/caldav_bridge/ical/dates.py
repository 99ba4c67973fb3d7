from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_TZID_ANNOTATION = re.compile(r"\s*\([^)]+\)\s*$")
_COMPACT_DATETIME = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})Z?$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")

ALL_DAY_DURATION = timedelta(hours=24)


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 string, treating naive values as UTC."""

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_ical_date(raw: str) -> Optional[datetime]:
    """Parse DTSTART/DTEND values, including the ``(TZID)`` annotation added by the parser.

    Compact forms are read as UTC. Returns ``None`` when the value cannot be read.
    """

    trimmed = _TZID_ANNOTATION.sub("", raw)
    match = _COMPACT_DATETIME.match(trimmed)
    if match:
        year, month, day, hour, minute, second = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        except ValueError:
            return None
    match = _COMPACT_DATE.match(trimmed)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, tzinfo=timezone.utc)
        except ValueError:
            return None
    return parse_iso_datetime(trimmed)


def is_all_day(raw: str) -> bool:
    return re.fullmatch(r"\d{8}", re.sub(r"\D", "", raw or "")) is not None


def format_caldav_datetime(value: str) -> str:
    """Normalize ISO input for CalDAV time-range attributes (always UTC)."""

    if "T" in value:
        return value if value.endswith("Z") else f"{value}Z"
    return f"{value}T00:00:00Z"

"""iCalendar document engine: parsing, client-side filters and serialization."""

from __future__ import annotations

from .dates import format_caldav_datetime, is_all_day, parse_ical_date, parse_iso_datetime
from .filters import (
    combine_filters,
    filter_by_category,
    filter_by_jmes_expression,
    filter_by_status,
    filter_by_time_range,
    filter_by_uid,
    resolve_path,
)
from .parser import parse_icalendar, unescape_text, unfold
from .serializer import components_to_icalendar, create_empty_calendar, escape_text

__all__ = [
    "combine_filters",
    "components_to_icalendar",
    "create_empty_calendar",
    "escape_text",
    "filter_by_category",
    "filter_by_jmes_expression",
    "filter_by_status",
    "filter_by_time_range",
    "filter_by_uid",
    "format_caldav_datetime",
    "is_all_day",
    "parse_ical_date",
    "parse_icalendar",
    "parse_iso_datetime",
    "resolve_path",
    "unescape_text",
    "unfold",
]

from __future__ import annotations

import re
from typing import Iterable, List

from ..domain import CalendarComponent, ComponentType

CRLF = "\r\n"
PRODID = "-//caldav-bridge//EN"
CALENDAR_HEADER = ("BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}")
CALENDAR_FOOTER = "END:VCALENDAR"

_NON_DATE_CHARS = re.compile(r"[^0-9TZ]")
_TZID_ANNOTATION = re.compile(r"\s*\([^)]+\)\s*$")
_NEWLINES = re.compile(r"\r\n|\n|\r")


def escape_text(value: str) -> str:
    # Backslash first so the escapes added below are not doubled.
    escaped = value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,")
    return _NEWLINES.sub("\\\\n", escaped)


def _date_value(value: str) -> str:
    return _NON_DATE_CHARS.sub("", _TZID_ANNOTATION.sub("", value))


def _component_type(component: CalendarComponent) -> str:
    if component.component_type:
        return component.component_type
    if component.dtstart:
        return ComponentType.VEVENT.value
    if component.status:
        return ComponentType.VTODO.value
    return ComponentType.VJOURNAL.value


def _component_lines(component: CalendarComponent) -> List[str]:
    kind = _component_type(component)
    lines = [f"BEGIN:{kind}"]
    if component.uid:
        lines.append(f"UID:{component.uid}")
    if component.summary:
        lines.append(f"SUMMARY:{escape_text(component.summary)}")
    if component.dtstart:
        lines.append(f"DTSTART:{_date_value(component.dtstart)}")
    if component.dtend:
        lines.append(f"DTEND:{_date_value(component.dtend)}")
    if component.description:
        lines.append(f"DESCRIPTION:{escape_text(component.description)}")
    if component.location:
        lines.append(f"LOCATION:{escape_text(component.location)}")
    if component.status:
        lines.append(f"STATUS:{component.status}")
    if component.priority is not None:
        lines.append(f"PRIORITY:{component.priority}")
    if component.categories:
        lines.append(f"CATEGORIES:{','.join(escape_text(item) for item in component.categories)}")
    lines.append(f"END:{kind}")
    return lines


def components_to_icalendar(components: Iterable[CalendarComponent]) -> str:
    lines = list(CALENDAR_HEADER)
    for component in components:
        lines.extend(_component_lines(component))
    lines.append(CALENDAR_FOOTER)
    return CRLF.join(lines)


def create_empty_calendar() -> str:
    return components_to_icalendar(())

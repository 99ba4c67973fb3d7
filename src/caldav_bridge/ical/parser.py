from __future__ import annotations

import re
from typing import Dict, List, Optional

from ..domain import COMPONENT_TYPES, CalendarComponent

_FOLDED_LINE = re.compile(r"\r?\n[ \t]")
_LINE_BREAK = re.compile(r"\r?\n")
_ESCAPE_SEQUENCE = re.compile(r"\\([\\;,nN])")

_BEGIN_MARKERS = tuple(f"BEGIN:{kind}" for kind in COMPONENT_TYPES)
_END_MARKERS = tuple(f"END:{kind}" for kind in COMPONENT_TYPES)


def unescape_text(value: str) -> str:
    return _ESCAPE_SEQUENCE.sub(lambda match: "\n" if match.group(1) in "nN" else match.group(1), value)


def split_text_list(value: str) -> List[str]:
    """Split a comma separated TEXT list; escaped commas and backslashes stay in their item."""

    items: list[str] = []
    start = 0
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\":
            index += 2
            continue
        if char == ",":
            items.append(value[start:index])
            start = index + 1
        index += 1
    items.append(value[start:])
    return items


def unfold(text: str) -> str:
    return _FOLDED_LINE.sub("", text)


def parse_icalendar(text: str) -> List[CalendarComponent]:
    """Parse VEVENT, VTODO and VJOURNAL blocks out of an iCalendar document.

    Components without a UID are dropped. Other component kinds are ignored.
    """

    components: list[CalendarComponent] = []
    current: Optional[CalendarComponent] = None

    for line in _LINE_BREAK.split(unfold(text)):
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith(_BEGIN_MARKERS):
            current = CalendarComponent(component_type=stripped.split(":", 1)[1])
        elif stripped.startswith(_END_MARKERS):
            if current is not None and current.uid:
                components.append(current)
            current = None
        elif current is not None:
            _apply_property(stripped, current)

    return components


def _parse_parameters(parts: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for part in parts:
        key, _, value = part.partition("=")
        if key and value:
            params[key.upper()] = value
    return params


def _parse_datetime(value: str, params: Dict[str, str]) -> str:
    tzid = params.get("TZID")
    if tzid:
        return f"{value} ({tzid})"
    return value


def _apply_property(line: str, component: CalendarComponent) -> None:
    name_part, separator, value = line.partition(":")
    if not separator:
        return

    name, *param_parts = name_part.split(";")
    params = _parse_parameters(param_parts)
    key = name.upper()

    if key == "UID":
        component.uid = value
    elif key == "SUMMARY":
        component.summary = unescape_text(value)
    elif key == "DTSTART":
        component.dtstart = _parse_datetime(value, params)
    elif key == "DTEND":
        component.dtend = _parse_datetime(value, params)
    elif key == "CATEGORIES":
        component.categories = [unescape_text(part.strip()) for part in split_text_list(value)]
    elif key == "STATUS":
        component.status = value.upper()
    elif key == "PRIORITY":
        try:
            component.priority = int(value.strip())
        except ValueError:
            component.priority = None
    elif key == "DESCRIPTION":
        component.description = unescape_text(value)
    elif key == "LOCATION":
        component.location = unescape_text(value)
    else:
        component.extensions[name.lower()] = unescape_text(value)

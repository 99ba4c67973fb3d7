"""XML bodies for PROPFIND / REPORT requests and a lenient multistatus reader."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from ..domain import CalendarQueryOptions, TimeRange
from ..ical import format_caldav_datetime

logger = logging.getLogger(__name__)

DAV_NS = "DAV:"
CALDAV_NS = "urn:ietf:params:xml:ns:caldav"

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
_CALDAV_PREFIXES = ("caldav", "C")

_RESPONSE = re.compile(r"<(?:[\w-]+:)?response\b[^>]*>(.*?)</(?:[\w-]+:)?response>", re.S)
_HREF = re.compile(r"<(?:[\w-]+:)?href\b[^>]*>(.*?)</(?:[\w-]+:)?href>", re.S)
_STATUS = re.compile(r"<(?:[\w-]+:)?status\b[^>]*>(.*?)</(?:[\w-]+:)?status>", re.S)
_ETAG = re.compile(r"<(?:[\w-]+:)?getetag\b[^>]*>(.*?)</(?:[\w-]+:)?getetag>", re.S)
_CALENDAR_DATA = re.compile(r"<(?:[\w-]+:)?calendar-data\b[^>]*>(.*?)</(?:[\w-]+:)?calendar-data>", re.S)
_CDATA = re.compile(r"^<!\[CDATA\[(.*)\]\]>$", re.S)


@dataclass(frozen=True)
class MultiStatusEntry:
    href: str
    status: str
    etag: Optional[str] = None
    calendar_data: Optional[str] = None


def escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _time_range_element(time_range: Optional[TimeRange], indent: str) -> Optional[str]:
    if time_range is None or time_range.is_empty:
        return None
    start_attr = f' start="{escape_xml(format_caldav_datetime(time_range.start))}"' if time_range.start else ""
    end_attr = f' end="{escape_xml(format_caldav_datetime(time_range.end))}"' if time_range.end else ""
    return f"{indent}<C:time-range{start_attr}{end_attr}/>"


def _text_match_filter(name: str, value: str, indent: str) -> List[str]:
    return [
        f'{indent}<C:prop-filter name="{name}">',
        f'{indent}  <C:text-match collation="i;ascii-casemap">{escape_xml(value)}</C:text-match>',
        f"{indent}</C:prop-filter>",
    ]


def build_calendar_query(options: CalendarQueryOptions) -> str:
    parts = [
        _XML_DECLARATION,
        f'<C:calendar-query xmlns:C="{CALDAV_NS}" xmlns:D="{DAV_NS}">',
        "  <D:prop>",
        "    <D:getetag/>",
        "    <C:calendar-data/>",
        "  </D:prop>",
    ]

    if options.has_filters:
        parts.append("  <C:filter>")
        parts.append('    <C:comp-filter name="VCALENDAR">')
        if options.component_type:
            parts.append(f'      <C:comp-filter name="{escape_xml(options.component_type)}">')
            time_range = _time_range_element(options.time_range, "        ")
            if time_range:
                parts.append(time_range)
            if options.category_filter:
                parts.extend(_text_match_filter("CATEGORIES", options.category_filter, "        "))
            if options.uid:
                parts.extend(_text_match_filter("UID", options.uid, "        "))
            if options.jmes_filter:
                # Evaluated client-side after retrieval; servers only see a comment.
                parts.append(f"        <!-- JMES filter: {escape_xml(options.jmes_filter)} -->")
            parts.append("      </C:comp-filter>")
        else:
            time_range = _time_range_element(options.time_range, "      ")
            if time_range:
                parts.append(time_range)
        parts.append("    </C:comp-filter>")
        parts.append("  </C:filter>")

    parts.append("</C:calendar-query>")
    return "\n".join(parts)


def _render_comp_filter(node: Mapping[str, Any], indent: str) -> List[str]:
    name = escape_xml(str(node.get("name") or "VCALENDAR"))
    children: list[str] = []
    if node.get("is_not_defined"):
        children.append(f"{indent}  <C:is-not-defined/>")
    time_range = node.get("time_range") or {}
    element = _time_range_element(TimeRange(start=time_range.get("start"), end=time_range.get("end")), indent + "  ")
    if element:
        children.append(element)
    for child in node.get("comp_filters") or ():
        children.extend(_render_comp_filter(child, indent + "  "))
    if not children:
        return [f'{indent}<C:comp-filter name="{name}"/>']
    return [f'{indent}<C:comp-filter name="{name}">', *children, f"{indent}</C:comp-filter>"]


def render_filter_query(props: Iterable[str], filters: Mapping[str, Any]) -> str:
    """Render a calendar-query REPORT body from a comp-filter descriptor tree.

    The tree is ``{"name": "VCALENDAR", "time_range": {...}, "comp_filters": [...]}``;
    property names follow the ``caldav:name`` convention of :func:`build_propfind`.
    """

    parts = [
        _XML_DECLARATION,
        f'<C:calendar-query xmlns:C="{CALDAV_NS}" xmlns:D="{DAV_NS}">',
        "  <D:prop>",
    ]
    parts.extend(_prop_elements(props))
    parts.append("  </D:prop>")
    parts.append("  <C:filter>")
    parts.extend(_render_comp_filter(filters, "    "))
    parts.append("  </C:filter>")
    parts.append("</C:calendar-query>")
    return "\n".join(parts)


def _prop_elements(props: Iterable[str]) -> List[str]:
    elements = []
    for prop in props:
        prefix, separator, name = prop.partition(":")
        if not separator:
            elements.append(f"    <D:{escape_xml(prop)}/>")
        elif prefix in _CALDAV_PREFIXES:
            elements.append(f"    <C:{escape_xml(name)}/>")
        else:
            elements.append(f"    <D:{escape_xml(name)}/>")
    return elements


def build_propfind(props: Iterable[str], depth: str = "0") -> str:
    """Build a PROPFIND body; ``caldav:name`` or ``C:name`` select the CalDAV namespace.

    ``depth`` travels in the request header, it is accepted here for symmetry with callers.
    """

    parts = [
        _XML_DECLARATION,
        f'<D:propfind xmlns:D="{DAV_NS}" xmlns:C="{CALDAV_NS}">',
        "  <D:prop>",
    ]
    parts.extend(_prop_elements(props))
    parts.append("  </D:prop>")
    parts.append("</D:propfind>")
    return "\n".join(parts)


def build_multiget(hrefs: Iterable[str]) -> str:
    parts = [
        _XML_DECLARATION,
        f'<C:calendar-multiget xmlns:C="{CALDAV_NS}" xmlns:D="{DAV_NS}">',
        "  <D:prop>",
        "    <D:getetag/>",
        "    <C:calendar-data/>",
        "  </D:prop>",
    ]
    for href in hrefs:
        parts.append(f"  <D:href>{escape_xml(href)}</D:href>")
    parts.append("</C:calendar-multiget>")
    return "\n".join(parts)


def _text(pattern: re.Pattern[str], content: str) -> Optional[str]:
    match = pattern.search(content)
    if match is None:
        return None
    value = match.group(1).strip()
    cdata = _CDATA.match(value)
    if cdata:
        return cdata.group(1).strip()
    return html.unescape(value)


def parse_multistatus(xml_response: str) -> List[MultiStatusEntry]:
    """Extract per-resource blocks from a 207 body without validating it.

    Malformed input produces an empty list.
    """

    if not isinstance(xml_response, str):
        return []

    entries: list[MultiStatusEntry] = []
    for block in _RESPONSE.finditer(xml_response):
        content = block.group(1)
        entries.append(
            MultiStatusEntry(
                href=_text(_HREF, content) or "",
                status=_text(_STATUS, content) or "",
                etag=_text(_ETAG, content),
                calendar_data=_text(_CALENDAR_DATA, content),
            )
        )
    logger.debug("Parsed %d multistatus entries", len(entries))
    return entries

"""CalDAV protocol layer: request bodies, the client contract and discovery."""

from __future__ import annotations

from .client import CalDavClient, DavResponse, HttpCalDavClient, PropertyDescriptor, parse_propfind_response
from .discovery import CalDavDiscovery, extract_calendar_id, parse_component_set
from .report import (
    CALDAV_NS,
    DAV_NS,
    MultiStatusEntry,
    build_calendar_query,
    build_multiget,
    build_propfind,
    escape_xml,
    parse_multistatus,
    render_filter_query,
)

__all__ = [
    "CALDAV_NS",
    "DAV_NS",
    "CalDavClient",
    "CalDavDiscovery",
    "DavResponse",
    "HttpCalDavClient",
    "MultiStatusEntry",
    "PropertyDescriptor",
    "build_calendar_query",
    "build_multiget",
    "build_propfind",
    "escape_xml",
    "extract_calendar_id",
    "parse_component_set",
    "parse_multistatus",
    "parse_propfind_response",
    "render_filter_query",
]

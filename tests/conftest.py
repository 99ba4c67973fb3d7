"""Shared test fixtures for caldav-bridge tests.

This module provides:
- A sample iCalendar document used across parser and filter tests
- A scripted in-memory CalDAV client standing in for the network collaborator
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from caldav_bridge.protocol import DavResponse


# ─────────────────────────────────────────────────────────────────────────────
# iCalendar Fixtures
# ─────────────────────────────────────────────────────────────────────────────

SAMPLE_ICAL = "\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Test//Test//EN",
        "BEGIN:VEVENT",
        "UID:event1@example.com",
        "DTSTART:20240115T100000Z",
        "DTEND:20240115T110000Z",
        "SUMMARY:Team Meeting",
        "CATEGORIES:Work,Important",
        "STATUS:CONFIRMED",
        "DESCRIPTION:Weekly team meeting",
        "LOCATION:Conference Room A",
        "END:VEVENT",
        "BEGIN:VTODO",
        "UID:todo1@example.com",
        "DTSTART:20240116T090000Z",
        "SUMMARY:Complete Project",
        "CATEGORIES:Work",
        "STATUS:IN-PROCESS",
        "PRIORITY:1",
        "END:VTODO",
        "BEGIN:VEVENT",
        "UID:event2@example.com",
        "DTSTART:20240120T140000Z",
        "DTEND:20240120T150000Z",
        "SUMMARY:Personal Appointment",
        "CATEGORIES:Personal",
        "STATUS:TENTATIVE",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
)


@pytest.fixture
def sample_ical() -> str:
    return SAMPLE_ICAL


# ─────────────────────────────────────────────────────────────────────────────
# CalDAV Client Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class FakeCalDavClient:
    """Scripted CalDAV collaborator recording every call it receives."""

    def __init__(
        self,
        *,
        server_url: str = "https://caldav.example.com/",
        username: Optional[str] = "john",
        calendar_data: Optional[List[str]] = None,
        query_delay: float = 0.0,
        query_error: Optional[Exception] = None,
    ) -> None:
        self.server_url = server_url
        self.username = username
        self.calendar_data = calendar_data if calendar_data is not None else [SAMPLE_ICAL]
        self.query_delay = query_delay
        self.query_error = query_error
        self.propfind_calls: List[Dict[str, Any]] = []
        self.query_calls: List[Dict[str, Any]] = []
        self.completed_queries = 0
        self.cancelled_queries = 0

    async def propfind(self, url, props, depth="0"):
        self.propfind_calls.append({"url": url, "props": [prop.name for prop in props], "depth": depth})
        names = {prop.name for prop in props}
        if "current-user-principal" in names:
            return [DavResponse(href="/", props={"current-user-principal": {"href": "/principals/users/john/"}})]
        if "calendar-home-set" in names:
            return [
                DavResponse(
                    href="/principals/users/john/",
                    props={"calendar-home-set": {"href": "/calendars/john/"}},
                )
            ]
        return [
            DavResponse(href="/calendars/john/", props={"resourcetype": {"collection": {}}}),
            DavResponse(
                href="/calendars/john/calendar1/",
                props={
                    "displayname": "Personal",
                    "resourcetype": {"collection": {}, "calendar": {}},
                    "supported-calendar-component-set": {"comp": [{"name": "VEVENT"}, {"name": "VTODO"}]},
                },
            ),
            DavResponse(
                href="/calendars/john/tasks/",
                props={
                    "displayname": "Tasks",
                    "resourcetype": {"collection": {}, "calendar": {}},
                    "supported-calendar-component-set": {"comp": {"name": "VTODO"}},
                },
            ),
            DavResponse(href="/calendars/john/inbox/", props={"resourcetype": {"collection": {}}}),
        ]

    async def calendar_query(self, url, props, filters):
        self.query_calls.append({"url": url, "props": [prop.name for prop in props], "filters": filters})
        try:
            if self.query_delay:
                await asyncio.sleep(self.query_delay)
        except asyncio.CancelledError:
            self.cancelled_queries += 1
            raise
        if self.query_error is not None:
            raise self.query_error
        self.completed_queries += 1
        return [DavResponse(href=f"{url}item{index}.ics", props={"calendar-data": data}) for index, data in enumerate(self.calendar_data)]


@pytest.fixture
def fake_client() -> FakeCalDavClient:
    return FakeCalDavClient()


@pytest.fixture
def make_client():
    return FakeCalDavClient

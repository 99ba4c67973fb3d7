from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from ..domain import DEFAULT_COMPONENT_SET, CalendarCollection, DiscoveryError, DiscoveryResult
from .client import CalDavClient, PropertyDescriptor
from .report import CALDAV_NS, DAV_NS

logger = logging.getLogger(__name__)

CURRENT_USER_PRINCIPAL = PropertyDescriptor("current-user-principal", DAV_NS)
CALENDAR_HOME_SET = PropertyDescriptor("calendar-home-set", CALDAV_NS)
COLLECTION_PROPS = (
    PropertyDescriptor("displayname", DAV_NS),
    PropertyDescriptor("resourcetype", DAV_NS),
    PropertyDescriptor("supported-calendar-component-set", CALDAV_NS),
)


def _href_of(value: Any) -> str:
    if isinstance(value, dict):
        href = value.get("href")
        return href if isinstance(href, str) else ""
    return ""


def parse_component_set(value: Any) -> tuple[str, ...]:
    """Read ``supported-calendar-component-set``; defaults to every known kind."""

    comp = value.get("comp") if isinstance(value, dict) else None
    if isinstance(comp, list):
        names = [item.get("name") for item in comp if isinstance(item, dict)]
        usable = tuple(name for name in names if name)
        return usable or DEFAULT_COMPONENT_SET
    if isinstance(comp, dict) and comp.get("name"):
        return (comp["name"],)
    return DEFAULT_COMPONENT_SET


def extract_calendar_id(href: str, home: str) -> str:
    relative = href.replace(home, "", 1).strip("/")
    return relative or href.split("/")[-1] or "unknown"


@dataclass(slots=True)
class CalDavDiscovery:
    """Resolve principal, calendar home and calendar collections for a client."""

    client: CalDavClient

    async def discover(self) -> DiscoveryResult:
        principal = await self.current_user_principal()
        home = await self.calendar_home_set(principal)
        collections = await self.calendar_collections(home)
        logger.info("Discovered %d calendars under %s", len(collections), home)
        return DiscoveryResult(principal=principal, home=home, collections=tuple(collections))

    async def current_user_principal(self) -> str:
        responses = await self.client.propfind(self.client.server_url, [CURRENT_USER_PRINCIPAL], depth="0")
        for response in responses:
            href = _href_of(response.props.get("current-user-principal"))
            if href:
                return href
        raise DiscoveryError("Unable to determine current user principal")

    async def calendar_home_set(self, principal: str) -> str:
        responses = await self.client.propfind(principal, [CALENDAR_HOME_SET], depth="0")
        for response in responses:
            href = _href_of(response.props.get("calendar-home-set"))
            if href:
                return href
        raise DiscoveryError("Unable to determine calendar home set")

    async def calendar_collections(self, home: str) -> List[CalendarCollection]:
        responses = await self.client.propfind(home, list(COLLECTION_PROPS), depth="1")
        collections: list[CalendarCollection] = []
        for response in responses:
            resource_type = response.props.get("resourcetype")
            is_calendar = isinstance(resource_type, dict) and "calendar" in resource_type
            if not is_calendar or response.href == home:
                continue
            display_name = response.props.get("displayname")
            collections.append(
                CalendarCollection(
                    calendar_id=extract_calendar_id(response.href, home),
                    display_name=display_name if isinstance(display_name, str) and display_name else "Unnamed Calendar",
                    component_set=parse_component_set(response.props.get("supported-calendar-component-set")),
                    href=response.href,
                )
            )
        return collections

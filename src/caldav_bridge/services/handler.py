from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..data import DiscoveryCache, cache_key
from ..domain import (
    CalendarQueryOptions,
    ComponentFilters,
    DiscoveryResult,
    NotFoundError,
    UnknownTemplateError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)
from ..ical import combine_filters, components_to_icalendar, create_empty_calendar, parse_icalendar
from ..protocol import CALDAV_NS, DAV_NS, CalDavClient, CalDavDiscovery, PropertyDescriptor
from ..templates import (
    ParsedCalDavUri,
    get_component_type,
    get_filter_params,
    get_time_range,
    is_metadata_request,
    parse_caldav_uri,
)
from .models import (
    CALENDAR_MIME_TYPE,
    JSON_MIME_TYPE,
    CalendarMetadataPayload,
    ErrorPayload,
    ResourceResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
DISCOVERY_TTL_SECONDS = 300.0

QUERY_PROPS = (
    PropertyDescriptor("getetag", DAV_NS),
    PropertyDescriptor("calendar-data", CALDAV_NS),
)


@dataclass(frozen=True)
class RequestContext:
    uri: str
    client: CalDavClient
    timeout_ms: Optional[int] = None


def build_filters_from_options(options: CalendarQueryOptions) -> Dict[str, Any]:
    """Translate query options into the comp-filter tree handed to the client."""

    filters: Dict[str, Any] = {"type": "comp-filter", "name": "VCALENDAR"}
    time_range = options.time_range
    has_range = time_range is not None and not time_range.is_empty
    if options.component_type:
        comp: Dict[str, Any] = {"name": options.component_type, "is_not_defined": False}
        if has_range:
            comp["time_range"] = {"start": time_range.start, "end": time_range.end}
        filters["comp_filters"] = [comp]
    elif has_range:
        filters["time_range"] = {"start": time_range.start, "end": time_range.end}
    return filters


class CalDavRequestHandler:
    """Resolve a caldav:// URI into a calendar or metadata response.

    Failures never escape: they become a JSON error body with status 400.
    """

    def __init__(
        self,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        cache: Optional[DiscoveryCache] = None,
        cache_ttl_seconds: float = DISCOVERY_TTL_SECONDS,
    ) -> None:
        self.default_timeout_ms = default_timeout_ms
        self.discovery_cache = cache if cache is not None else DiscoveryCache(ttl_seconds=cache_ttl_seconds)

    async def handle_request(self, context: RequestContext) -> ResourceResponse:
        try:
            parsed = parse_caldav_uri(context.uri)
            discovery = await self.get_discovery_result(context.client)
            if is_metadata_request(parsed.template_name):
                return self._handle_metadata_request(parsed, discovery)
            return await self._handle_calendar_request(parsed, discovery, context.client, context.timeout_ms)
        except Exception as exc:  # noqa: BLE001
            return self.error_response(context.uri, exc)

    def error_response(self, uri: str, exc: Exception) -> ResourceResponse:
        logger.warning("CalDAV request for %s failed: %s", uri, exc)
        return ResourceResponse(
            content=ErrorPayload(error=str(exc) or exc.__class__.__name__).model_dump_json(),
            mime_type=JSON_MIME_TYPE,
            status=400,
        )

    async def get_discovery_result(self, client: CalDavClient) -> DiscoveryResult:
        key = cache_key(client.server_url, client.username)
        cached = self.discovery_cache.get(key)
        if cached is not None:
            return cached

        logger.debug("Discovery cache miss for %s", key)
        result = await CalDavDiscovery(client).discover()
        self.discovery_cache.put(key, result)
        return result

    def _handle_metadata_request(self, parsed: ParsedCalDavUri, discovery: DiscoveryResult) -> ResourceResponse:
        if parsed.template_name != "metadata-list-cals":
            raise UnknownTemplateError(f"Unknown metadata template: {parsed.template_name}")
        payload = CalendarMetadataPayload.from_domain(discovery)
        return ResourceResponse(
            content=payload.model_dump_json(indent=2, by_alias=True),
            mime_type=JSON_MIME_TYPE,
            status=200,
        )

    async def _handle_calendar_request(
        self,
        parsed: ParsedCalDavUri,
        discovery: DiscoveryResult,
        client: CalDavClient,
        timeout_ms: Optional[int],
    ) -> ResourceResponse:
        variables = parsed.variables
        calendar = discovery.find_collection(variables.get("calendarId", ""))
        if calendar is None:
            raise NotFoundError(f"Calendar not found: {variables.get('calendarId')}")

        time_range = get_time_range(variables)
        filter_params = get_filter_params(variables)
        options = CalendarQueryOptions(
            component_type=get_component_type(variables),
            time_range=time_range,
            category_filter=filter_params.category,
            uid=filter_params.uid,
            jmes_filter=filter_params.jmes_filter,
        )

        calendar_data = await self.execute_calendar_query(
            client,
            calendar.href,
            options,
            timeout_ms or self.default_timeout_ms,
        )

        components = parse_icalendar(calendar_data)
        filtered = combine_filters(
            components,
            ComponentFilters(
                category=filter_params.category,
                uid=filter_params.uid,
                jmes_filter=filter_params.jmes_filter,
            ),
        )
        logger.debug("Returning %d of %d components for %s", len(filtered), len(components), parsed.template_name)
        return ResourceResponse(
            content=components_to_icalendar(filtered),
            mime_type=CALENDAR_MIME_TYPE,
            status=200,
        )

    async def execute_calendar_query(
        self,
        client: CalDavClient,
        calendar_url: str,
        options: CalendarQueryOptions,
        timeout_ms: int,
    ) -> str:
        """Run the REPORT against ``calendar_url``; the query is cancelled once the budget runs out."""

        try:
            results = await asyncio.wait_for(
                client.calendar_query(calendar_url, list(QUERY_PROPS), build_filters_from_options(options)),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError("CalDAV server request timed out") from exc
        except Exception as exc:  # noqa: BLE001
            raise UpstreamFailureError(f"CalDAV query failed: {exc}") from exc

        fragments = [item.props.get("calendar-data") for item in results]
        calendar_data = "\n".join(fragment for fragment in fragments if fragment)
        return calendar_data or create_empty_calendar()

    def clear_discovery_cache(self) -> None:
        self.discovery_cache.clear()

    @property
    def discovery_cache_size(self) -> int:
        return len(self.discovery_cache)

"""Tests for caldav_bridge/protocol/client.py

The httpx transport is replaced with ``httpx.MockTransport`` so no network is used.
"""

import httpx
import pytest

from caldav_bridge.config import CalDavSettings
from caldav_bridge.domain import UpstreamFailureError
from caldav_bridge.protocol import (
    CalDavClient,
    CalDavDiscovery,
    HttpCalDavClient,
    PropertyDescriptor,
    parse_propfind_response,
)
from caldav_bridge.protocol.discovery import CALENDAR_HOME_SET, CURRENT_USER_PRINCIPAL

PRINCIPAL_BODY = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:">
  <d:response>
    <d:href>/dav/</d:href>
    <d:propstat>
      <d:prop><d:current-user-principal><d:href>/dav/principals/john/</d:href></d:current-user-principal></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""

HOME_BODY = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/dav/principals/john/</d:href>
    <d:propstat>
      <d:prop><c:calendar-home-set><d:href>/dav/calendars/john/</d:href></c:calendar-home-set></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""

COLLECTIONS_BODY = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/dav/calendars/john/</d:href>
    <d:propstat>
      <d:prop><d:resourcetype><d:collection/></d:resourcetype></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
  <d:response>
    <d:href>/dav/calendars/john/work/</d:href>
    <d:propstat>
      <d:prop>
        <d:displayname>Work</d:displayname>
        <d:resourcetype><d:collection/><c:calendar/></d:resourcetype>
        <c:supported-calendar-component-set>
          <c:comp name="VEVENT"/>
          <c:comp name="VTODO"/>
        </c:supported-calendar-component-set>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
    <d:propstat>
      <d:prop><d:getctag/></d:prop>
      <d:status>HTTP/1.1 404 Not Found</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""

REPORT_BODY = """<?xml version="1.0"?>
<d:multistatus xmlns:d="DAV:" xmlns:c="urn:ietf:params:xml:ns:caldav">
  <d:response>
    <d:href>/dav/calendars/john/work/1.ics</d:href>
    <d:propstat>
      <d:prop>
        <d:getetag>"1"</d:getetag>
        <c:calendar-data>BEGIN:VCALENDAR
BEGIN:VEVENT
UID:one
END:VEVENT
END:VCALENDAR</c:calendar-data>
      </d:prop>
      <d:status>HTTP/1.1 200 OK</d:status>
    </d:propstat>
  </d:response>
</d:multistatus>
"""


def _router(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = request.content.decode("utf-8")
        if request.method == "REPORT":
            return httpx.Response(207, text=REPORT_BODY)
        if "current-user-principal" in body:
            return httpx.Response(207, text=PRINCIPAL_BODY)
        if "calendar-home-set" in body:
            return httpx.Response(207, text=HOME_BODY)
        return httpx.Response(207, text=COLLECTIONS_BODY)

    return handler


@pytest.fixture
def recorded():
    return []


@pytest.fixture
async def http_client(recorded):
    client = HttpCalDavClient(
        "https://dav.example.com/dav/",
        username="john",
        password="secret",
        transport=httpx.MockTransport(_router(recorded)),
    )
    yield client
    await client.aclose()


class TestParsePropfind:
    def test_skips_failed_propstats(self):
        (_, work) = parse_propfind_response(COLLECTIONS_BODY)
        assert "getctag" not in work.props
        assert work.props["displayname"] == "Work"
        assert work.props["resourcetype"] == {"collection": {}, "calendar": {}}
        assert work.props["supported-calendar-component-set"] == {"comp": [{"name": "VEVENT"}, {"name": "VTODO"}]}

    def test_href_properties(self):
        (response,) = parse_propfind_response(PRINCIPAL_BODY)
        assert response.href == "/dav/"
        assert response.props["current-user-principal"] == {"href": "/dav/principals/john/"}

    def test_malformed_body(self):
        with pytest.raises(UpstreamFailureError, match="Malformed PROPFIND response"):
            parse_propfind_response("<d:multistatus")


class TestHttpClient:
    async def test_satisfies_client_protocol(self, http_client):
        assert isinstance(http_client, CalDavClient)

    async def test_resolve_joins_relative_paths(self, http_client):
        assert http_client.resolve("/dav/calendars/john/") == "https://dav.example.com/dav/calendars/john/"
        assert http_client.resolve("https://other.example.com/x") == "https://other.example.com/x"

    async def test_propfind_sends_depth_and_auth(self, http_client, recorded):
        await http_client.propfind(http_client.server_url, [CURRENT_USER_PRINCIPAL], depth="0")
        request = recorded[0]
        assert request.method == "PROPFIND"
        assert request.headers["Depth"] == "0"
        assert request.headers["Authorization"].startswith("Basic ")
        assert "<D:current-user-principal/>" in request.content.decode("utf-8")

    async def test_calendar_home_set_uses_caldav_namespace(self, http_client, recorded):
        await http_client.propfind("/dav/principals/john/", [CALENDAR_HOME_SET])
        assert "<C:calendar-home-set/>" in recorded[0].content.decode("utf-8")

    async def test_calendar_query_returns_calendar_data(self, http_client, recorded):
        props = [PropertyDescriptor("getetag"), PropertyDescriptor("calendar-data", "urn:ietf:params:xml:ns:caldav")]
        filters = {"name": "VCALENDAR", "comp_filters": [{"name": "VEVENT", "is_not_defined": False}]}
        (item,) = await http_client.calendar_query("/dav/calendars/john/work/", props, filters)

        request = recorded[0]
        assert request.method == "REPORT"
        assert request.headers["Depth"] == "1"
        assert str(request.url) == "https://dav.example.com/dav/calendars/john/work/"
        assert '<C:comp-filter name="VEVENT"/>' in request.content.decode("utf-8")
        assert item.href == "/dav/calendars/john/work/1.ics"
        assert item.props["getetag"] == '"1"'
        assert "UID:one" in item.props["calendar-data"]

    async def test_discovery_over_http(self, http_client):
        result = await CalDavDiscovery(http_client).discover()
        assert result.principal == "/dav/principals/john/"
        assert result.home == "/dav/calendars/john/"
        (work,) = result.collections
        assert work.calendar_id == "work"
        assert work.display_name == "Work"
        assert work.component_set == ("VEVENT", "VTODO")

    async def test_error_status_raises(self):
        client = HttpCalDavClient(
            "https://dav.example.com/",
            transport=httpx.MockTransport(lambda request: httpx.Response(401)),
        )
        async with client:
            with pytest.raises(UpstreamFailureError, match="returned HTTP 401"):
                await client.propfind("/", [CURRENT_USER_PRINCIPAL])

    async def test_transport_error_raises(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with HttpCalDavClient("https://dav.example.com/", transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(UpstreamFailureError, match="connection refused"):
                await client.propfind("/", [CURRENT_USER_PRINCIPAL])


def test_from_settings_requires_server_url():
    settings = CalDavSettings(server_url=None, username=None, password=None)
    with pytest.raises(UpstreamFailureError, match="CALDAV_SERVER_URL"):
        HttpCalDavClient.from_settings(settings)

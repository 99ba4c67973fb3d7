"""The CalDAV collaborator contract and its httpx implementation.

This module is the only place where network I/O happens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable
from xml.etree import ElementTree

import httpx

from ..config import CalDavSettings
from ..domain import UpstreamFailureError
from .report import CALDAV_NS, DAV_NS, build_propfind, parse_multistatus, render_filter_query

logger = logging.getLogger(__name__)

_SUCCESS_CODES = {200, 207}


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    namespace: str = DAV_NS

    @property
    def qualified_name(self) -> str:
        return f"caldav:{self.name}" if self.namespace == CALDAV_NS else self.name


@dataclass
class DavResponse:
    """One ``<response>`` of a multistatus body with its successful properties."""

    href: str
    props: Dict[str, Any] = field(default_factory=dict)
    status: Optional[str] = None


@runtime_checkable
class CalDavClient(Protocol):
    server_url: str
    username: Optional[str]

    async def propfind(
        self,
        url: str,
        props: Sequence[PropertyDescriptor],
        depth: str = "0",
    ) -> List[DavResponse]: ...

    async def calendar_query(
        self,
        url: str,
        props: Sequence[PropertyDescriptor],
        filters: Mapping[str, Any],
    ) -> List[DavResponse]: ...


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _node_value(element: ElementTree.Element) -> Any:
    children = list(element)
    if not children:
        if element.attrib:
            return dict(element.attrib)
        text = (element.text or "").strip()
        return text if text else {}
    for child in children:
        if _local_name(child.tag) == "href":
            return {"href": (child.text or "").strip()}
    value: Dict[str, Any] = {}
    for child in children:
        key = _local_name(child.tag)
        child_value = _node_value(child)
        if key in value:
            existing = value[key]
            value[key] = existing + [child_value] if isinstance(existing, list) else [existing, child_value]
        else:
            value[key] = child_value
    return value


def _prop_value(element: ElementTree.Element) -> Any:
    if not list(element) and not element.attrib:
        return (element.text or "").strip()
    return _node_value(element)


def parse_propfind_response(body: str) -> List[DavResponse]:
    """Read a PROPFIND multistatus body; properties reported with a non-2xx propstat are skipped."""

    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise UpstreamFailureError(f"Malformed PROPFIND response: {exc}") from exc

    results: list[DavResponse] = []
    for response in root.iter(f"{{{DAV_NS}}}response"):
        href = (response.findtext(f"{{{DAV_NS}}}href") or "").strip()
        props: Dict[str, Any] = {}
        for propstat in response.findall(f"{{{DAV_NS}}}propstat"):
            status = (propstat.findtext(f"{{{DAV_NS}}}status") or "").strip()
            if status and " 200" not in status:
                continue
            prop = propstat.find(f"{{{DAV_NS}}}prop")
            if prop is None:
                continue
            for element in prop:
                props[_local_name(element.tag)] = _prop_value(element)
        results.append(
            DavResponse(
                href=href,
                props=props,
                status=(response.findtext(f"{{{DAV_NS}}}status") or "").strip() or None,
            )
        )
    return results


class HttpCalDavClient:
    """Async CalDAV client issuing PROPFIND and REPORT requests with httpx."""

    def __init__(
        self,
        server_url: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.server_url = server_url
        self.username = username
        auth = httpx.BasicAuth(username, password or "") if username else None
        self._client = httpx.AsyncClient(
            auth=auth,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: CalDavSettings, *, timeout: float = 60.0) -> "HttpCalDavClient":
        if not settings.is_configured:
            raise UpstreamFailureError(
                f"CalDAV client is not configured; missing {', '.join(settings.missing_env_vars)}"
            )
        return cls(
            settings.server_url or "",
            username=settings.username,
            password=settings.password,
            timeout=timeout,
        )

    async def __aenter__(self) -> "HttpCalDavClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def resolve(self, url: str) -> str:
        return str(httpx.URL(self.server_url).join(url))

    async def _send(self, method: str, url: str, body: str, depth: str) -> httpx.Response:
        target = self.resolve(url)
        headers = {"Depth": depth, "Content-Type": "application/xml; charset=utf-8"}
        logger.debug("%s %s (Depth: %s)", method, target, depth)
        try:
            response = await self._client.request(method, target, content=body.encode("utf-8"), headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamFailureError(f"{method} {target} failed: {exc}") from exc
        if response.status_code not in _SUCCESS_CODES:
            raise UpstreamFailureError(f"{method} {target} returned HTTP {response.status_code}")
        return response

    async def propfind(
        self,
        url: str,
        props: Sequence[PropertyDescriptor],
        depth: str = "0",
    ) -> List[DavResponse]:
        body = build_propfind([prop.qualified_name for prop in props], depth)
        response = await self._send("PROPFIND", url, body, depth)
        return parse_propfind_response(response.text)

    async def calendar_query(
        self,
        url: str,
        props: Sequence[PropertyDescriptor],
        filters: Mapping[str, Any],
    ) -> List[DavResponse]:
        body = render_filter_query([prop.qualified_name for prop in props], filters)
        response = await self._send("REPORT", url, body, "1")
        return [
            DavResponse(
                href=entry.href,
                props={"getetag": entry.etag, "calendar-data": entry.calendar_data},
                status=entry.status or None,
            )
            for entry in parse_multistatus(response.text)
        ]

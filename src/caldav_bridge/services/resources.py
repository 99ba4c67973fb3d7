from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..domain import CalDavError
from ..templates import build_caldav_uri, get_all_templates, parse_caldav_uri, prioritized_templates
from .context import ServiceContext
from .handler import RequestContext
from .models import ResourceResponse


@dataclass(slots=True)
class ResourceService:
    context: ServiceContext

    async def read(self, uri: str, *, timeout_ms: Optional[int] = None) -> ResourceResponse:
        """Resolve ``uri`` against the configured CalDAV server.

        A missing client configuration is reported like any other request failure.
        """

        try:
            client = self.context.client()
        except CalDavError as exc:
            return self.context.handler.error_response(uri, exc)
        return await self.context.handler.handle_request(RequestContext(uri=uri, client=client, timeout_ms=timeout_ms))

    def templates(self) -> List[Dict[str, Any]]:
        return [template.to_record() for template in get_all_templates()]

    def matching_order(self) -> List[str]:
        return [template.name for template in prioritized_templates()]

    def build_uri(self, template_name: str, variables: Mapping[str, str]) -> str:
        return build_caldav_uri(template_name, variables)

    def describe_uri(self, uri: str) -> Dict[str, Any]:
        try:
            parsed = parse_caldav_uri(uri)
        except CalDavError as exc:
            return {"valid": False, "error": str(exc)}
        return {
            "valid": True,
            "templateName": parsed.template_name,
            "mimeType": parsed.template.mime_type,
            "variables": dict(parsed.variables),
        }

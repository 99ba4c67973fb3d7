from __future__ import annotations

from typing import Any, Dict, Optional

from .registry import register_api
from .state import api_state


@register_api(
    "read_caldav_resource",
    description=(
        "Read a caldav:// resource. Returns iCalendar text for component URIs and JSON for "
        "caldav://{principal}/_meta/calendars. Failures come back with status 400 and a JSON error."
    ),
    category="resources",
    tags=("read", "caldav"),
)
async def read_caldav_resource(uri: str, timeout_ms: Optional[int] = None) -> Dict[str, Any]:
    response = await api_state.resources.read(uri, timeout_ms=timeout_ms)
    return response.to_dict()


@register_api(
    "list_resource_templates",
    description="List the caldav:// URI templates with their variables, in matching priority order.",
    category="resources",
    tags=("templates", "metadata"),
)
def list_resource_templates() -> Dict[str, Any]:
    return {
        "templates": api_state.resources.templates(),
        "matchingOrder": api_state.resources.matching_order(),
    }


@register_api(
    "build_resource_uri",
    description="Build a caldav:// URI from a template name and its variables; values are percent-encoded.",
    category="resources",
    tags=("templates",),
)
def build_resource_uri(template_name: str, variables: Dict[str, str]) -> Dict[str, str]:
    return {"uri": api_state.resources.build_uri(template_name, variables)}


@register_api(
    "validate_resource_uri",
    description="Match a caldav:// URI against the templates without contacting the server.",
    category="resources",
    tags=("templates", "validation"),
)
def validate_resource_uri(uri: str) -> Dict[str, Any]:
    return api_state.resources.describe_uri(uri)

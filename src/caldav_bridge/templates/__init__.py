"""caldav:// resource templates: the fixed catalog and the URI matcher."""

from __future__ import annotations

from .registry import (
    CALDAV_TEMPLATES,
    SCHEME,
    ResourceTemplate,
    ValidationResult,
    VariableSpec,
    get_all_templates,
    get_template,
    validate_template_variables,
)
from .uri import (
    ParsedCalDavUri,
    build_caldav_uri,
    extract_calendar_path,
    get_component_type,
    get_filter_params,
    get_time_range,
    is_metadata_request,
    parse_caldav_uri,
    prioritized_templates,
)

__all__ = [
    "CALDAV_TEMPLATES",
    "SCHEME",
    "ParsedCalDavUri",
    "ResourceTemplate",
    "ValidationResult",
    "VariableSpec",
    "build_caldav_uri",
    "extract_calendar_path",
    "get_all_templates",
    "get_component_type",
    "get_filter_params",
    "get_template",
    "get_time_range",
    "is_metadata_request",
    "parse_caldav_uri",
    "prioritized_templates",
    "validate_template_variables",
]

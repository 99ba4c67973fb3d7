from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import parse_qs, quote, unquote

from ..domain import (
    FilterParams,
    MalformedInputError,
    MissingVariablesError,
    NoMatchError,
    TemplateValidationError,
    TimeRange,
    UnknownTemplateError,
)
from .registry import SCHEME, ResourceTemplate, get_all_templates, get_template, validate_template_variables

logger = logging.getLogger(__name__)

# Path segments that make a template structurally more specific than the
# generic {principal}/{calendarId}/{x} shapes.
RESERVED_LITERALS = ("VTODO", "_meta")

_CATEGORY_SUFFIX = "/VTODO"
_METADATA_SUFFIX = "/_meta/calendars"
_PLACEHOLDER = re.compile(r"{([^}]+)}")
# encodeURIComponent leaves these unescaped alongside the unreserved set.
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class ParsedCalDavUri:
    template_name: str
    variables: Dict[str, str]
    template: ResourceTemplate


def _priority(template: ResourceTemplate) -> tuple[int, int, int]:
    has_literal = any(literal in template.uri_template for literal in RESERVED_LITERALS)
    query_count = len(template.query_bindings)
    return (
        0 if has_literal else 1,
        0 if query_count else 1,
        -query_count,
    )


def prioritized_templates() -> List[ResourceTemplate]:
    """Templates in matching order: literal shapes, then query shapes by arity."""

    # sorted() is stable, so ties keep declaration order.
    return sorted(get_all_templates(), key=_priority)


def parse_caldav_uri(uri: str) -> ParsedCalDavUri:
    if not uri.startswith(SCHEME):
        raise MalformedInputError(f"URI must start with {SCHEME}")

    remainder = uri[len(SCHEME):]
    for template in prioritized_templates():
        variables = _match_template(remainder, template)
        if variables is None:
            continue
        validation = validate_template_variables(template.name, variables)
        if not validation.is_valid:
            raise TemplateValidationError(validation.errors)
        logger.debug("URI %s matched template %s", uri, template.name)
        return ParsedCalDavUri(template_name=template.name, variables=variables, template=template)

    raise NoMatchError(f"No matching template found for URI: {uri}")


def _match_template(remainder: str, template: ResourceTemplate) -> Optional[Dict[str, str]]:
    path_part, _, query_part = remainder.partition("?")

    variables = _match_path(path_part, template)
    if variables is None:
        return None

    bindings = template.query_bindings
    if bindings and not query_part:
        return None
    if not bindings and query_part:
        return None
    if bindings:
        params = parse_qs(query_part, keep_blank_values=True)
        found = False
        for key, name in bindings:
            values = params.get(key)
            if values is not None:
                variables[name] = values[0]
                found = True
        # A query string carrying none of the declared keys belongs to another shape.
        if not found:
            return None
    return variables


def _match_path(path: str, template: ResourceTemplate) -> Optional[Dict[str, str]]:
    variables: Dict[str, str] = {}

    if template.name == "components-by-cat":
        if not path.endswith(_CATEGORY_SUFFIX):
            return None
        parts = path[: -len(_CATEGORY_SUFFIX)].split("/")
        if len(parts) < 2:
            return None
        calendar_id = parts.pop()
        variables["principal"] = unquote("/".join(parts))
        if calendar_id:
            variables["calendarId"] = unquote(calendar_id)
        return variables

    if template.name == "metadata-list-cals":
        if not path.endswith(_METADATA_SUFFIX):
            return None
        variables["principal"] = unquote(path[: -len(_METADATA_SUFFIX)])
        return variables

    match = _compile_path(template.path_template).fullmatch(path)
    if match is None:
        return None
    for key, value in match.groupdict().items():
        variables[key] = unquote(value)
    return variables


def _compile_path(path_template: str) -> re.Pattern[str]:
    pieces: list[str] = []
    position = 0
    for placeholder in _PLACEHOLDER.finditer(path_template):
        pieces.append(re.escape(path_template[position : placeholder.start()]))
        name = placeholder.group(1)
        if name == "principal":
            pieces.append(f"(?P<{name}>.+?)")
        else:
            pieces.append(f"(?P<{name}>[^/?]+)")
        position = placeholder.end()
    pieces.append(re.escape(path_template[position:]))
    return re.compile("".join(pieces))


def build_caldav_uri(template_name: str, variables: Mapping[str, str]) -> str:
    template = get_template(template_name)
    if template is None:
        raise UnknownTemplateError(f"Unknown template: {template_name}")

    validation = validate_template_variables(template_name, variables)
    if not validation.is_valid:
        raise TemplateValidationError(validation.errors, prefix="Invalid variables")

    uri = template.uri_template
    for key, value in variables.items():
        uri = uri.replace(f"{{{key}}}", quote(str(value), safe=_URI_COMPONENT_SAFE))

    unresolved = _PLACEHOLDER.findall(uri)
    if unresolved:
        raise MissingVariablesError(unresolved)
    return uri


def extract_calendar_path(variables: Mapping[str, str]) -> str:
    principal = variables.get("principal")
    calendar_id = variables.get("calendarId")
    if not principal or not calendar_id:
        raise MalformedInputError("Missing required variables: principal and calendarId")
    normalized = principal if principal.endswith("/") else f"{principal}/"
    return f"{normalized}{calendar_id}/"


def is_metadata_request(template_name: str) -> bool:
    return template_name.startswith("metadata-")


def get_component_type(variables: Mapping[str, str]) -> Optional[str]:
    return variables.get("comp")


def get_time_range(variables: Mapping[str, str]) -> TimeRange:
    return TimeRange(start=variables.get("start"), end=variables.get("end"))


def get_filter_params(variables: Mapping[str, str]) -> FilterParams:
    return FilterParams(
        category=variables.get("cat") or None,
        jmes_filter=variables.get("jmes") or None,
        uid=variables.get("uid") or None,
    )

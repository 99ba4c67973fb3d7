from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..domain import COMPONENT_TYPES, VariableType

SCHEME = "caldav://"

_ISO_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}Z?)?$"
_PLACEHOLDER = re.compile(r"{([^}]+)}")


@dataclass(frozen=True)
class VariableSpec:
    name: str
    description: str
    required: bool = True
    type: VariableType = VariableType.STRING
    pattern: Optional[str] = None
    enum: Optional[tuple[str, ...]] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "required": self.required,
            "type": self.type.value,
        }
        if self.pattern:
            record["pattern"] = self.pattern
        if self.enum:
            record["enum"] = list(self.enum)
        return record


@dataclass(frozen=True)
class ResourceTemplate:
    name: str
    description: str
    uri_template: str
    mime_type: str
    variables: tuple[VariableSpec, ...] = field(default_factory=tuple)

    @property
    def path_template(self) -> str:
        return self.uri_template[len(SCHEME):].partition("?")[0]

    @property
    def query_template(self) -> str:
        return self.uri_template.partition("?")[2]

    @property
    def placeholders(self) -> List[str]:
        return _PLACEHOLDER.findall(self.uri_template)

    @property
    def query_bindings(self) -> List[tuple[str, str]]:
        """(query key, variable name) pairs declared by the query template."""

        bindings = []
        for pair in filter(None, self.query_template.split("&")):
            key, _, value = pair.partition("=")
            match = _PLACEHOLDER.fullmatch(value)
            if match:
                bindings.append((key, match.group(1)))
        return bindings

    def variable(self, name: str) -> Optional[VariableSpec]:
        for spec in self.variables:
            if spec.name == name:
                return spec
        return None

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "uriTemplate": self.uri_template,
            "mimeType": self.mime_type,
            "variables": [spec.to_record() for spec in self.variables],
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()


_PRINCIPAL = VariableSpec("principal", "CalDAV principal path")
_CALENDAR_ID = VariableSpec("calendarId", "Calendar collection identifier")
_COMPONENT = VariableSpec("comp", "Component type", enum=COMPONENT_TYPES)


CALDAV_TEMPLATES: tuple[ResourceTemplate, ...] = (
    ResourceTemplate(
        name="components-range",
        description="Calendar components within a specific time range",
        uri_template=SCHEME + "{principal}/{calendarId}/{comp}?start={start}&end={end}",
        mime_type="text/calendar",
        variables=(
            _PRINCIPAL,
            _CALENDAR_ID,
            _COMPONENT,
            VariableSpec(
                "start",
                "Start date/time in ISO format",
                type=VariableType.DATETIME,
                pattern=_ISO_DATETIME_PATTERN,
            ),
            VariableSpec(
                "end",
                "End date/time in ISO format",
                type=VariableType.DATETIME,
                pattern=_ISO_DATETIME_PATTERN,
            ),
        ),
    ),
    ResourceTemplate(
        name="components-by-cat",
        description="Tasks filtered by CATEGORIES property",
        uri_template=SCHEME + "{principal}/{calendarId}/VTODO?cat={cat}",
        mime_type="text/calendar",
        variables=(
            _PRINCIPAL,
            _CALENDAR_ID,
            VariableSpec("cat", "Category name to filter by"),
        ),
    ),
    ResourceTemplate(
        name="component-by-uid",
        description="Single calendar component by UID",
        uri_template=SCHEME + "{principal}/{calendarId}/{uid}",
        mime_type="text/calendar",
        variables=(
            _PRINCIPAL,
            _CALENDAR_ID,
            VariableSpec("uid", "Unique identifier of the component"),
        ),
    ),
    ResourceTemplate(
        name="components-query",
        description="Advanced component filtering with JMES-like expressions",
        uri_template=SCHEME + "{principal}/{calendarId}/{comp}?filter={jmes}",
        mime_type="text/calendar",
        variables=(
            _PRINCIPAL,
            _CALENDAR_ID,
            _COMPONENT,
            VariableSpec("jmes", "JMES-like filter expression"),
        ),
    ),
    ResourceTemplate(
        name="metadata-list-cals",
        description="JSON metadata listing all available calendars",
        uri_template=SCHEME + "{principal}/_meta/calendars",
        mime_type="application/json",
        variables=(_PRINCIPAL,),
    ),
)


def get_template(name: str) -> Optional[ResourceTemplate]:
    for template in CALDAV_TEMPLATES:
        if template.name == name:
            return template
    return None


def get_all_templates() -> List[ResourceTemplate]:
    return list(CALDAV_TEMPLATES)


def validate_template_variables(template_name: str, variables: Mapping[str, str]) -> ValidationResult:
    """Check ``variables`` against the declared specs of ``template_name``.

    Every problem is collected so callers can report them together.
    """

    template = get_template(template_name)
    if template is None:
        return ValidationResult(is_valid=False, errors=(f"Unknown template: {template_name}",))

    errors: list[str] = []
    for spec in template.variables:
        value = variables.get(spec.name)
        if spec.required and not value:
            errors.append(f"Missing required variable: {spec.name}")
            continue
        if not value:
            continue

        if spec.type in (VariableType.DATE, VariableType.DATETIME):
            if spec.pattern and not re.search(spec.pattern, value):
                errors.append(f"Invalid {spec.type.value} format for {spec.name}: {value}")

        if spec.enum and value not in spec.enum:
            errors.append(
                f"Invalid value for {spec.name}: {value}. Must be one of: {', '.join(spec.enum)}"
            )

    return ValidationResult(is_valid=not errors, errors=tuple(errors))

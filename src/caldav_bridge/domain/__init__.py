"""Domain models for CalDAV resources and calendar components."""

from __future__ import annotations

from .enums import COMPONENT_TYPES, ComponentType, VariableType
from .errors import (
    CalDavError,
    DiscoveryError,
    MalformedInputError,
    MissingVariablesError,
    NoMatchError,
    NotFoundError,
    TemplateValidationError,
    UnknownTemplateError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)
from .models import (
    DEFAULT_COMPONENT_SET,
    CalendarCollection,
    CalendarComponent,
    CalendarQueryOptions,
    ComponentFilters,
    DiscoveryResult,
    FilterParams,
    TimeRange,
)

__all__ = [
    "COMPONENT_TYPES",
    "DEFAULT_COMPONENT_SET",
    "CalDavError",
    "CalendarCollection",
    "CalendarComponent",
    "CalendarQueryOptions",
    "ComponentFilters",
    "ComponentType",
    "DiscoveryError",
    "DiscoveryResult",
    "FilterParams",
    "MalformedInputError",
    "MissingVariablesError",
    "NoMatchError",
    "NotFoundError",
    "TemplateValidationError",
    "TimeRange",
    "UnknownTemplateError",
    "UpstreamFailureError",
    "UpstreamTimeoutError",
    "VariableType",
]

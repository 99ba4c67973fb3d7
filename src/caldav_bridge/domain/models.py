from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import COMPONENT_TYPES


@dataclass(slots=True)
class CalendarComponent:
    """A single VEVENT, VTODO or VJOURNAL with typed fields and extension properties."""

    uid: str = ""
    component_type: Optional[str] = None
    summary: Optional[str] = None
    dtstart: Optional[str] = None
    dtend: Optional[str] = None
    categories: Optional[List[str]] = None
    status: Optional[str] = None
    priority: Optional[int] = None
    description: Optional[str] = None
    location: Optional[str] = None
    extensions: Dict[str, str] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        """Flatten into a mapping used for expression path lookups.

        Typed fields win over extension properties that share a name.
        """

        record: Dict[str, Any] = dict(self.extensions)
        typed = {
            "uid": self.uid,
            "component_type": self.component_type,
            "componentType": self.component_type,
            "summary": self.summary,
            "dtstart": self.dtstart,
            "dtend": self.dtend,
            "categories": list(self.categories) if self.categories is not None else None,
            "status": self.status,
            "priority": self.priority,
            "description": self.description,
            "location": self.location,
        }
        record.update({key: value for key, value in typed.items() if value is not None})
        return record


@dataclass(frozen=True)
class CalendarCollection:
    calendar_id: str
    display_name: str
    component_set: tuple[str, ...]
    href: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.calendar_id,
            "displayName": self.display_name,
            "componentSet": list(self.component_set),
            "href": self.href,
        }


@dataclass(frozen=True)
class DiscoveryResult:
    principal: str
    home: str
    collections: tuple[CalendarCollection, ...] = ()

    def find_collection(self, calendar_id: str) -> Optional[CalendarCollection]:
        for collection in self.collections:
            if collection.calendar_id == calendar_id:
                return collection
        return None


@dataclass(frozen=True)
class TimeRange:
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.start and not self.end


@dataclass(frozen=True)
class FilterParams:
    """Normalized filter parameters projected from identifier variables."""

    category: Optional[str] = None
    jmes_filter: Optional[str] = None
    uid: Optional[str] = None


@dataclass(frozen=True)
class ComponentFilters:
    category: Optional[str] = None
    time_range: Optional[TimeRange] = None
    status: Optional[str] = None
    uid: Optional[str] = None
    jmes_filter: Optional[str] = None


@dataclass(frozen=True)
class CalendarQueryOptions:
    component_type: Optional[str] = None
    time_range: Optional[TimeRange] = None
    category_filter: Optional[str] = None
    uid: Optional[str] = None
    jmes_filter: Optional[str] = None

    @property
    def has_filters(self) -> bool:
        has_range = self.time_range is not None and not self.time_range.is_empty
        return bool(self.component_type or has_range or self.category_filter or self.uid or self.jmes_filter)


DEFAULT_COMPONENT_SET: tuple[str, ...] = COMPONENT_TYPES

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..domain import CalendarCollection, DiscoveryResult

CALENDAR_MIME_TYPE = "text/calendar"
JSON_MIME_TYPE = "application/json"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResourceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    mime_type: str = Field(alias="mimeType")
    status: int

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CalendarSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(alias="displayName")
    component_set: List[str] = Field(alias="componentSet")
    href: str

    @classmethod
    def from_domain(cls, collection: CalendarCollection) -> "CalendarSummary":
        return cls(
            id=collection.calendar_id,
            display_name=collection.display_name,
            component_set=list(collection.component_set),
            href=collection.href,
        )


class CalendarMetadataPayload(BaseModel):
    principal: str
    home: str
    calendars: List[CalendarSummary]
    timestamp: str = Field(default_factory=utc_timestamp)

    @classmethod
    def from_domain(cls, discovery: DiscoveryResult) -> "CalendarMetadataPayload":
        return cls(
            principal=discovery.principal,
            home=discovery.home,
            calendars=[CalendarSummary.from_domain(item) for item in discovery.collections],
        )


class ErrorPayload(BaseModel):
    error: str
    timestamp: str = Field(default_factory=utc_timestamp)

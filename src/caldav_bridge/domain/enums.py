from __future__ import annotations

from enum import Enum


class ComponentType(str, Enum):
    VEVENT = "VEVENT"
    VTODO = "VTODO"
    VJOURNAL = "VJOURNAL"


class VariableType(str, Enum):
    STRING = "string"
    DATE = "date"
    DATETIME = "datetime"


COMPONENT_TYPES: tuple[str, ...] = tuple(member.value for member in ComponentType)

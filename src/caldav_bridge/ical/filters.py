"""Client-side component filters.

Every filter returns a new list and leaves its input untouched.
"""

from __future__ import annotations

import logging
import operator
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..domain import CalendarComponent, ComponentFilters
from .dates import ALL_DAY_DURATION, is_all_day, parse_ical_date

logger = logging.getLogger(__name__)

_CONTAINS = re.compile(r"contains\(([^,]+),\s*['\"]([^'\"]+)['\"]\)")
_LENGTH = re.compile(r"length\(([^)]+)\)\s*([><=]+)\s*(\d+)")
_INDEXED_KEY = re.compile(r"^([^\[]*)\[(-?\d+)\]$")

_LENGTH_OPERATORS: Dict[str, Callable[[int, int], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
}


def filter_by_category(components: Sequence[CalendarComponent], category: str) -> List[CalendarComponent]:
    needle = category.lower()
    return [
        component
        for component in components
        if component.categories and any(needle in item.lower() for item in component.categories)
    ]


def filter_by_time_range(
    components: Sequence[CalendarComponent],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[CalendarComponent]:
    if not start and not end:
        return list(components)

    window_start = parse_ical_date(start) if start else None
    window_end = parse_ical_date(end) if end else None

    matched: list[CalendarComponent] = []
    for component in components:
        if not component.dtstart:
            continue

        component_start = parse_ical_date(component.dtstart)
        end_exclusive = False
        if component.dtend:
            component_end = parse_ical_date(component.dtend)
        elif is_all_day(component.dtstart) and component_start is not None:
            # All-day items cover [start, start + 24h).
            component_end = component_start + ALL_DAY_DURATION
            end_exclusive = True
        else:
            component_end = component_start

        # Unreadable dates impose no constraint, the component stays.
        if window_start and component_end:
            if component_end < window_start or (end_exclusive and component_end == window_start):
                continue
        if window_end and component_start and component_start > window_end:
            continue
        matched.append(component)
    return matched


def filter_by_status(components: Sequence[CalendarComponent], status: str) -> List[CalendarComponent]:
    normalized = status.upper()
    return [component for component in components if component.status == normalized]


def filter_by_uid(components: Sequence[CalendarComponent], uid: str) -> List[CalendarComponent]:
    return [component for component in components if component.uid == uid]


def filter_by_jmes_expression(components: Sequence[CalendarComponent], expression: str) -> List[CalendarComponent]:
    """Apply a tiny JMES-like expression.

    Supported shapes: ``path == "value"``, ``contains(path, "text")`` and
    ``length(path) OP N``. Anything else passes every component through.
    """

    try:
        if "==" in expression and not expression.lstrip().startswith("length("):
            path, _, expected = (part.strip() for part in expression.partition("=="))
            expected = expected.replace('"', "").replace("'", "")
            return [component for component in components if resolve_path(component, path) == expected]

        if "contains" in expression:
            match = _CONTAINS.search(expression)
            if match:
                path, needle = match.group(1).strip(), match.group(2)
                return [
                    component
                    for component in components
                    if isinstance(value := resolve_path(component, path), str) and needle in value
                ]

        if "length(" in expression:
            match = _LENGTH.search(expression)
            if match:
                path, symbol, count = match.group(1).strip(), match.group(2), int(match.group(3))
                compare = _LENGTH_OPERATORS.get(symbol)
                if compare is None:
                    return []
                return [
                    component
                    for component in components
                    if isinstance(value := resolve_path(component, path), list) and compare(len(value), count)
                ]
    except Exception as exc:  # noqa: BLE001
        logger.warning("Expression filter parsing error for %r: %s", expression, exc)
        return list(components)

    logger.warning("Expression filter %r not understood; returning components unfiltered", expression)
    return list(components)


def resolve_path(component: CalendarComponent, path: str) -> Any:
    """Walk ``a.b[0]`` style paths over a component record; missing segments yield ``None``."""

    current: Any = component.to_record()
    for key in path.split("."):
        indexed = _INDEXED_KEY.match(key)
        if indexed:
            current = _lookup(current, indexed.group(1))
            current = _index(current, int(indexed.group(2)))
        else:
            current = _lookup(current, key)
        if current is None:
            return None
    return current


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key)
    return None


def _index(container: Any, index: int) -> Any:
    if isinstance(container, (list, tuple)) and -len(container) <= index < len(container):
        return container[index]
    return None


def combine_filters(components: Sequence[CalendarComponent], filters: ComponentFilters) -> List[CalendarComponent]:
    """Apply the supplied filters in order: category, time range, status, uid, expression."""

    filtered = list(components)
    if filters.category:
        filtered = filter_by_category(filtered, filters.category)
    if filters.time_range is not None:
        filtered = filter_by_time_range(filtered, filters.time_range.start, filters.time_range.end)
    if filters.status:
        filtered = filter_by_status(filtered, filters.status)
    if filters.uid:
        filtered = filter_by_uid(filtered, filters.uid)
    if filters.jmes_filter:
        filtered = filter_by_jmes_expression(filtered, filters.jmes_filter)
    return filtered

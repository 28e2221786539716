from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pymongo import ASCENDING, DESCENDING

from goosepage.utils.exceptions import InvalidSort
from goosepage.utils.types import ID_FIELD, SortSpec

_DIRECTION_NAMES = {
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


@dataclass(frozen=True)
class SortPlan:
    """Effective sort for one page fetch.

    `display` is the order items are handed back in. `traversal` is the order
    sent to the store: the same as `display` when paging forward, every
    direction inverted when paging backward.
    """

    display: tuple[tuple[str, int], ...]
    traversal: tuple[tuple[str, int], ...]
    backward: bool = False

    @property
    def keys(self) -> list[str]:
        return [field for field, _ in self.display]

    @property
    def display_sort(self) -> SortSpec:
        return list(self.display)

    @property
    def traversal_sort(self) -> SortSpec:
        return list(self.traversal)


def _parse_direction(field: str, direction: Any) -> int:
    if isinstance(direction, str):
        parsed = _DIRECTION_NAMES.get(direction.lower())
        if parsed is not None:
            return parsed
    elif not isinstance(direction, bool) and direction in (ASCENDING, DESCENDING):
        return int(direction)
    raise InvalidSort(f"Invalid sort direction {direction!r} for field '{field}'")


def normalize_sort(sort: Any) -> SortSpec:
    """Normalize a caller sort specification into [(field, direction), ...].

    Accepts a mapping of field -> direction, a sequence of (field, direction)
    pairs, or "field" / "-field" strings. Order is significant.

    Example: normalize_sort(["-age", "name"]) -> [("age", -1), ("name", 1)]
    """
    if sort is None:
        return []
    if isinstance(sort, str):
        sort = [sort]
    items = sort.items() if isinstance(sort, Mapping) else sort

    spec: SortSpec = []
    seen: set[str] = set()
    for item in items:
        if isinstance(item, str):
            field, direction = (item[1:], DESCENDING) if item.startswith("-") else (item, ASCENDING)
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            field, direction = item[0], _parse_direction(str(item[0]), item[1])
        else:
            raise InvalidSort(f"Cannot interpret sort entry {item!r}")
        if not isinstance(field, str) or not field:
            raise InvalidSort(f"Sort field must be a non-empty string, got {field!r}")
        if field in seen:
            raise InvalidSort(f"Field '{field}' appears more than once in sort")
        seen.add(field)
        spec.append((field, direction))
    return spec


def plan_sort(sort: Any, backward: bool = False, id_field: str = ID_FIELD) -> SortPlan:
    """Build the effective sort plan with the identifier as the last key.

    The identifier keeps the caller's direction if the caller sorted on it,
    otherwise it is appended ascending. It always ends up last so the cursor
    tuple ends with a unique value.
    """
    spec = normalize_sort(sort)
    id_direction = ASCENDING
    display: list[tuple[str, int]] = []
    for field, direction in spec:
        if field == id_field:
            id_direction = direction
        else:
            display.append((field, direction))
    display.append((id_field, id_direction))

    if backward:
        traversal = tuple((field, -direction) for field, direction in display)
    else:
        traversal = tuple(display)
    return SortPlan(display=tuple(display), traversal=traversal, backward=backward)

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from bson import ObjectId

# Type aliases for better clarity
DocumentData = dict[str, Any]
FilterSpec = dict[str, Any]
SortSpec = list[tuple[str, int]]
Pipeline = list[dict[str, Any]]
DocumentId = ObjectId | str

# Generic type variable for documents
T = TypeVar("T")

ID_FIELD = "_id"
MAX_POPULATE_DEPTH = 5  # Maximum depth for nested population


def merge_filters(
    base: FilterSpec | None = None,
    override: FilterSpec | None = None,
    **kwargs: Any
) -> FilterSpec:
    """Merge multiple filter dictionaries with proper precedence.

    Args:
        base: Base filter dict
        override: Override filter dict (takes precedence over base)
        **kwargs: Additional filters (highest precedence)

    Returns:
        Merged filter dictionary
    """
    return {**(base or {}), **(override or {}), **kwargs}


def get_path(data: Any, path: str) -> Any:
    """Look up a dotted field path in a raw document.

    Numeric segments index into arrays. Missing segments resolve to None,
    which is how MongoDB sorts a missing field.

    Example: get_path({"a": {"b": [{"c": 1}]}}, "a.b.0.c") -> 1
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return None
            current = current[segment]
        elif (
            isinstance(current, Sequence)
            and not isinstance(current, (str, bytes))
            and segment.isdigit()
        ):
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class KeysetPage(Generic[T]):
    """Keyset pagination result.

    Items are always in display order. Each cursor is present only when the
    matching has_* flag is set; total_count is None unless it was requested.
    """

    items: list[T]
    limit: int
    has_next: bool
    has_previous: bool
    next_cursor: str | None = None
    previous_cursor: str | None = None
    total_count: int | None = None

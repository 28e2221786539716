from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from goosepage.utils.exceptions import InvalidPagination

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class PagingOptions:
    """Per-collection keyset paging configuration.

    Attributes:
        default_limit: Page size used when the caller omits the limit or
            supplies one that is not a non-negative number.
        allow_unlimited: Honor a limit of 0 as "no limit". When False a
            limit of 0 falls back to default_limit.
        return_total_count: Count the documents matching the base filter and
            attach the count to each page.
    """

    default_limit: int = DEFAULT_LIMIT
    allow_unlimited: bool = True
    return_total_count: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.default_limit, bool) or not isinstance(self.default_limit, int):
            raise InvalidPagination(
                f"default_limit must be an integer, got {type(self.default_limit).__name__}"
            )
        if self.default_limit < 1:
            raise InvalidPagination(
                f"default_limit must be >= 1, got {self.default_limit}"
            )


@dataclass(frozen=True)
class PaginationRequest:
    """A single keyset page request.

    `after` pages forward from a cursor, `before` pages backward from one.
    With neither, the page starts at the beginning of the sort order.
    The sort accepts anything normalize_sort() does.
    """

    limit: Any = None
    sort: Any = None
    after: str | None = None
    before: str | None = None

    def __post_init__(self) -> None:
        if self.after is not None and self.before is not None:
            raise InvalidPagination(
                "Only one of 'after' and 'before' may be supplied per request"
            )

    @property
    def backward(self) -> bool:
        return self.before is not None

    @property
    def cursor(self) -> str | None:
        """The incoming cursor token, whichever direction it pages in."""
        return self.before if self.before is not None else self.after


def resolve_limit(limit: Any, options: PagingOptions) -> int:
    """Turn a caller-supplied limit into an effective page size.

    Returns 0 for "unlimited". Anything that is not a non-negative number
    (None, bools, garbage strings, negatives) falls back to the default
    limit rather than failing the request.
    """
    if isinstance(limit, bool):
        return options.default_limit
    try:
        value = int(limit)
    except (TypeError, ValueError, OverflowError):
        return options.default_limit
    if value < 0:
        return options.default_limit
    if value == 0:
        return 0 if options.allow_unlimited else options.default_limit
    return value

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from goosepage.paging.cursor import encode_cursor
from goosepage.paging.options import PaginationRequest
from goosepage.paging.planner import SortPlan
from goosepage.utils.pagination import KeysetPage
from goosepage.utils.types import get_path


def cursor_values(doc: Mapping[str, Any], keys: Sequence[str]) -> list[Any]:
    """Extract the value of each sort key (dotted paths allowed) from a raw document."""
    return [get_path(doc, key) for key in keys]


def assemble_page(
    docs: Sequence[Mapping[str, Any]],
    request: PaginationRequest,
    plan: SortPlan,
    limit: int,
    total_count: int | None = None,
) -> KeysetPage[Mapping[str, Any]]:
    """Turn an over-fetched batch into a page.

    `docs` must be the store's answer to the seek filter sorted by
    plan.traversal with limit + 1 as the fetch size (or no cap when limit is
    0). The extra document only signals that more data exists and is never
    returned.

    A forward page fetched from an `after` cursor always reports
    has_previous=True without checking that anything precedes the cursor;
    likewise a backward page always reports has_next=True.

    An empty page (everything past the cursor was deleted, say) hands the
    incoming cursor back for its open edge. Cursors are exclusive, so
    paging `before` that cursor returns the documents preceding the cursor
    document, not the cursor document itself.
    """
    items = list(docs)
    has_more = limit > 0 and len(items) > limit
    if has_more:
        items = items[:limit]

    if plan.backward:
        items.reverse()

    has_previous = request.after is not None or (request.before is not None and has_more)
    has_next = request.before is not None or has_more

    next_cursor = None
    previous_cursor = None
    if has_next:
        next_cursor = _edge_cursor(items[-1] if items else None, plan, request)
    if has_previous:
        previous_cursor = _edge_cursor(items[0] if items else None, plan, request)

    return KeysetPage(
        items=items,
        limit=limit,
        has_next=has_next,
        has_previous=has_previous,
        next_cursor=next_cursor,
        previous_cursor=previous_cursor,
        total_count=total_count,
    )


def _edge_cursor(
    doc: Mapping[str, Any] | None, plan: SortPlan, request: PaginationRequest
) -> str | None:
    # An empty page has not moved away from the incoming cursor
    if doc is None:
        return request.cursor
    return encode_cursor(cursor_values(doc, plan.keys))

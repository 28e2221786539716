from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Generic, TypeVar

from bson import ObjectId

from goosepage.core.reference import populate_documents
from goosepage.lifecycle.observability import track_query
from goosepage.paging.assembler import assemble_page
from goosepage.paging.cursor import decode_cursor
from goosepage.paging.options import PaginationRequest, PagingOptions, resolve_limit
from goosepage.paging.planner import normalize_sort, plan_sort
from goosepage.paging.seek import build_seek_filter, combine_filters
from goosepage.utils.pagination import KeysetPage
from goosepage.utils.types import ID_FIELD, FilterSpec, SortSpec, merge_filters

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QuerySet(Generic[T]):
    """Fluent, lazy, immutable query builder for MongoDB documents.

    Each chainable method returns a new QuerySet instance.
    Queries are only executed when a terminal method is called.
    """

    def __init__(
        self,
        document_class: type[T],
        filter: FilterSpec | None = None,
        sort: SortSpec | None = None,
        limit_count: int = 0,
        projection: dict[str, Any] | None = None,
        populate_fields: list[str] | None = None,
    ) -> None:
        self._document_class = document_class
        self._filter: FilterSpec = filter or {}
        self._sort: SortSpec = sort or []
        self._limit_count = limit_count
        self._projection = projection
        self._populate_fields: list[str] = populate_fields or []

    def _clone(self, **overrides: Any) -> QuerySet[T]:
        """Return a new QuerySet with merged overrides."""
        defaults = {
            "document_class": self._document_class,
            "filter": self._filter.copy(),
            "sort": self._sort.copy(),
            "limit_count": self._limit_count,
            "projection": self._projection.copy() if self._projection else None,
            "populate_fields": self._populate_fields.copy(),
        }
        defaults.update(overrides)
        return QuerySet(**defaults)

    # --- Chainable methods ---

    def filter(self, _filter: FilterSpec | str | ObjectId | None = None, **kwargs: Any) -> QuerySet[T]:
        """Add filter conditions. Merges with existing filter.

        Examples:
            User.find().filter("507f1f77bcf86cd799439011")  # Filter by ID string
            User.find(age=18).filter({"city": "NYC"})  # Chain filters
        """
        if isinstance(_filter, str):
            _filter = {ID_FIELD: ObjectId(_filter)}
        elif isinstance(_filter, ObjectId):
            _filter = {ID_FIELD: _filter}

        merged = merge_filters(self._filter, _filter, **kwargs)
        return self._clone(filter=merged)

    def sort(self, *fields: Any) -> QuerySet[T]:
        """Set sort order. Prefix with '-' for descending.

        Example: .sort("-created_at", "name") or .sort(("age", 1))
        """
        return self._clone(sort=normalize_sort(list(fields)))

    def limit(self, n: int) -> QuerySet[T]:
        return self._clone(limit_count=n)

    def select(self, *fields: str) -> QuerySet[T]:
        """Set field projection."""
        projection: dict[str, Any] = {f: 1 for f in fields}
        projection[ID_FIELD] = 1
        return self._clone(projection=projection)

    def populate(self, *fields: str) -> QuerySet[T]:
        """Mark Ref fields to be resolved on the results (dotted paths allowed)."""
        return self._clone(populate_fields=self._populate_fields + list(fields))

    # --- Terminal methods ---

    async def all(self) -> list[T]:
        """Execute the query and return all matching documents."""
        async with track_query(
            "find",
            self._document_class._collection_name,
            self._document_class.__name__,
            filter=self._filter,
            sort=self._sort or None,
            limit=self._limit_count or None,
        ) as ctx:
            results = [doc async for doc in self]
            ctx["result_count"] = len(results)
        await populate_documents(results, self._populate_fields)
        return results

    async def first(self) -> T | None:
        """Return the first matching document, or None."""
        results = await self.limit(1).all()
        return results[0] if results else None

    async def count(self) -> int:
        """Count matching documents."""
        async with track_query("count", self._document_class._collection_name, self._document_class.__name__, filter=self._filter) as ctx:
            collection = self._document_class.get_collection()
            result = await collection.count_documents(self._filter)
            ctx["result_count"] = result
        return result

    async def exists(self) -> bool:
        return await self.count() > 0

    # --- Pagination ---

    async def keyset_paginate(
        self,
        limit: Any = None,
        *,
        after: str | None = None,
        before: str | None = None,
        options: PagingOptions | None = None,
    ) -> KeysetPage[T]:
        """Keyset pagination over this query's filter and sort.

        The query's sort (plus _id as the final tie-breaker) defines page
        order. Pass the page's next_cursor as `after` to move forward and its
        previous_cursor as `before` to move back. A limit of 0 means no
        limit when the collection allows it.

        Raises:
            MalformedCursor: If a cursor token cannot be decoded
            CursorMismatch: If a cursor was issued for a different sort
        """
        request = PaginationRequest(limit=limit, sort=self._sort, after=after, before=before)
        return await self._paginate(request, options)

    async def _paginate(self, request: PaginationRequest, options: PagingOptions | None = None) -> KeysetPage[T]:
        document_class = self._document_class
        options = options or document_class._paging_options
        limit = resolve_limit(request.limit, options)
        plan = plan_sort(request.sort, backward=request.backward)

        cursor_token = request.cursor
        values = decode_cursor(cursor_token) if cursor_token is not None else None
        seek = build_seek_filter(plan, values)
        query = combine_filters(self._filter, seek)
        projection = _with_sort_keys(self._projection, plan.keys)
        logger.debug(
            "Paged find on %s: filter=%s sort=%s limit=%s",
            document_class._collection_name,
            query,
            plan.traversal_sort,
            limit,
        )

        async def fetch() -> list[dict[str, Any]]:
            async with track_query(
                "find_paged",
                document_class._collection_name,
                document_class.__name__,
                filter=query,
                sort=plan.traversal_sort,
                limit=limit,
                has_cursor=values is not None,
            ) as ctx:
                collection = document_class.get_collection()
                cursor = collection.find(query, projection).sort(plan.traversal_sort)
                if limit:
                    # One extra document tells whether another page exists
                    cursor = cursor.limit(limit + 1)
                docs = [raw async for raw in cursor]
                ctx["result_count"] = len(docs)
            return docs

        if options.return_total_count:
            docs, total = await asyncio.gather(fetch(), self.count())
        else:
            docs, total = await fetch(), None

        page = assemble_page(docs, request, plan, limit, total)
        items = [document_class._from_mongo(raw) for raw in page.items]
        await populate_documents(items, self._populate_fields)
        return dataclasses.replace(page, items=items)

    # --- Async iteration ---

    async def __aiter__(self):
        cursor = self._build_cursor()
        async for raw in cursor:
            yield self._document_class._from_mongo(raw)

    # --- Internal ---

    def _build_cursor(self):
        """Compose a pymongo cursor from stored query parameters."""
        collection = self._document_class.get_collection()
        cursor = collection.find(self._filter, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._limit_count:
            cursor = cursor.limit(self._limit_count)
        return cursor


def _with_sort_keys(projection: dict[str, Any] | None, keys: list[str]) -> dict[str, Any] | None:
    """Make sure a projection returns _id and every sort key.

    Cursors are built from sort key values, so a page fetched without them
    could not produce a cursor. Inclusion projections gain the missing keys;
    exclusions that would hide a sort key (or a path above or below it) are
    dropped.
    """
    if not projection:
        return projection

    merged = dict(projection)
    if not merged.get(ID_FIELD, 1):
        del merged[ID_FIELD]

    sort_fields = [key for key in keys if key != ID_FIELD]
    inclusive = any(value for field, value in merged.items() if field != ID_FIELD)
    if not inclusive:
        for field in [f for f in merged if _overlaps(f, sort_fields)]:
            del merged[field]
        return merged or None

    for key in sort_fields:
        parts = key.split(".")
        prefixes = {".".join(parts[:i]) for i in range(1, len(parts) + 1)}
        if prefixes & merged.keys():
            continue
        for field in [f for f in merged if f.startswith(key + ".")]:
            del merged[field]
        merged[key] = 1
    return merged


def _overlaps(field: str, keys: list[str]) -> bool:
    return any(
        field == key or key.startswith(field + ".") or field.startswith(key + ".")
        for key in keys
    )

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional, Self, TYPE_CHECKING

if TYPE_CHECKING:
    from goosepage.core.queryset import QuerySet

from bson import ObjectId
from pydantic import BaseModel, Field
from pymongo.asynchronous.collection import AsyncCollection

from goosepage.core.connection import get_database
from goosepage.fields.base import PyObjectId
from goosepage.lifecycle.observability import track_query
from goosepage.paging.assembler import assemble_page
from goosepage.paging.cursor import decode_cursor
from goosepage.paging.options import PaginationRequest, PagingOptions, resolve_limit
from goosepage.paging.pipeline import build_paged_pipeline, split_facet_result
from goosepage.paging.planner import normalize_sort, plan_sort
from goosepage.paging.seek import build_seek_filter
from goosepage.utils.exceptions import DocumentNotFound
from goosepage.utils.pagination import KeysetPage
from goosepage.utils.settings import SettingsResolver
from goosepage.utils.types import DocumentData, FilterSpec, ID_FIELD, merge_filters

logger = logging.getLogger(__name__)

_document_registry: dict[str, type[Document]] = {}


class Document(BaseModel):
    """Base document class for MongoDB models.

    Binds a pydantic model to a collection and exposes keyset-paged reads
    (find_paged, aggregate_paged, find().keyset_paginate()).

    Configuration lives on an inner Settings class:

        class Event(Document):
            kind: str

            class Settings:
                collection = "events"
                paging = {"default_limit": 25, "return_total_count": False}
    """

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    # ClassVars — set by __init_subclass__
    _collection_name: ClassVar[str] = ""
    _connection_alias: ClassVar[str] = "default"
    _paging_options: ClassVar[PagingOptions] = PagingOptions()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._collection_name = SettingsResolver.get_collection_name(cls)
        cls._connection_alias = SettingsResolver.get_connection_alias(cls)
        cls._paging_options = SettingsResolver.get_paging_options(cls)
        _document_registry[cls.__name__] = cls

    # --- Serialization ---

    def _to_mongo(self) -> DocumentData:
        """Convert document to a MongoDB-compatible dict, keeping native BSON types."""
        data = self.model_dump(by_alias=True, mode="python")
        if data.get(ID_FIELD) is None:
            data.pop(ID_FIELD, None)
        return data

    @classmethod
    def _from_mongo(cls, data: DocumentData) -> Self:
        return cls.model_validate(data)

    @classmethod
    def get_collection(cls) -> AsyncCollection:
        """Get the MongoDB collection for this document class."""
        db = get_database(cls._connection_alias)
        return db[cls._collection_name]

    # --- Class-level reads ---

    @classmethod
    async def create(cls, **kwargs: Any) -> Self:
        """Create and insert a new document."""
        doc = cls(**kwargs)
        await doc.insert()
        return doc

    @classmethod
    async def get(cls, id: ObjectId | str) -> Self:
        """Find a document by its _id. Raises DocumentNotFound if missing."""
        if isinstance(id, str):
            id = ObjectId(id)
        async with track_query("get", cls._collection_name, cls.__name__, filter={ID_FIELD: id}):
            data = await cls.get_collection().find_one({ID_FIELD: id})
        if data is None:
            raise DocumentNotFound(f"{cls.__name__} with id '{id}' not found")
        return cls._from_mongo(data)

    @classmethod
    async def find_one(cls, filter: FilterSpec | None = None, **kwargs: Any) -> Self | None:
        filter = merge_filters(filter, **kwargs)
        async with track_query("find_one", cls._collection_name, cls.__name__, filter=filter):
            data = await cls.get_collection().find_one(filter)
        return cls._from_mongo(data) if data is not None else None

    @classmethod
    def find(cls, filter: FilterSpec | None = None, **kwargs: Any) -> "QuerySet[Self]":
        """Return a QuerySet for fluent query building."""
        from goosepage.core.queryset import QuerySet

        return QuerySet(cls, merge_filters(filter, **kwargs))

    # --- Paged reads ---

    @classmethod
    async def find_paged(
        cls,
        request: PaginationRequest,
        filter: FilterSpec | None = None,
        projection: dict[str, Any] | None = None,
        options: PagingOptions | None = None,
        populate: list[str] | None = None,
    ) -> KeysetPage[Self]:
        """Paged find: one keyset page of documents matching `filter`.

        Args:
            request: Limit, sort and optional after/before cursor
            filter: Base MongoDB filter; the seek filter is ANDed with it
            projection: Optional projection; _id and the sort keys are
                always returned, overriding exclusions of them
            options: Overrides the class's Settings.paging configuration
            populate: Ref fields (dotted paths allowed) resolved on the
                page's items

        Returns:
            KeysetPage of document instances in display order

        Raises:
            MalformedCursor: If the cursor token cannot be decoded
            CursorMismatch: If the cursor was issued for a different sort
        """
        from goosepage.core.queryset import QuerySet

        qs = QuerySet(
            cls,
            dict(filter or {}),
            normalize_sort(request.sort),
            projection=projection,
            populate_fields=list(populate or []),
        )
        return await qs._paginate(request, options)

    @classmethod
    async def aggregate_paged(
        cls,
        request: PaginationRequest,
        pipeline: list[dict[str, Any]] | None = None,
        options: PagingOptions | None = None,
        **aggregate_kwargs: Any,
    ) -> KeysetPage[DocumentData]:
        """Paged aggregate: one keyset page of a pipeline's output.

        Sort keys and cursors refer to fields of the documents the pipeline
        emits, which are returned as raw dicts. Extra keyword arguments go to
        pymongo's aggregate() (e.g. allowDiskUse, collation).

        Raises:
            MalformedCursor: If the cursor token cannot be decoded
            CursorMismatch: If the cursor was issued for a different sort
        """
        options = options or cls._paging_options
        limit = resolve_limit(request.limit, options)
        plan = plan_sort(request.sort, backward=request.backward)

        cursor_token = request.cursor
        values = decode_cursor(cursor_token) if cursor_token is not None else None
        seek = build_seek_filter(plan, values)
        stages = build_paged_pipeline(
            pipeline or [], plan, seek, limit, with_total_count=options.return_total_count
        )
        logger.debug("Paged aggregate on %s: pipeline=%s", cls._collection_name, stages)

        async with track_query(
            "aggregate_paged",
            cls._collection_name,
            cls.__name__,
            filter=seek.to_mongo(),
            sort=plan.traversal_sort,
            limit=limit,
            has_cursor=values is not None,
        ) as ctx:
            cursor = await cls.get_collection().aggregate(stages, **aggregate_kwargs)
            results = [raw async for raw in cursor]
            if options.return_total_count:
                docs, total = split_facet_result(results)
            else:
                docs, total = results, None
            ctx["result_count"] = len(docs)

        return assemble_page(docs, request, plan, limit, total)

    # --- Instance-level writes ---

    async def insert(self) -> None:
        """Insert this document into the database."""
        async with track_query("insert", self._collection_name, self.__class__.__name__):
            result = await self.get_collection().insert_one(self._to_mongo())
        self.id = result.inserted_id

    async def delete(self) -> None:
        """Delete this document from the database."""
        async with track_query("delete", self._collection_name, self.__class__.__name__, filter={ID_FIELD: self.id}):
            await self.get_collection().delete_one({ID_FIELD: self.id})

    async def populate(self, *fields: str) -> Self:
        """Resolve Ref fields on this document in place."""
        from goosepage.core.reference import populate_documents

        await populate_documents([self], list(fields))
        return self

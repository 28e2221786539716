from __future__ import annotations

import datetime
import uuid
from contextlib import asynccontextmanager
from typing import Any, Generic, Optional, TypeVar

from bson import Decimal128, ObjectId
from pydantic import BaseModel, field_serializer
from starlette.responses import JSONResponse

from goosepage.core.connection import connect, disconnect
from goosepage.paging.options import PaginationRequest
from goosepage.utils.exceptions import DocumentNotFound, GoosepageError, PaginationError
from goosepage.utils.pagination import KeysetPage

T = TypeVar("T")


def init_app(app: Any, uri: str, alias: str = "default") -> Any:
    """Initialize a FastAPI app with goosepage.

    Connects on startup, disconnects on shutdown (wrapping any lifespan the
    app already has) and registers the exception handlers.

    Args:
        app: FastAPI application instance
        uri: MongoDB connection URI
        alias: Connection alias for multi-connection support (default: "default")
    """
    original_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(a: Any):
        await connect(uri, alias=alias)
        try:
            async with original_lifespan(a) as state:
                yield state
        finally:
            await disconnect(alias)

    app.router.lifespan_context = lifespan
    register_exception_handlers(app)
    return app


def register_exception_handlers(app: Any) -> None:
    """Map goosepage exceptions to HTTP responses.

    Bad cursors and conflicting paging options are client errors (400).
    """

    @app.exception_handler(PaginationError)
    async def pagination_error_handler(request: Any, exc: PaginationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DocumentNotFound)
    async def document_not_found_handler(request: Any, exc: DocumentNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(GoosepageError)
    async def goosepage_error_handler(request: Any, exc: GoosepageError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})


class CursorParams:
    """FastAPI dependency reading keyset paging query parameters.

    `sort` is a comma-separated field list, "-" marks descending:
    ?sort=-created_at,name&limit=20&after=<cursor>

    `limit` is taken as a string so a malformed value falls back to the
    default limit instead of failing validation.
    """

    def __init__(
        self,
        limit: str | None = None,
        after: str | None = None,
        before: str | None = None,
        sort: str | None = None,
    ):
        self.limit = limit
        self.after = after or None
        self.before = before or None
        self.sort = [part.strip() for part in sort.split(",") if part.strip()] if sort else []

    def to_request(self) -> PaginationRequest:
        """Build a PaginationRequest. Raises InvalidPagination for after+before."""
        return PaginationRequest(limit=self.limit, sort=self.sort, after=self.after, before=self.before)


def _jsonable(value: Any) -> Any:
    """Convert BSON values found in raw documents into JSON-friendly ones."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (ObjectId, uuid.UUID, Decimal128)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return value


class KeysetPageResponse(BaseModel, Generic[T]):
    """Keyset page response model for API endpoints."""

    model_config = {"arbitrary_types_allowed": True}

    items: list[T]
    has_next: bool
    has_previous: bool
    next_cursor: Optional[str] = None
    previous_cursor: Optional[str] = None
    total_count: Optional[int] = None

    @field_serializer("items", when_used="json")
    def serialize_items(self, items: list[Any]) -> list[Any]:
        return [_jsonable(item) for item in items]

    @classmethod
    def from_page(cls, page_obj: KeysetPage) -> KeysetPageResponse:
        return cls(
            items=page_obj.items,
            has_next=page_obj.has_next,
            has_previous=page_obj.has_previous,
            next_cursor=page_obj.next_cursor,
            previous_cursor=page_obj.previous_cursor,
            total_count=page_obj.total_count,
        )

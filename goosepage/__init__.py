from goosepage.core import (
    Document,
    QuerySet,
    Ref,
    connect,
    disconnect,
    get_database,
    get_client,
)
from goosepage.fields import PyObjectId
from goosepage.lifecycle import (
    enable_tracing,
    disable_tracing,
    QueryEvent,
    add_listener,
)
from goosepage.paging import (
    PaginationRequest,
    PagingOptions,
    SeekFilter,
    decode_cursor,
    encode_cursor,
    plan_sort,
    build_seek_filter,
    assemble_page,
)
from goosepage.utils import (
    GoosepageError,
    DocumentNotFound,
    NotConnected,
    PaginationError,
    MalformedCursor,
    CursorMismatch,
    InvalidSort,
    InvalidPagination,
    KeysetPage,
)

__all__ = [
    # Core
    "Document",
    "QuerySet",
    "Ref",
    "connect",
    "disconnect",
    "get_database",
    "get_client",
    # Fields
    "PyObjectId",
    # Lifecycle
    "enable_tracing",
    "disable_tracing",
    "QueryEvent",
    "add_listener",
    # Paging
    "PaginationRequest",
    "PagingOptions",
    "SeekFilter",
    "decode_cursor",
    "encode_cursor",
    "plan_sort",
    "build_seek_filter",
    "assemble_page",
    # Utils
    "GoosepageError",
    "DocumentNotFound",
    "NotConnected",
    "PaginationError",
    "MalformedCursor",
    "CursorMismatch",
    "InvalidSort",
    "InvalidPagination",
    "KeysetPage",
]

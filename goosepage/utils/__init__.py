from goosepage.utils.exceptions import (
    GoosepageError,
    DocumentNotFound,
    NotConnected,
    PaginationError,
    MalformedCursor,
    CursorMismatch,
    InvalidSort,
    InvalidPagination,
)
from goosepage.utils.pagination import KeysetPage
from goosepage.utils.types import (
    DocumentData,
    FilterSpec,
    SortSpec,
    Pipeline,
    DocumentId,
    ID_FIELD,
    MAX_POPULATE_DEPTH,
    merge_filters,
    get_path,
)

__all__ = [
    "GoosepageError",
    "DocumentNotFound",
    "NotConnected",
    "PaginationError",
    "MalformedCursor",
    "CursorMismatch",
    "InvalidSort",
    "InvalidPagination",
    "KeysetPage",
    "DocumentData",
    "FilterSpec",
    "SortSpec",
    "Pipeline",
    "DocumentId",
    "ID_FIELD",
    "MAX_POPULATE_DEPTH",
    "merge_filters",
    "get_path",
]

from goosepage.paging.assembler import assemble_page, cursor_values
from goosepage.paging.cursor import decode_cursor, encode_cursor
from goosepage.paging.options import PaginationRequest, PagingOptions, resolve_limit
from goosepage.paging.pipeline import build_paged_pipeline, split_facet_result
from goosepage.paging.planner import SortPlan, normalize_sort, plan_sort
from goosepage.paging.seek import (
    Comparison,
    SeekClause,
    SeekFilter,
    build_seek_filter,
    combine_filters,
)

__all__ = [
    "assemble_page",
    "cursor_values",
    "decode_cursor",
    "encode_cursor",
    "PaginationRequest",
    "PagingOptions",
    "resolve_limit",
    "build_paged_pipeline",
    "split_facet_result",
    "SortPlan",
    "normalize_sort",
    "plan_sort",
    "Comparison",
    "SeekClause",
    "SeekFilter",
    "build_seek_filter",
    "combine_filters",
]

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from goosepage.paging.planner import SortPlan
from goosepage.paging.seek import SeekFilter
from goosepage.utils.types import Pipeline

ITEMS_FACET = "items"
TOTAL_COUNT_FACET = "total_count"


def build_paged_pipeline(
    pipeline: Sequence[dict[str, Any]],
    plan: SortPlan,
    seek: SeekFilter,
    limit: int,
    with_total_count: bool = False,
) -> Pipeline:
    """Append keyset paging stages to a caller's aggregation pipeline.

    The paging stages ($match on the seek filter, $sort in traversal order,
    $limit of limit + 1) run on the pipeline's output, so sort keys refer to
    fields of the documents the pipeline produces. With a total count the
    paging stages run in a $facet next to a $count over the full output.
    """
    paging: Pipeline = []
    if seek:
        paging.append({"$match": seek.to_mongo()})
    paging.append({"$sort": dict(plan.traversal)})
    if limit:
        paging.append({"$limit": limit + 1})

    stages: Pipeline = list(pipeline)
    if not with_total_count:
        return stages + paging

    stages.append(
        {
            "$facet": {
                ITEMS_FACET: paging,
                TOTAL_COUNT_FACET: [{"$count": "count"}],
            }
        }
    )
    return stages


def split_facet_result(result: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], int]:
    """Unpack the single document a faceted paged pipeline returns."""
    if not result:
        return [], 0
    facet = result[0]
    counts = facet.get(TOTAL_COUNT_FACET) or []
    total = counts[0]["count"] if counts else 0
    return list(facet.get(ITEMS_FACET, [])), total

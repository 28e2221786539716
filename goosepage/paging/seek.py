"""Seek (keyset) filters.

For sort keys k1..kn and cursor values v1..vn the seek filter is

    (k1 > v1)
    OR (k1 == v1 AND k2 > v2)
    ...
    OR (k1 == v1 AND ... AND k(n-1) == v(n-1) AND kn > vn)

with ">" replaced by "<" for keys traversed descending. MongoDB only compares
values of the same type, and null sorts before everything else, so a null
cursor value turns ">" into "!= null" and a descending key gets an extra
clause matching nulls (the identifier is never null and gets neither).

The filter is kept as plain data (a disjunction of conjunctions) and only
rendered to a MongoDB query by to_mongo().
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pymongo import ASCENDING

from goosepage.paging.planner import SortPlan
from goosepage.utils.exceptions import CursorMismatch
from goosepage.utils.types import FilterSpec

EQ = "$eq"
GT = "$gt"
NE = "$ne"
LT = "$lt"


@dataclass(frozen=True)
class Comparison:
    field: str
    op: str
    value: Any

    def to_mongo(self) -> FilterSpec:
        return {self.field: {self.op: self.value}}


@dataclass(frozen=True)
class SeekClause:
    """Conjunction of comparisons."""

    terms: tuple[Comparison, ...]

    def to_mongo(self) -> FilterSpec:
        if len(self.terms) == 1:
            return self.terms[0].to_mongo()
        return {"$and": [term.to_mongo() for term in self.terms]}


@dataclass(frozen=True)
class SeekFilter:
    """Disjunction of SeekClauses. An empty filter matches everything."""

    clauses: tuple[SeekClause, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def to_mongo(self) -> FilterSpec:
        if not self.clauses:
            return {}
        if len(self.clauses) == 1:
            return self.clauses[0].to_mongo()
        return {"$or": [clause.to_mongo() for clause in self.clauses]}


def build_seek_filter(plan: SortPlan, values: Sequence[Any] | None) -> SeekFilter:
    """Build the filter selecting documents strictly after a cursor position.

    "After" is relative to plan.traversal, so the same cursor pages forward
    or backward depending on the plan.

    Raises:
        CursorMismatch: If the cursor has a different number of values than
            the plan has sort keys
    """
    if values is None:
        return SeekFilter()

    traversal = plan.traversal
    if len(values) != len(traversal):
        raise CursorMismatch(
            f"Cursor holds {len(values)} value(s) but the sort has "
            f"{len(traversal)} key(s) {[field for field, _ in traversal]}; "
            f"cursors can only be reused with the sort they were issued for"
        )

    clauses: list[SeekClause] = []
    last = len(traversal) - 1
    for i, (field, direction) in enumerate(traversal):
        prefix = tuple(Comparison(f, EQ, v) for (f, _), v in zip(traversal[:i], values[:i]))
        value = values[i]
        if direction == ASCENDING:
            op = NE if value is None and i < last else GT
            clauses.append(SeekClause(prefix + (Comparison(field, op, value),)))
        else:
            clauses.append(SeekClause(prefix + (Comparison(field, LT, value),)))
            if value is not None and i < last:
                clauses.append(SeekClause(prefix + (Comparison(field, EQ, None),)))
    return SeekFilter(tuple(clauses))


def combine_filters(base: FilterSpec | None, seek: SeekFilter | FilterSpec) -> FilterSpec:
    """AND a caller's base filter with a seek filter, skipping empty sides."""
    seek_spec = seek.to_mongo() if isinstance(seek, SeekFilter) else seek
    if not seek_spec:
        return dict(base or {})
    if not base:
        return seek_spec
    return {"$and": [seek_spec, base]}

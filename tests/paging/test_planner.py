from collections import OrderedDict

import pytest
from pymongo import ASCENDING, DESCENDING

from goosepage.paging.planner import normalize_sort, plan_sort
from goosepage.utils.exceptions import InvalidSort


class TestNormalizeSort:
    def test_mapping_keeps_insertion_order(self):
        spec = normalize_sort(OrderedDict([("b", -1), ("a", 1)]))
        assert spec == [("b", DESCENDING), ("a", ASCENDING)]

    def test_prefixed_strings(self):
        assert normalize_sort(["-created_at", "name"]) == [("created_at", -1), ("name", 1)]

    def test_single_string(self):
        assert normalize_sort("-age") == [("age", -1)]

    def test_pairs_with_named_directions(self):
        spec = normalize_sort([("age", "desc"), ("name", "Ascending")])
        assert spec == [("age", -1), ("name", 1)]

    def test_none_is_empty(self):
        assert normalize_sort(None) == []

    @pytest.mark.parametrize("sort", [{"age": 2}, {"age": "up"}, {"age": True}, [("age",)], [42]])
    def test_invalid_entries_raise(self, sort):
        with pytest.raises(InvalidSort):
            normalize_sort(sort)

    def test_duplicate_field_raises(self):
        with pytest.raises(InvalidSort, match="more than once"):
            normalize_sort(["age", "-age"])

    def test_empty_field_name_raises(self):
        with pytest.raises(InvalidSort):
            normalize_sort(["-"])


class TestPlanSort:
    def test_identifier_appended_ascending(self):
        plan = plan_sort({"age": 1, "name": -1})
        assert plan.keys == ["age", "name", "_id"]
        assert plan.display_sort == [("age", 1), ("name", -1), ("_id", 1)]
        assert plan.traversal_sort == plan.display_sort
        assert plan.backward is False

    def test_backward_inverts_every_direction(self):
        plan = plan_sort({"age": 1, "name": -1}, backward=True)
        assert plan.display_sort == [("age", 1), ("name", -1), ("_id", 1)]
        assert plan.traversal_sort == [("age", -1), ("name", 1), ("_id", -1)]
        assert plan.backward is True

    def test_empty_sort_is_identifier_only(self):
        plan = plan_sort({})
        assert plan.keys == ["_id"]
        assert plan.display_sort == [("_id", 1)]

    def test_explicit_identifier_moves_last_and_keeps_direction(self):
        plan = plan_sort([("_id", -1), ("age", 1)])
        assert plan.display_sort == [("age", 1), ("_id", -1)]
        assert plan_sort([("_id", -1)], backward=True).traversal_sort == [("_id", 1)]

    def test_custom_identifier_field(self):
        plan = plan_sort(["-score"], id_field="uid")
        assert plan.keys == ["score", "uid"]

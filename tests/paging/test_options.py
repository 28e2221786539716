import pytest

from goosepage.paging.options import PaginationRequest, PagingOptions, resolve_limit
from goosepage.utils.exceptions import InvalidPagination


class TestPagingOptions:
    def test_defaults(self):
        options = PagingOptions()
        assert options.default_limit == 10
        assert options.allow_unlimited is True
        assert options.return_total_count is True

    @pytest.mark.parametrize("default_limit", [0, -5, "10", 2.5, True])
    def test_invalid_default_limit_raises(self, default_limit):
        with pytest.raises(InvalidPagination):
            PagingOptions(default_limit=default_limit)


class TestPaginationRequest:
    def test_both_cursors_raise(self):
        with pytest.raises(InvalidPagination, match="Only one"):
            PaginationRequest(after="abc", before="def")

    def test_direction_and_cursor(self):
        assert PaginationRequest().backward is False
        assert PaginationRequest().cursor is None
        assert PaginationRequest(after="abc").cursor == "abc"
        assert PaginationRequest(before="def").backward is True
        assert PaginationRequest(before="def").cursor == "def"


class TestResolveLimit:
    @pytest.mark.parametrize(
        "limit,expected",
        [(None, 10), (-1, 10), ("abc", 10), (True, 10), (float("nan"), 10), (5, 5), ("7", 7), (0, 0)],
    )
    def test_resolution(self, limit, expected):
        assert resolve_limit(limit, PagingOptions()) == expected

    def test_zero_falls_back_when_unlimited_disallowed(self):
        assert resolve_limit(0, PagingOptions(default_limit=3, allow_unlimited=False)) == 3

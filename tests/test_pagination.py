"""Tests for pagination helpers."""

from utils.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PaginatedResponse,
    create_paginated_response,
    empty_paginated_response,
    get_next_offset,
    has_more_items,
    normalize_pagination_params,
)


class TestPaginatedResponse:
    """Tests for the page value."""

    def test_count_matches_items(self):
        page = create_paginated_response([1, 2, 3], total=10, has_more=True, next_cursor="3")

        assert page.count == 3
        assert page.to_dict() == {"items": [1, 2, 3], "count": 3, "has_more": True, "total": 10, "next_cursor": "3"}

    def test_cursor_dropped_without_more(self):
        """Should keep next_cursor only while has_more is true."""
        page = PaginatedResponse(items=[1], has_more=False, next_cursor="1")

        assert page.next_cursor is None
        assert "next_cursor" not in page.to_dict()

    def test_empty(self):
        page = empty_paginated_response()
        assert page.count == 0
        assert page.has_more is False
        assert page.to_dict() == {"items": [], "count": 0, "has_more": False}


class TestOffsets:
    """Tests for offset arithmetic."""

    def test_has_more_items(self):
        assert has_more_items(offset=10, limit=10, total=25) is True
        assert has_more_items(offset=20, limit=10, total=25) is False

    def test_get_next_offset(self):
        assert get_next_offset(current_offset=0, limit=20, total=45) == 20
        assert get_next_offset(current_offset=40, limit=20, total=45) is None

    def test_normalize_defaults_and_caps(self):
        assert normalize_pagination_params()["limit"] == DEFAULT_PAGE_SIZE
        assert normalize_pagination_params(limit=500)["limit"] == MAX_PAGE_SIZE
        assert normalize_pagination_params(limit=5, offset=10, cursor="x") == {
            "limit": 5,
            "offset": 10,
            "cursor": "x",
        }

"""Tests for response envelopes and Markdown rendering."""

from utils.errors import WeaviateApiError
from utils.formatters import (
    create_error_response,
    create_success_response,
    format_error,
    format_generic_table,
    format_response,
    to_message,
    truncate_text,
)
from utils.pagination import create_paginated_response


class FakeTool:
    """Records which message constructor was used."""

    def create_text_message(self, text):
        return ("text", text)

    def create_json_message(self, data):
        return ("json", data)


class TestEnvelopes:
    """Tests for success and error envelopes."""

    def test_success(self):
        assert create_success_response({"a": 1}, "done") == {"success": True, "data": {"a": 1}, "message": "done"}

    def test_error_without_details(self):
        assert create_error_response("bad") == {"success": False, "error": "bad", "error_code": "WEAVIATE_ERROR"}

    def test_format_error_retryable(self):
        resp = format_error(WeaviateApiError.rate_limit("Rate limit exceeded", 30))

        assert resp["success"] is False
        assert resp["error"] == "Error: Rate limit exceeded (retryable)"
        assert resp["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert resp["details"]["retry_after_seconds"] == 30

    def test_format_error_not_found(self):
        resp = format_error(WeaviateApiError.not_found("Resource", "/schema/X"))

        assert resp["error"] == "Error: Resource with ID '/schema/X' not found"
        assert resp["error_code"] == "NOT_FOUND"

    def test_format_error_plain_exception(self):
        resp = format_error(RuntimeError("boom"))

        assert resp["error"] == "Operation failed: boom"
        assert resp["error_code"] == "WEAVIATE_ERROR"
        assert resp["details"] == {"name": "RuntimeError", "message": "boom"}

    def test_to_message(self):
        tool = FakeTool()
        assert to_message(tool, "# Hi") == ("text", "# Hi")
        assert to_message(tool, {"success": True}) == ("json", {"success": True})


class TestFormatResponse:
    """Tests for JSON and Markdown output."""

    def test_json_expands_pages(self):
        page = create_paginated_response([{"id": "1"}], has_more=True, next_cursor="1")
        resp = format_response(page, "json", "objects", message="Listed")

        assert resp == {
            "success": True,
            "data": {"items": [{"id": "1"}], "count": 1, "has_more": True, "next_cursor": "1"},
            "message": "Listed",
        }

    def test_json_is_not_truncated(self):
        data = {"text": "x" * 200}
        assert format_response(data, "json", character_limit=10)["data"] == data

    def test_markdown_objects_page(self):
        page = create_paginated_response(
            [{"id": "abc", "class": "Article", "properties": {"title": "t", "body": "b"}}],
            total=5,
            has_more=True,
            next_cursor="1",
        )
        text = format_response(page, "markdown", "objects")

        assert text.startswith("## Objects")
        assert "**Total:** 5 | **Showing:** 1" in text
        assert "**More available:** Yes (cursor: `1`)" in text
        assert "| abc | Article | title, body... |" in text

    def test_markdown_empty_page(self):
        text = format_response(create_paginated_response([]), "markdown", "objects")
        assert "_No items found._" in text

    def test_markdown_classes(self):
        text = format_response(
            [{"class": "Article", "properties": [{"name": "title"}]}, {"class": "Author", "vectorizer": "text2vec-openai"}],
            "markdown",
            "classes",
        )

        assert "| Class | Description | Vectorizer | Properties |" in text
        assert "| Article | - | none | 1 |" in text
        assert "| Author | - | text2vec-openai | 0 |" in text

    def test_markdown_tenants(self):
        text = format_response([{"name": "t1", "activityStatus": "HOT"}, {"name": "t2"}], "markdown", "tenants")

        assert "| t1 | HOT |" in text
        assert "| t2 | ACTIVE |" in text

    def test_markdown_nodes(self):
        nodes = [{"name": "node1", "status": "HEALTHY", "version": "1.25.0", "stats": {"objectCount": 7, "shardCount": 2}}]
        text = format_response(nodes, "markdown", "nodes")
        assert "| node1 | HEALTHY | 1.25.0 | 7 | 2 |" in text

    def test_markdown_single_object(self):
        text = format_response({"className": "Article", "vectorIndexConfig": {"distance": "cosine"}}, "markdown", "classes")

        assert text.startswith("## Classe")
        assert "**Class Name:** Article" in text
        assert "**Vector Index Config:**" in text
        assert '"distance": "cosine"' in text

    def test_markdown_is_truncated(self):
        text = format_response(["x" * 100], "markdown", "values", character_limit=20)

        assert len(text) > 20
        assert text.endswith("more characters)")
        assert "... (truncated," in text


class TestTables:

    def test_generic_table_uses_first_five_keys(self):
        items = [{"a": 1, "b": "x|y", "c": None, "d": [1], "e": 2, "f": 3}]
        text = format_generic_table(items)

        assert text.splitlines()[0] == "| a | b | c | d | e |"
        assert "| 1 | x\\|y | - | [1] | 2 |" in text

    def test_generic_scalars(self):
        assert format_generic_table(["a", "b"]) == "| Value |\n|---|\n| a |\n| b |"

    def test_generic_empty(self):
        assert format_generic_table([]) == "_No items_"

    def test_truncate_text(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("abcdefghij", 4) == "abcd\n\n... (truncated, 6 more characters)"

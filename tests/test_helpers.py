"""Tests for tool argument parsing helpers."""

import httpx
import pytest

import utils.helpers as helpers
from utils.client import WeaviateClient
from utils.errors import ErrorKind, WeaviateApiError
from utils.filters import FilterOperator
from utils.helpers import (
    build_batch_objects,
    build_beacon,
    csv_or_list_to_list,
    extract_get_results,
    get_operation,
    get_response_format,
    parse_bool,
    parse_filter,
    parse_json_param,
    parse_limit,
    parse_move,
    parse_optional_float,
    parse_query_options,
    parse_vector,
    require_class_name,
    run_with_client,
    safe_json_parse,
    summarize_batch_results,
)

OBJECT_ID = "12345678-1234-1234-1234-123456789abc"


class TestBasicParsing:
    """Tests for scalar and JSON parameters."""

    def test_safe_json_parse(self):
        assert safe_json_parse('{"a": 1}') == {"a": 1}
        assert safe_json_parse([1]) == [1]
        assert safe_json_parse("{broken", default="d") == "d"
        assert safe_json_parse("  ") is None

    def test_csv_or_list(self):
        assert csv_or_list_to_list("a, b,,c ") == ["a", "b", "c"]
        assert csv_or_list_to_list([" x ", ""]) == ["x"]
        assert csv_or_list_to_list("") is None
        assert csv_or_list_to_list(None) is None

    def test_require_class_name(self):
        assert require_class_name({"collection_name": " Article "}) == "Article"
        with pytest.raises(WeaviateApiError) as exc_info:
            require_class_name({})
        assert exc_info.value.kind is ErrorKind.VALIDATION
        with pytest.raises(WeaviateApiError, match="Invalid class name"):
            require_class_name({"collection_name": "9lives"})

    def test_parse_json_param(self):
        assert parse_json_param({"x": '{"a": 1}'}, "x") == {"a": 1}
        assert parse_json_param({"x": "[1, 2]"}, "x", list) == [1, 2]
        assert parse_json_param({}, "x", required=False) is None
        with pytest.raises(WeaviateApiError, match="must be a JSON object"):
            parse_json_param({"x": "[1]"}, "x")
        with pytest.raises(WeaviateApiError, match="required"):
            parse_json_param({"x": ""}, "x")

    def test_optional_float_and_bool(self):
        assert parse_optional_float({"c": "0.8"}, "c") == 0.8
        assert parse_optional_float({}, "c") is None
        with pytest.raises(WeaviateApiError):
            parse_optional_float({"c": "high"}, "c")
        assert parse_bool({"d": "true"}, "d") is True
        assert parse_bool({"d": False}, "d") is False
        assert parse_bool({}, "d", default=True) is True

    def test_limit(self):
        assert parse_limit({}) == 10
        assert parse_limit({"limit": "25"}) == 25
        with pytest.raises(WeaviateApiError, match="between 1 and 100"):
            parse_limit({"limit": 101})

    def test_operation_and_format(self):
        assert get_operation({"operation": " Get_Object "}, {"get_object"}) == "get_object"
        with pytest.raises(WeaviateApiError, match="Unknown operation"):
            get_operation({"operation": "drop"}, {"get_object"})
        assert get_response_format({}) == "json"
        assert get_response_format({"response_format": "Markdown"}) == "markdown"
        with pytest.raises(WeaviateApiError):
            get_response_format({"response_format": "xml"})


class TestVectorsAndFilters:
    """Tests for vector and filter parameters."""

    def test_parse_vector_json_and_csv(self):
        assert parse_vector("[0.1, 2]") == [0.1, 2.0]
        assert parse_vector("0.1, 0.2 ,0.3") == [0.1, 0.2, 0.3]
        assert parse_vector([1, 2]) == [1.0, 2.0]

    @pytest.mark.parametrize("value", ["", "[]", "a,b", "[\"x\"]", "[true]", "nan, 1", None])
    def test_parse_vector_rejects(self, value):
        assert parse_vector(value) is None

    def test_parse_filter_full(self):
        where = parse_filter('{"operator": "Like", "path": ["title"], "valueText": "cat*"}')
        assert where.operator is FilterOperator.LIKE

    def test_parse_filter_simple_conditions(self):
        where = parse_filter({"category": "news", "year": 2024})
        assert where.operator is FilterOperator.AND
        assert len(where.operands) == 2

    def test_parse_filter_empty(self):
        assert parse_filter(None) is None
        assert parse_filter("  ") is None

    def test_parse_filter_errors(self):
        with pytest.raises(WeaviateApiError, match="valid JSON object"):
            parse_filter("[1, 2]")
        with pytest.raises(WeaviateApiError, match="Invalid where_filter") as exc_info:
            parse_filter('{"operator": "And", "operands": []}')
        assert exc_info.value.details["where_filter"]

    @pytest.mark.parametrize("raw", [
        '{"operator": "GreaterThan", "path": ["score"], "valueNumber": NaN}',
        '{"score": Infinity}',
    ])
    def test_parse_filter_non_finite_is_validation_error(self, raw):
        with pytest.raises(WeaviateApiError) as exc_info:
            parse_filter(raw)
        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_query_options(self):
        options = parse_query_options({
            "limit": 3,
            "return_properties": "title, body",
            "where_filter": '{"published": true}',
            "tenant": " t1 ",
        })

        assert options.limit == 3
        assert options.fields == ("title", "body")
        assert options.where.value_field == "valueBoolean"
        assert options.tenant == "t1"

    def test_query_options_defaults(self):
        options = parse_query_options({})
        assert options.limit == 10
        assert options.fields is None
        assert options.where is None
        assert options.tenant is None


class TestMoves:
    """Tests for nearText move parameters."""

    def test_concepts_move(self):
        move = parse_move({"move_to": '{"force": 0.5, "concepts": ["kitten"]}'}, "move_to")
        assert move.force == 0.5
        assert move.concepts == ("kitten",)
        assert move.objects is None

    def test_object_move_accepts_id_objects(self):
        move = parse_move({"move_away_from": {"force": 1, "objects": [{"id": OBJECT_ID}]}}, "move_away_from")
        assert move.objects == (OBJECT_ID,)

    def test_absent(self):
        assert parse_move({}, "move_to") is None

    @pytest.mark.parametrize("value", [
        '{"concepts": ["a"]}',
        '{"force": 0.5}',
        '{"force": 0.5, "objects": ["nope"]}',
        '{"force": true, "concepts": ["a"]}',
    ])
    def test_invalid(self, value):
        with pytest.raises(WeaviateApiError):
            parse_move({"move_to": value}, "move_to")


class TestBatchHelpers:
    """Tests for batch normalization and summaries."""

    def test_build_batch_objects(self):
        objects = build_batch_objects(
            "Article",
            [{"title": "a"}, {"id": OBJECT_ID, "properties": {"title": "b"}, "vector": [0.1], "class": "Other"}],
            tenant="t1",
        )

        assert objects[0] == {"properties": {"title": "a"}, "class": "Article", "tenant": "t1"}
        assert objects[1] == {
            "id": OBJECT_ID,
            "properties": {"title": "b"},
            "vector": [0.1],
            "class": "Article",
            "tenant": "t1",
        }

    def test_build_batch_objects_rejects_scalars(self):
        with pytest.raises(WeaviateApiError, match="Item 1"):
            build_batch_objects("Article", [{"a": 1}, "oops"])

    def test_summarize(self):
        results = [
            {"id": "1", "result": {}},
            {"id": "2", "result": {"errors": {"error": [{"message": "bad vector"}]}}},
        ]
        assert summarize_batch_results(results) == {
            "inserted_count": 1,
            "failed_count": 1,
            "errors": [{"id": "2", "errors": ["bad vector"]}],
        }

    def test_beacon(self):
        assert build_beacon(OBJECT_ID, "Author") == f"weaviate://localhost/Author/{OBJECT_ID}"
        assert build_beacon(OBJECT_ID) == f"weaviate://localhost/{OBJECT_ID}"


class TestResults:

    def test_extract_get_results(self):
        response = {"data": {"Get": {"Article": [{"title": "a"}]}}, "errors": [{"message": "partial"}]}
        assert extract_get_results(response, "Article") == {
            "results": [{"title": "a"}],
            "count": 1,
            "errors": [{"message": "partial"}],
        }

    def test_extract_get_results_empty(self):
        assert extract_get_results(None, "Article") == {"results": [], "count": 0}


class TestRunWithClient:
    """Tests for running a client operation from synchronous code."""

    def test_runs_and_closes(self, monkeypatch):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"version": "1.25.0"})

        clients = []

        def factory(credentials):
            client = WeaviateClient(credentials, transport=httpx.MockTransport(handler))
            clients.append(client)
            return client

        monkeypatch.setattr(helpers, "WeaviateClient", factory)

        async def operation(client):
            return await client.get_meta()

        result = run_with_client({"url": "http://localhost:8080"}, operation)

        assert result == {"version": "1.25.0"}
        assert seen == ["http://localhost:8080/v1/meta"]
        assert clients[0]._http_client is None

    def test_propagates_errors(self, monkeypatch):
        def factory(credentials):
            return WeaviateClient(credentials, transport=httpx.MockTransport(lambda r: httpx.Response(404)))

        monkeypatch.setattr(helpers, "WeaviateClient", factory)

        async def operation(client):
            return await client.get_class("Missing")

        with pytest.raises(WeaviateApiError) as exc_info:
            run_with_client({"url": "http://localhost:8080"}, operation)
        assert exc_info.value.kind is ErrorKind.NOT_FOUND

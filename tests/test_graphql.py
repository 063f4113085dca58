"""Tests for GraphQL document synthesis."""

import math

import pytest

from utils.entities import (
    Bm25Params,
    FusionType,
    HybridParams,
    MoveParams,
    NearObjectParams,
    NearTextParams,
    NearVectorParams,
    QueryOptions,
)
from utils.filters import FilterOperator, WhereFilter
from utils.graphql import (
    DEFAULT_FIELDS,
    bm25_clause,
    build_get_query,
    graphql_literal,
    graphql_number,
    graphql_string,
    hybrid_clause,
    near_object_clause,
    near_text_clause,
    near_vector_clause,
    serialize_filter,
)


class TestLiterals:
    """Tests for value serializers."""

    def test_string_escaping(self):
        """Should escape quotes, backslashes and newlines."""
        assert graphql_string('say "hi"\\\n') == '"say \\"hi\\"\\\\\\n"'

    def test_injection_attempt_stays_inside_literal(self):
        text = '"} ) { __schema { types { name } } } #'
        assert graphql_string(text).startswith('"\\"}')

    def test_numbers(self):
        assert graphql_number(5) == "5"
        assert graphql_number(0.3) == "0.3"

    def test_number_rejects_bool_and_nan(self):
        with pytest.raises(TypeError):
            graphql_number(True)
        with pytest.raises(ValueError):
            graphql_number(math.nan)

    def test_nested_literal(self):
        value = {"geoCoordinates": {"latitude": 52.1, "longitude": 4.3}, "distance": {"max": 1000}}
        assert graphql_literal(value) == (
            "{ geoCoordinates: { latitude: 52.1, longitude: 4.3 }, distance: { max: 1000 } }"
        )
        assert graphql_literal([True, None, "a"]) == '[true, null, "a"]'


class TestFilterSerialization:
    """Tests for where-filter emission."""

    def test_leaf(self):
        where = WhereFilter.leaf(FilterOperator.EQUAL, "title", "valueText", "Hello")
        assert serialize_filter(where) == '{ operator: Equal, path: ["title"], valueText: "Hello" }'

    def test_combinator_recurses_into_operands(self):
        """Should emit every operand and no value field on the combinator."""
        where = WhereFilter.combine(
            FilterOperator.OR,
            WhereFilter.leaf(FilterOperator.GREATER_THAN, "wordCount", "valueInt", 100),
            WhereFilter.leaf(FilterOperator.LIKE, ["author", "Author", "name"], "valueText", "Ann*"),
        )
        out = serialize_filter(where)

        assert out.startswith("{ operator: Or, operands: [")
        assert '{ operator: GreaterThan, path: ["wordCount"], valueInt: 100 }' in out
        assert '{ operator: Like, path: ["author", "Author", "name"], valueText: "Ann*" }' in out
        assert out.count("valueText") == 1

    def test_array_value(self):
        where = WhereFilter.leaf(FilterOperator.CONTAINS_ANY, "tags", "valueTextArray", ["a", "b"])
        assert 'valueTextArray: ["a", "b"]' in serialize_filter(where)


class TestClauses:
    """Tests for search clause builders."""

    def test_near_text_minimal(self):
        """Should omit certainty and distance when unset."""
        clause = near_text_clause(NearTextParams(concepts=["cat"]))
        assert clause == 'nearText: { concepts: ["cat"] }'

    def test_near_text_with_moves(self):
        params = NearTextParams(
            concepts=["cat"],
            certainty=0.7,
            move_to=MoveParams(force=0.5, concepts=["kitten"]),
            move_away_from=MoveParams(force=0.2, objects=["12345678-1234-1234-1234-123456789abc"]),
        )
        clause = near_text_clause(params)

        assert "certainty: 0.7" in clause
        assert 'moveTo: { force: 0.5, concepts: ["kitten"] }' in clause
        assert 'moveAwayFrom: { force: 0.2, objects: [{ id: "12345678-1234-1234-1234-123456789abc" }] }' in clause

    def test_near_vector(self):
        clause = near_vector_clause(NearVectorParams(vector=[0.1, 0.2], distance=0.4))
        assert clause == "nearVector: { vector: [0.1, 0.2], distance: 0.4 }"

    def test_near_object(self):
        clause = near_object_clause(NearObjectParams(id="abc"))
        assert clause == 'nearObject: { id: "abc" }'

    def test_hybrid_without_vector(self):
        """Should embed alpha and leave out the vector key."""
        clause = hybrid_clause(HybridParams(query="q", alpha=0.3))
        assert "alpha: 0.3" in clause
        assert "vector:" not in clause

    def test_hybrid_full(self):
        clause = hybrid_clause(
            HybridParams(
                query="fast cars",
                alpha=0.75,
                vector=[1.0],
                properties=["title"],
                fusion_type=FusionType.RELATIVE_SCORE,
            )
        )
        assert clause == (
            'hybrid: { query: "fast cars", alpha: 0.75, vector: [1.0], '
            'properties: ["title"], fusionType: relativeScoreFusion }'
        )

    def test_bm25_escapes_query(self):
        clause = bm25_clause(Bm25Params(query='a"b', properties=["body"]))
        assert clause == 'bm25: { query: "a\\"b", properties: ["body"] }'


class TestGetQuery:
    """Tests for the full Get document."""

    def test_defaults(self):
        """Should apply limit 10 and the default selection set."""
        doc = build_get_query("Article", 'bm25: { query: "x" }')

        assert "Get {" in doc
        assert "Article(" in doc
        assert "limit: 10" in doc
        assert DEFAULT_FIELDS in doc
        assert "where:" not in doc
        assert "tenant:" not in doc

    def test_near_text_document(self):
        doc = build_get_query("Article", near_text_clause(NearTextParams(concepts=["cat"])), QueryOptions(limit=5))

        assert 'nearText: { concepts: ["cat"] }' in doc
        assert "limit: 5" in doc
        arguments = doc.split("Article(")[1].split(")")[0]
        assert "certainty" not in arguments
        assert "distance" not in arguments

    def test_with_filter_tenant_and_fields(self):
        options = QueryOptions(
            limit=3,
            fields=["title", "_additional { id score }"],
            where=WhereFilter.leaf(FilterOperator.EQUAL, "published", "valueBoolean", True),
            tenant="tenant-a",
        )
        doc = build_get_query("Article", 'bm25: { query: "x" }', options)

        assert 'where: { operator: Equal, path: ["published"], valueBoolean: true }' in doc
        assert 'tenant: "tenant-a"' in doc
        assert "title _additional { id score }" in doc

"""
GraphQL Query Builder Module

This module builds the GraphQL ``Get`` documents sent to Weaviate's ``/v1/graphql``
endpoint for the five search variants (nearVector, nearText, nearObject, hybrid and
bm25), together with the ``where`` filter and ``tenant`` arguments.

Documents are assembled as text in the shape of GraphQL's concrete syntax. Each kind
of value has its own serializer, and every user-supplied string goes through
``graphql_string`` so quotes, backslashes and control characters cannot break out of
the literal.

Author: Weaviate Team
Version: 1.0.0
"""

import json
import math
from typing import Any, List, Mapping, Optional, Sequence

from utils.entities import (
    DEFAULT_SEARCH_LIMIT,
    Bm25Params,
    HybridParams,
    MoveParams,
    NearObjectParams,
    NearTextParams,
    NearVectorParams,
    QueryOptions,
)
from utils.filters import WhereFilter

DEFAULT_FIELDS = "_additional { id distance certainty }"


# ---------- Value serializers ----------

def graphql_string(value: str) -> str:
    """Quote and escape a string as a GraphQL string literal."""
    return json.dumps(str(value))


def graphql_number(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"GraphQL cannot represent {value!r}")
    return repr(value) if isinstance(value, float) else str(value)


def graphql_list(values: Sequence[Any]) -> str:
    return "[" + ", ".join(graphql_literal(v) for v in values) + "]"


def graphql_object(fields: Mapping[str, Any]) -> str:
    if not fields:
        return "{}"
    return "{ " + ", ".join(f"{k}: {graphql_literal(v)}" for k, v in fields.items()) + " }"


def graphql_literal(value: Any) -> str:
    """
    Serialize a Python value as a GraphQL input literal.

    Args:
        value (Any): None, bool, number, string, sequence or mapping

    Returns:
        str: GraphQL literal text
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return graphql_number(value)
    if isinstance(value, str):
        return graphql_string(value)
    if isinstance(value, Mapping):
        return graphql_object(value)
    if isinstance(value, (list, tuple)):
        return graphql_list(value)
    raise TypeError(f"Cannot serialize {type(value).__name__} as a GraphQL literal")


def serialize_filter(where: WhereFilter) -> str:
    """
    Serialize a filter tree as a GraphQL input object.

    Combinators emit their operator and recurse into every operand; leaves emit the
    operator, the path and their single populated value field. The operator is a bare
    enum value.

    Args:
        where (WhereFilter): Filter tree

    Returns:
        str: GraphQL literal, e.g. ``{ operator: Equal, path: ["title"], valueText: "x" }``
    """
    if where.is_combinator:
        operands = ", ".join(serialize_filter(o) for o in where.operands)
        return f"{{ operator: {where.operator.value}, operands: [{operands}] }}"
    return (
        f"{{ operator: {where.operator.value}, "
        f"path: {graphql_list(where.path)}, "
        f"{where.value_field}: {graphql_literal(where.value)} }}"
    )


# ---------- Search clauses ----------

def _similarity_args(certainty: Optional[float], distance: Optional[float]) -> List[str]:
    args = []
    if certainty is not None:
        args.append(f"certainty: {graphql_number(certainty)}")
    if distance is not None:
        args.append(f"distance: {graphql_number(distance)}")
    return args


def _clause(name: str, args: List[str]) -> str:
    return f"{name}: {{ {', '.join(args)} }}"


def _move_clause(name: str, move: MoveParams) -> str:
    args = [f"force: {graphql_number(move.force)}"]
    if move.concepts is not None:
        args.append(f"concepts: {graphql_list(move.concepts)}")
    if move.objects is not None:
        objects = ", ".join(f"{{ id: {graphql_string(o)} }}" for o in move.objects)
        args.append(f"objects: [{objects}]")
    return _clause(name, args)


def near_vector_clause(params: NearVectorParams) -> str:
    args = [f"vector: {graphql_list(params.vector)}"]
    args.extend(_similarity_args(params.certainty, params.distance))
    return _clause("nearVector", args)


def near_text_clause(params: NearTextParams) -> str:
    args = [f"concepts: {graphql_list(params.concepts)}"]
    args.extend(_similarity_args(params.certainty, params.distance))
    if params.move_to is not None:
        args.append(_move_clause("moveTo", params.move_to))
    if params.move_away_from is not None:
        args.append(_move_clause("moveAwayFrom", params.move_away_from))
    return _clause("nearText", args)


def near_object_clause(params: NearObjectParams) -> str:
    args = [f"id: {graphql_string(params.id)}"]
    args.extend(_similarity_args(params.certainty, params.distance))
    return _clause("nearObject", args)


def hybrid_clause(params: HybridParams) -> str:
    args = [f"query: {graphql_string(params.query)}"]
    if params.alpha is not None:
        args.append(f"alpha: {graphql_number(params.alpha)}")
    if params.vector is not None:
        args.append(f"vector: {graphql_list(params.vector)}")
    if params.properties is not None:
        args.append(f"properties: {graphql_list(params.properties)}")
    if params.fusion_type is not None:
        args.append(f"fusionType: {params.fusion_type.value}")
    return _clause("hybrid", args)


def bm25_clause(params: Bm25Params) -> str:
    args = [f"query: {graphql_string(params.query)}"]
    if params.properties is not None:
        args.append(f"properties: {graphql_list(params.properties)}")
    return _clause("bm25", args)


# ---------- Document ----------

def build_get_query(class_name: str, search_clause: str, options: Optional[QueryOptions] = None) -> str:
    """
    Wrap a search clause in a ``Get`` query document for one collection.

    Args:
        class_name (str): Collection to search
        search_clause (str): Output of one of the ``*_clause`` builders
        options (Optional[QueryOptions]): Limit, selection set, filter and tenant

    Returns:
        str: GraphQL query document
    """
    options = options or QueryOptions()
    fields = " ".join(options.fields) if options.fields else DEFAULT_FIELDS
    limit = options.limit or DEFAULT_SEARCH_LIMIT

    arguments = [search_clause, f"limit: {limit}"]
    if options.where is not None:
        arguments.append(f"where: {serialize_filter(options.where)}")
    if options.tenant:
        arguments.append(f"tenant: {graphql_string(options.tenant)}")

    args_block = "\n".join(f"      {a}" for a in arguments)
    return (
        "{\n"
        "  Get {\n"
        f"    {class_name}(\n"
        f"{args_block}\n"
        "    ) {\n"
        f"      {fields}\n"
        "    }\n"
        "  }\n"
        "}"
    )

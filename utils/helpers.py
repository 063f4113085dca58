"""
Helper Utilities Module for Weaviate Plugin

This module provides the argument parsing shared by the Weaviate tools: JSON and CSV
parameters, query vectors, where filters and the common search options. It also runs
a client operation to completion from the synchronous tool entry points.

Parsing failures are raised as validation ``WeaviateApiError`` values so tools can
report them with the same envelope as API failures.

Author: Weaviate Team
Version: 1.0.0
"""

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar
import asyncio
import json
import logging
import math

from utils.client import WeaviateClient
from utils.credentials import Credentials
from utils.entities import DEFAULT_SEARCH_LIMIT, MoveParams, QueryOptions
from utils.errors import WeaviateApiError
from utils.filters import WhereFilter, equality_filter
from utils.validators import (
    MAX_SEARCH_LIMIT,
    RESPONSE_FORMATS,
    validate_collection_name,
    validate_limit,
    validate_response_format,
    validate_uuid,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_client(
    credentials: Mapping[str, Any],
    operation: Callable[[WeaviateClient], Awaitable[T]],
) -> T:
    """
    Run one client operation against the instance described by ``credentials``.

    A fresh client is created for the call and closed afterwards, whatever the outcome.

    Args:
        credentials (Mapping[str, Any]): Provider credentials from the tool runtime
        operation (Callable[[WeaviateClient], Awaitable[T]]): Coroutine function using the client

    Returns:
        T: Whatever ``operation`` returns
    """
    async def _run() -> T:
        async with WeaviateClient(Credentials.from_mapping(credentials)) as client:
            return await operation(client)

    return asyncio.run(_run())


def safe_json_parse(value: Any, default: Any = None) -> Any:
    """
    Safely parse JSON from various input types.

    Dicts and lists are returned as-is; strings are decoded; anything else, or a
    string that is not valid JSON, yields ``default``.

    Args:
        value (Any): Input value to parse (string, dict, list, or other)
        default (Any): Default value to return if parsing fails

    Returns:
        Any: Parsed JSON object, original value if already dict/list, or default on failure
    """
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return default
        try:
            return json.loads(s)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Failed to parse JSON: %r", value)
            return default
    return default


def csv_or_list_to_list(value: Any) -> Optional[List[str]]:
    """
    Convert CSV string or list to normalized list of strings.

    Args:
        value (Any): CSV string, list, or other value to convert

    Returns:
        Optional[List[str]]: Normalized list of strings or None if input is empty/invalid
    """
    if value is None:
        return None
    if isinstance(value, list):
        items = [str(v).strip() for v in value if str(v).strip()]
        return items or None
    s = str(value).strip()
    if not s:
        return None
    return [p.strip() for p in s.split(",") if p.strip()] or None


def get_str(tool_parameters: Mapping[str, Any], key: str) -> str:
    """Read a string parameter, stripped, with missing values as ``""``."""
    value = tool_parameters.get(key)
    return str(value).strip() if value is not None else ""


def require_str(tool_parameters: Mapping[str, Any], key: str, label: str) -> str:
    value = get_str(tool_parameters, key)
    if not value:
        raise WeaviateApiError.validation(f"{label} is required", {key: ["required"]})
    return value


def require_class_name(tool_parameters: Mapping[str, Any], key: str = "collection_name") -> str:
    """
    Read and check the class (collection) name parameter.

    Raises:
        WeaviateApiError: When it is missing or not a valid class name
    """
    name = require_str(tool_parameters, key, "Class name")
    if not validate_collection_name(name):
        raise WeaviateApiError.validation(
            f"Invalid class name '{name}'. Use letters, digits and underscores, not starting with a digit",
            {key: ["invalid class name"]},
        )
    return name


def parse_json_param(
    tool_parameters: Mapping[str, Any],
    key: str,
    expected: type = dict,
    required: bool = True,
) -> Any:
    """
    Decode a JSON-valued parameter and check its top-level type.

    Args:
        tool_parameters (Mapping[str, Any]): Raw tool parameters
        key (str): Parameter name
        expected (type): ``dict`` or ``list``
        required (bool): Whether a missing value is an error

    Returns:
        Any: Decoded value, or None when optional and absent

    Raises:
        WeaviateApiError: When required and missing, not valid JSON, or of the wrong type
    """
    raw = tool_parameters.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise WeaviateApiError.validation(f"'{key}' is required", {key: ["required"]})
        return None

    value = safe_json_parse(raw)
    if not isinstance(value, expected):
        kind = "object" if expected is dict else "array"
        raise WeaviateApiError.validation(
            f"'{key}' must be a JSON {kind}", {key: [f"expected JSON {kind}"]}
        )
    return value


def parse_optional_float(tool_parameters: Mapping[str, Any], key: str) -> Optional[float]:
    raw = tool_parameters.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise WeaviateApiError.validation(f"'{key}' must be a number", {key: ["expected number"]}) from None


def parse_bool(tool_parameters: Mapping[str, Any], key: str, default: bool = False) -> bool:
    raw = tool_parameters.get(key)
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("true", "1", "yes")


def parse_vector(value: Any) -> Optional[List[float]]:
    """
    Parse a query vector given as a JSON array or as comma-separated numbers.

    Args:
        value (Any): ``"[0.1, 0.2]"``, ``"0.1, 0.2"`` or a list

    Returns:
        Optional[List[float]]: The vector, or None if it cannot be parsed
    """
    if isinstance(value, list):
        parsed = value
    else:
        s = str(value or "").strip()
        if not s:
            return None
        if s.startswith("["):
            parsed = safe_json_parse(s)
        else:
            try:
                parsed = [float(x.strip()) for x in s.split(",") if x.strip()]
            except ValueError:
                return None
    if not isinstance(parsed, list) or not parsed:
        return None
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in parsed):
        return None
    if not all(math.isfinite(x) for x in parsed):
        return None
    return [float(x) for x in parsed]


def parse_filter(value: Any) -> Optional[WhereFilter]:
    """
    Parse the ``where_filter`` parameter.

    A JSON object with an ``operator`` key is read as a full where filter. Any other
    JSON object is read as simple ``{property: value}`` equality conditions.

    Args:
        value (Any): JSON text or a decoded object

    Returns:
        Optional[WhereFilter]: The filter, or None when no filter was given

    Raises:
        WeaviateApiError: When the value is not a JSON object or the filter is malformed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    data = safe_json_parse(value)
    if not isinstance(data, dict):
        raise WeaviateApiError.validation(
            "Invalid where_filter format. Provide a valid JSON object",
            {"where_filter": ["expected JSON object"]},
        )
    try:
        if "operator" in data:
            return WhereFilter.from_dict(data)
        return equality_filter(data)
    except ValueError as e:
        raise WeaviateApiError.validation(f"Invalid where_filter: {e}", {"where_filter": [str(e)]}) from None


def parse_limit(
    tool_parameters: Mapping[str, Any],
    default: int = DEFAULT_SEARCH_LIMIT,
    max_limit: int = MAX_SEARCH_LIMIT,
) -> int:
    raw = tool_parameters.get("limit")
    if raw is None or raw == "":
        return default
    if not validate_limit(raw, max_limit):
        raise WeaviateApiError.validation(
            f"Limit must be an integer between 1 and {max_limit}", {"limit": [f"1-{max_limit}"]}
        )
    return int(raw)


def parse_query_options(tool_parameters: Mapping[str, Any]) -> QueryOptions:
    """
    Collect the options shared by every search tool.

    Reads ``limit`` (1-100, default 10), ``return_properties`` (comma-separated selection
    set), ``where_filter`` and ``tenant``.

    Args:
        tool_parameters (Mapping[str, Any]): Raw tool parameters

    Returns:
        QueryOptions: Options for ``build_get_query``
    """
    return QueryOptions(
        limit=parse_limit(tool_parameters),
        fields=csv_or_list_to_list(tool_parameters.get("return_properties")),
        where=parse_filter(tool_parameters.get("where_filter")),
        tenant=get_str(tool_parameters, "tenant") or None,
    )


def get_response_format(tool_parameters: Mapping[str, Any]) -> str:
    fmt = get_str(tool_parameters, "response_format").lower() or "json"
    if not validate_response_format(fmt):
        raise WeaviateApiError.validation(
            f"Unknown response_format '{fmt}'. Allowed: {sorted(RESPONSE_FORMATS)}",
            {"response_format": ["invalid"]},
        )
    return fmt


def get_operation(tool_parameters: Mapping[str, Any], allowed: set) -> str:
    """
    Read the ``operation`` parameter and check it against the tool's allowed set.

    Raises:
        WeaviateApiError: For unknown operations
    """
    operation = get_str(tool_parameters, "operation").lower()
    if operation not in allowed:
        raise WeaviateApiError.validation(
            f"Unknown operation '{operation}'. Allowed: {sorted(allowed)}",
            {"operation": ["invalid"]},
        )
    return operation


def extract_get_results(response: Optional[Dict[str, Any]], class_name: str) -> Dict[str, Any]:
    """
    Pull the objects for ``class_name`` out of a GraphQL ``Get`` response.

    GraphQL-level errors are returned alongside the (possibly empty) results.

    Returns:
        Dict[str, Any]: ``results``, ``count`` and, when present, ``errors``
    """
    response = response or {}
    results = ((response.get("data") or {}).get("Get") or {}).get(class_name) or []
    out: Dict[str, Any] = {"results": results, "count": len(results)}
    if response.get("errors"):
        out["errors"] = response["errors"]
    return out


def parse_move(tool_parameters: Mapping[str, Any], key: str) -> Optional[MoveParams]:
    """
    Read a nearText move parameter given as JSON.

    The value looks like ``{"force": 0.5, "concepts": [...], "objects": [...]}``, where
    ``objects`` may hold id strings or ``{"id": ...}`` objects. At least one of
    ``concepts`` and ``objects`` is required.

    Args:
        tool_parameters (Mapping[str, Any]): Raw tool parameters
        key (str): ``move_to`` or ``move_away_from``

    Returns:
        Optional[MoveParams]: The move, or None when the parameter is absent
    """
    data = parse_json_param(tool_parameters, key, dict, required=False)
    if data is None:
        return None

    force = data.get("force")
    if isinstance(force, bool) or not isinstance(force, (int, float)):
        raise WeaviateApiError.validation(f"'{key}.force' must be a number", {key: ["force required"]})

    concepts = data.get("concepts")
    if concepts is not None and not (isinstance(concepts, list) and all(isinstance(c, str) for c in concepts)):
        raise WeaviateApiError.validation(f"'{key}.concepts' must be a list of strings", {key: ["invalid concepts"]})

    objects = data.get("objects")
    if objects is not None:
        if not isinstance(objects, list):
            raise WeaviateApiError.validation(f"'{key}.objects' must be a list", {key: ["invalid objects"]})
        objects = [o.get("id") if isinstance(o, dict) else o for o in objects]
        if not all(validate_uuid(o) for o in objects):
            raise WeaviateApiError.validation(f"'{key}.objects' must hold object UUIDs", {key: ["invalid uuid"]})

    if concepts is None and objects is None:
        raise WeaviateApiError.validation(f"'{key}' needs concepts or objects", {key: ["empty move"]})

    return MoveParams(force=float(force), concepts=concepts, objects=objects)


def build_beacon(object_uuid: str, class_name: Optional[str] = None) -> str:
    """Beacon URI pointing at an object, e.g. ``weaviate://localhost/Author/<uuid>``."""
    if class_name:
        return f"weaviate://localhost/{class_name}/{object_uuid}"
    return f"weaviate://localhost/{object_uuid}"


def build_batch_objects(class_name: str, items: List[Any], tenant: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Normalize batch input into Weaviate objects of ``class_name``.

    Items holding a ``properties`` object are taken as full objects (``id`` and
    ``vector`` are kept); any other JSON object is taken as the properties themselves.

    Args:
        class_name (str): Class every object is created in
        items (List[Any]): Decoded ``objects`` parameter
        tenant (Optional[str]): Tenant applied to every object

    Returns:
        List[Dict[str, Any]]: Objects ready for ``batch_create_objects``

    Raises:
        WeaviateApiError: When an item is not a JSON object
    """
    objects = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise WeaviateApiError.validation(
                f"Item {i} must be a JSON object", {"objects": [f"item {i} is not an object"]}
            )
        if isinstance(item.get("properties"), dict):
            obj = {k: v for k, v in item.items() if k in ("id", "vector", "properties")}
        else:
            obj = {"properties": item}
        obj["class"] = class_name
        if tenant:
            obj["tenant"] = tenant
        objects.append(obj)
    return objects


def summarize_batch_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Count per-object successes and collect the error messages of failures."""
    errors = []
    for r in results or []:
        errs = ((r.get("result") or {}).get("errors") or {}).get("error") or []
        if errs:
            errors.append({"id": r.get("id"), "errors": [e.get("message") for e in errs]})
    total = len(results or [])
    return {
        "inserted_count": total - len(errors),
        "failed_count": len(errors),
        "errors": errors,
    }

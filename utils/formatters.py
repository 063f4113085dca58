"""
Response Formatting Module

Builds the payloads returned by the Weaviate tools: the ``success``/``error`` JSON
envelopes shared by every tool, and a Markdown rendering for callers that ask for
``response_format: markdown``. Lists of classes, objects, nodes, backups and tenants
are rendered as dedicated tables; other data falls back to a generic table or a
key/value listing.

Author: Weaviate Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Union
import json
import re

from utils.errors import ERROR_CODES, ErrorKind, WeaviateApiError, format_error_for_logging
from utils.pagination import PaginatedResponse

CHARACTER_LIMIT = 50000


def create_success_response(data: Any, message: str = "Operation completed successfully") -> Dict[str, Any]:
    """
    Create a standardized success response object.

    Args:
        data (Any): The actual data to return in the response
        message (str): Human-readable success message

    Returns:
        Dict[str, Any]: Standardized success response dictionary
    """
    return {
        "success": True,
        "data": data,
        "message": message,
    }


def create_error_response(
    error_message: str, error_code: str = ERROR_CODES[ErrorKind.API], details: Any = None
) -> Dict[str, Any]:
    """
    Create a standardized error response object.

    Args:
        error_message (str): Human-readable error message describing what went wrong
        error_code (str): Machine-readable error code for programmatic handling
        details (Any, optional): Additional error details or context information

    Returns:
        Dict[str, Any]: Standardized error response dictionary
    """
    resp = {
        "success": False,
        "error": error_message,
        "error_code": error_code,
    }
    if details is not None:
        resp["details"] = details
    return resp


def format_error(error: BaseException) -> Dict[str, Any]:
    """
    Turn an exception into an error envelope.

    Classified errors keep their code, and retryable ones are marked in the message.
    Anything else is reported as a generic Weaviate error.

    Args:
        error (BaseException): Error raised while running a tool operation

    Returns:
        Dict[str, Any]: Error envelope with ``details`` describing the error
    """
    details = format_error_for_logging(error)
    if isinstance(error, WeaviateApiError):
        message = f"Error: {error.message}"
        if error.retryable:
            message += " (retryable)"
        return create_error_response(message, error.code, details)
    return create_error_response(f"Operation failed: {error}", details=details)


def to_message(tool: Any, payload: Union[Dict[str, Any], str]):
    """Wrap a formatted payload in the matching tool message type."""
    if isinstance(payload, str):
        return tool.create_text_message(payload)
    return tool.create_json_message(payload)


def format_response(
    data: Any,
    response_format: str = "json",
    entity_type: str = "results",
    message: str = "Operation completed successfully",
    character_limit: int = CHARACTER_LIMIT,
) -> Union[Dict[str, Any], str]:
    """
    Format a successful result for the requested output format.

    Args:
        data (Any): Result data; ``PaginatedResponse`` values are expanded
        response_format (str): ``json`` for the success envelope, ``markdown`` for text
        entity_type (str): What the data holds (``classes``, ``objects``, ``nodes``,
            ``backups``, ``tenants``, ...), used to pick a table layout and heading
        message (str): Success message for the JSON envelope
        character_limit (int): Maximum length of Markdown output

    Returns:
        Union[Dict[str, Any], str]: Success envelope or Markdown text
    """
    if response_format == "markdown":
        return truncate_text(format_as_markdown(data, entity_type), character_limit)
    if isinstance(data, PaginatedResponse):
        data = data.to_dict()
    return create_success_response(data, message)


def truncate_text(text: str, limit: int = CHARACTER_LIMIT) -> str:
    if len(text) <= limit:
        return text
    omitted = len(text) - limit
    return text[:limit] + f"\n\n... (truncated, {omitted} more characters)"


# ---------- Markdown ----------

def format_as_markdown(data: Any, entity_type: str) -> str:
    if isinstance(data, PaginatedResponse):
        return _format_paginated(data, entity_type)
    if isinstance(data, list):
        return _format_list(data, entity_type)
    if isinstance(data, dict):
        return _format_object(data, entity_type)
    return str(data)


def _capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def _format_key(key: str) -> str:
    """camelCase -> Title Case"""
    return _capitalize(re.sub(r"([A-Z])", r" \1", key)).strip()


def _cell(value: Any) -> str:
    if value is None or value == "":
        return "-"
    return str(value).replace("|", "\\|").replace("\n", " ")


def _format_paginated(page: PaginatedResponse, entity_type: str) -> str:
    lines = [f"## {_capitalize(entity_type)}", ""]
    if page.total is not None:
        lines.append(f"**Total:** {page.total} | **Showing:** {page.count}")
    else:
        lines.append(f"**Showing:** {page.count}")
    if page.has_more:
        lines.append(f"**More available:** Yes (cursor: `{page.next_cursor}`)")
    lines.append("")

    if not page.items:
        lines.append("_No items found._")
    else:
        lines.append(_format_list(page.items, entity_type))
    return "\n".join(lines)


def _format_list(items: List[Any], entity_type: str) -> str:
    if entity_type in ("classes", "collections"):
        return format_classes_table(items)
    if entity_type == "objects":
        return format_objects_table(items)
    if entity_type == "nodes":
        return format_nodes_table(items)
    if entity_type == "backups":
        return format_backups_table(items)
    if entity_type == "tenants":
        return format_tenants_table(items)
    return format_generic_table(items)


def format_classes_table(classes: List[Dict[str, Any]]) -> str:
    lines = ["| Class | Description | Vectorizer | Properties |", "|---|---|---|---|"]
    for cls in classes:
        lines.append(
            f"| {_cell(cls.get('class'))} | {_cell(cls.get('description'))} "
            f"| {cls.get('vectorizer') or 'none'} | {len(cls.get('properties') or [])} |"
        )
    return "\n".join(lines)


def format_objects_table(objects: List[Dict[str, Any]]) -> str:
    lines = ["| ID | Class | Properties |", "|---|---|---|"]
    for obj in objects:
        keys = list((obj.get("properties") or {}).keys())[:3]
        preview = ", ".join(keys) + "..." if keys else "-"
        lines.append(f"| {_cell(obj.get('id'))} | {_cell(obj.get('class'))} | {preview} |")
    return "\n".join(lines)


def format_nodes_table(nodes: List[Dict[str, Any]]) -> str:
    lines = ["| Name | Status | Version | Objects | Shards |", "|---|---|---|---|---|"]
    for node in nodes:
        stats = node.get("stats") or {}
        lines.append(
            f"| {_cell(node.get('name'))} | {_cell(node.get('status'))} | {_cell(node.get('version'))} "
            f"| {_cell(stats.get('objectCount'))} | {_cell(stats.get('shardCount'))} |"
        )
    return "\n".join(lines)


def format_backups_table(backups: List[Dict[str, Any]]) -> str:
    lines = ["| ID | Backend | Status | Path |", "|---|---|---|---|"]
    for backup in backups:
        lines.append(
            f"| {_cell(backup.get('id'))} | {_cell(backup.get('backend'))} "
            f"| {_cell(backup.get('status'))} | {_cell(backup.get('path'))} |"
        )
    return "\n".join(lines)


def format_tenants_table(tenants: List[Dict[str, Any]]) -> str:
    lines = ["| Name | Activity Status |", "|---|---|"]
    for tenant in tenants:
        lines.append(f"| {_cell(tenant.get('name'))} | {tenant.get('activityStatus') or 'ACTIVE'} |")
    return "\n".join(lines)


def format_generic_table(items: List[Any]) -> str:
    """
    Render a list as a table whose columns are the first five keys of the first item.
    Lists of scalars are rendered one value per row.
    """
    if not items:
        return "_No items_"
    first = items[0]
    if not isinstance(first, dict):
        return "\n".join(["| Value |", "|---|"] + [f"| {_cell(v)} |" for v in items])

    keys = list(first.keys())[:5]
    lines = [f"| {' | '.join(keys)} |", f"|{'|'.join('---' for _ in keys)}|"]
    for item in items:
        record = item if isinstance(item, dict) else {}
        lines.append(f"| {' | '.join(_cell(_scalar(record.get(k))) for k in keys)} |")
    return "\n".join(lines)


def _scalar(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def _format_object(data: Dict[str, Any], entity_type: str) -> str:
    title = entity_type[:-1] if entity_type.endswith("s") else entity_type
    lines = [f"## {_capitalize(title)}", ""]
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            lines.append(f"**{_format_key(key)}:**")
            lines.append("```json")
            lines.append(json.dumps(value, indent=2))
            lines.append("```")
        else:
            lines.append(f"**{_format_key(key)}:** {value}")
    return "\n".join(lines)

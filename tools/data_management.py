"""
Data Management Tool for Weaviate Plugin

This module provides a data management tool for single Weaviate objects: listing a
class page by page, reading, creating, replacing, merging and deleting objects, and
checking whether an object exists. All operations accept a tenant for multi-tenant
classes.

Classes:
    DataManagementTool: Main tool class for data management operations

Constants:
    _ALLOWED_OPS: Set of allowed operations for the tool
"""

from collections.abc import Generator
from typing import Any, Dict, Mapping, Optional
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    csv_or_list_to_list,
    get_operation,
    get_response_format,
    get_str,
    parse_json_param,
    parse_limit,
    parse_vector,
    require_class_name,
    require_str,
    run_with_client,
)
from utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from utils.validators import validate_uuid

logger = logging.getLogger(__name__)

# Allowed operations for the data management tool
_ALLOWED_OPS = {
    "list_objects",
    "get_object",
    "create_object",
    "update_object",
    "patch_object",
    "delete_object",
    "object_exists",
}


def _require_uuid(tool_parameters: Mapping[str, Any], key: str = "object_uuid") -> str:
    uuid = require_str(tool_parameters, key, "Object UUID")
    if not validate_uuid(uuid):
        raise WeaviateApiError.validation(f"Invalid object UUID '{uuid}'", {key: ["invalid uuid"]})
    return uuid


def _optional_vector(tool_parameters: Mapping[str, Any]) -> Optional[list]:
    if not get_str(tool_parameters, "vector"):
        return None
    vector = parse_vector(tool_parameters.get("vector"))
    if vector is None:
        raise WeaviateApiError.validation(
            "Vector must be a JSON array or comma-separated list of numbers", {"vector": ["invalid vector"]}
        )
    return vector


def _parse_offset(tool_parameters: Mapping[str, Any]) -> int:
    raw = tool_parameters.get("offset")
    if raw is None or raw == "":
        return 0
    try:
        offset = int(raw)
    except (TypeError, ValueError):
        offset = -1
    if offset < 0:
        raise WeaviateApiError.validation("Offset must be a non-negative integer", {"offset": [">= 0"]})
    return offset


class DataManagementTool(Tool):
    """
    A data management tool for individual Weaviate objects.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute data management operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): One of list_objects, get_object, create_object,
                  update_object, patch_object, delete_object, object_exists
                - collection_name (str): Target class (required)
                - object_uuid (str): Object id (required except for list_objects;
                  optional for create_object)
                - object_data (str): JSON object of properties (create/update/patch)
                - vector (str): JSON array or CSV numbers (create/update, optional)
                - limit (int): Page size for list_objects, 1-100 (default: 20)
                - offset (int): Objects to skip for list_objects (default: 0)
                - include (str): Comma-separated additional fields, e.g. ``vector`` (list/get)
                - tenant (str): Tenant for multi-tenant classes
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Operation results or error information

        Operations:
            list_objects:
                Returns one page of objects; ``has_more`` is set when the page is full
                and ``next_cursor`` holds the offset of the next page.

            update_object / patch_object:
                update_object replaces all properties, patch_object merges the given
                properties into the stored object.

            object_exists:
                Returns ``exists: false`` for missing objects and also when the
                instance cannot be reached.
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            class_name = require_class_name(tool_parameters)
            tenant = get_str(tool_parameters, "tenant") or None
            creds = self.runtime.credentials

            # ---- list_objects ----
            if operation == "list_objects":
                limit = parse_limit(tool_parameters, default=DEFAULT_PAGE_SIZE, max_limit=MAX_PAGE_SIZE)
                offset = _parse_offset(tool_parameters)
                include = csv_or_list_to_list(tool_parameters.get("include"))

                page = run_with_client(
                    creds,
                    lambda client: client.list_objects(
                        class_name, limit=limit, offset=offset, include=include, tenant=tenant
                    ),
                )
                yield to_message(self, format_response(
                    page,
                    response_format,
                    "objects",
                    message=f"Retrieved {page.count} objects from '{class_name}'",
                ))
                return

            # ---- create_object ----
            if operation == "create_object":
                properties = parse_json_param(tool_parameters, "object_data", dict)
                obj: Dict[str, Any] = {"class": class_name, "properties": properties}
                if get_str(tool_parameters, "object_uuid"):
                    obj["id"] = _require_uuid(tool_parameters)
                vector = _optional_vector(tool_parameters)
                if vector:
                    obj["vector"] = vector
                if tenant:
                    obj["tenant"] = tenant

                created = run_with_client(creds, lambda client: client.create_object(obj))
                yield to_message(self, format_response(
                    created, response_format, "object", message=f"Object created in '{class_name}'"
                ))
                return

            object_uuid = _require_uuid(tool_parameters)

            # ---- get_object ----
            if operation == "get_object":
                include = csv_or_list_to_list(tool_parameters.get("include"))
                obj = run_with_client(
                    creds, lambda client: client.get_object(class_name, object_uuid, include=include, tenant=tenant)
                )
                yield to_message(self, format_response(
                    obj, response_format, "object", message="Object retrieved successfully"
                ))
                return

            # ---- update_object ----
            if operation == "update_object":
                properties = parse_json_param(tool_parameters, "object_data", dict)
                vector = _optional_vector(tool_parameters)
                updated = run_with_client(
                    creds,
                    lambda client: client.update_object(
                        class_name, object_uuid, properties, vector=vector, tenant=tenant
                    ),
                )
                yield to_message(self, format_response(
                    updated, response_format, "object", message="Object replaced successfully"
                ))
                return

            # ---- patch_object ----
            if operation == "patch_object":
                properties = parse_json_param(tool_parameters, "object_data", dict)
                run_with_client(
                    creds, lambda client: client.patch_object(class_name, object_uuid, properties, tenant=tenant)
                )
                yield to_message(self, format_response(
                    {"id": object_uuid, "class": class_name, "updated_properties": sorted(properties)},
                    response_format,
                    "object",
                    message="Object updated successfully",
                ))
                return

            # ---- delete_object ----
            if operation == "delete_object":
                run_with_client(creds, lambda client: client.delete_object(class_name, object_uuid, tenant=tenant))
                yield to_message(self, format_response(
                    {"id": object_uuid, "class": class_name, "deleted": True},
                    response_format,
                    "object",
                    message="Object deleted successfully",
                ))
                return

            # ---- object_exists ----
            exists = run_with_client(
                creds, lambda client: client.object_exists(class_name, object_uuid, tenant=tenant)
            )
            yield to_message(self, format_response(
                {"id": object_uuid, "class": class_name, "exists": exists},
                response_format,
                "object",
                message="Object exists" if exists else "Object not found",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Data operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Data management error")
            yield self.create_json_message(format_error(e))

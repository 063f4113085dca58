"""
Schema Management Tool for Weaviate Plugin

This module provides a schema management tool for Weaviate classes (collections):
reading the schema, creating, updating and deleting classes, and adding properties
to existing classes.

Classes:
    SchemaManagementTool: Main tool class for schema operations

Constants:
    _ALLOWED_OPS: Set of allowed operations for the schema management tool
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    get_operation,
    get_response_format,
    get_str,
    parse_json_param,
    require_class_name,
    run_with_client,
)
from utils.validators import validate_collection_name, validate_property_definition

logger = logging.getLogger(__name__)

# Allowed operations for the schema management tool
_ALLOWED_OPS = {
    "get_schema",
    "get_class",
    "create_class",
    "update_class",
    "delete_class",
    "add_property",
}


class SchemaManagementTool(Tool):
    """
    A schema management tool for Weaviate classes.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute schema operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): One of get_schema, get_class, create_class,
                  update_class, delete_class, add_property
                - collection_name (str): Target class (all operations except get_schema;
                  optional for create_class when class_config names the class)
                - class_config (str): JSON class definition (create_class, update_class)
                - property (str): JSON property definition with ``name`` and ``dataType``
                  (add_property)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Operation results or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            creds = self.runtime.credentials

            # ---- get_schema ----
            if operation == "get_schema":
                schema = run_with_client(creds, lambda client: client.get_schema()) or {}
                classes = schema.get("classes") or []
                yield to_message(self, format_response(
                    classes, response_format, "classes", message=f"Found {len(classes)} classes"
                ))
                return

            # ---- create_class ----
            if operation == "create_class":
                class_config = parse_json_param(tool_parameters, "class_config", dict)
                class_name = get_str(tool_parameters, "collection_name") or class_config.get("class") or ""
                if not validate_collection_name(class_name):
                    raise WeaviateApiError.validation(
                        f"Invalid class name '{class_name}'", {"collection_name": ["invalid class name"]}
                    )
                properties = class_config.get("properties") or []
                bad = [p.get("name") if isinstance(p, dict) else p for p in properties
                       if not validate_property_definition(p)]
                if bad:
                    raise WeaviateApiError.validation(
                        f"Invalid property definitions: {bad}", {"properties": ["name and dataType required"]}
                    )

                body = {**class_config, "class": class_name}
                created = run_with_client(creds, lambda client: client.create_class(body))
                yield to_message(self, format_response(
                    created, response_format, "class", message=f"Class '{class_name}' created"
                ))
                return

            class_name = require_class_name(tool_parameters)

            # ---- get_class ----
            if operation == "get_class":
                cls = run_with_client(creds, lambda client: client.get_class(class_name))
                yield to_message(self, format_response(
                    cls, response_format, "class", message=f"Retrieved class '{class_name}'"
                ))
                return

            # ---- update_class ----
            if operation == "update_class":
                updates = parse_json_param(tool_parameters, "class_config", dict)
                body = {**updates, "class": class_name}
                updated = run_with_client(creds, lambda client: client.update_class(class_name, body))
                yield to_message(self, format_response(
                    updated, response_format, "class", message=f"Class '{class_name}' updated"
                ))
                return

            # ---- delete_class ----
            if operation == "delete_class":
                run_with_client(creds, lambda client: client.delete_class(class_name))
                yield to_message(self, format_response(
                    {"class": class_name, "deleted": True},
                    response_format,
                    "class",
                    message=f"Class '{class_name}' deleted",
                ))
                return

            # ---- add_property ----
            prop = parse_json_param(tool_parameters, "property", dict)
            if not validate_property_definition(prop):
                raise WeaviateApiError.validation(
                    "Property must have a valid 'name' and a non-empty 'dataType' list",
                    {"property": ["name and dataType required"]},
                )
            run_with_client(creds, lambda client: client.add_property(class_name, prop))
            yield to_message(self, format_response(
                {"class": class_name, "property": prop},
                response_format,
                "property",
                message=f"Property '{prop['name']}' added to '{class_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Schema operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Schema management error")
            yield self.create_json_message(format_error(e))

"""
Reference Management Tool for Weaviate Plugin

This module manages cross-references between objects: adding a reference to a
reference property, replacing every reference it holds, and removing one.

Targets are given as object ids (plus an optional target class) and sent to
Weaviate as beacons of the form ``weaviate://localhost/<Class>/<uuid>``.

Classes:
    ReferenceManagementTool: Main tool class for reference operations

Constants:
    _ALLOWED_OPS: Set of allowed operations for the tool
"""

from collections.abc import Generator
from typing import Any, List, Mapping
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    build_beacon,
    csv_or_list_to_list,
    get_operation,
    get_response_format,
    get_str,
    require_class_name,
    require_str,
    run_with_client,
)
from utils.validators import validate_collection_name, validate_uuid

logger = logging.getLogger(__name__)

# Allowed operations for the reference tool
_ALLOWED_OPS = {"add_reference", "update_references", "delete_reference"}


def _target_uuids(tool_parameters: Mapping[str, Any]) -> List[str]:
    uuids = csv_or_list_to_list(tool_parameters.get("target_uuids")) or []
    bad = [u for u in uuids if not validate_uuid(u)]
    if bad:
        raise WeaviateApiError.validation(f"Invalid target UUIDs: {bad}", {"target_uuids": ["invalid uuid"]})
    return uuids


class ReferenceManagementTool(Tool):
    """
    A tool for adding, replacing and removing cross-references.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute reference operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): add_reference, update_references or delete_reference
                - collection_name (str): Class of the source object (required)
                - object_uuid (str): Source object id (required)
                - property_name (str): Reference property on the source class (required)
                - target_uuids (str): Comma-separated target ids; exactly one for
                  add_reference/delete_reference, any number for update_references
                - target_collection (str): Class of the targets (optional)
                - tenant (str): Tenant for multi-tenant classes (optional)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Operation results or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            class_name = require_class_name(tool_parameters)
            object_uuid = require_str(tool_parameters, "object_uuid", "Object UUID")
            if not validate_uuid(object_uuid):
                raise WeaviateApiError.validation(
                    f"Invalid object UUID '{object_uuid}'", {"object_uuid": ["invalid uuid"]}
                )
            property_name = require_str(tool_parameters, "property_name", "Property name")
            target_class = get_str(tool_parameters, "target_collection") or None
            if target_class and not validate_collection_name(target_class):
                raise WeaviateApiError.validation(
                    f"Invalid target class '{target_class}'", {"target_collection": ["invalid class name"]}
                )
            tenant = get_str(tool_parameters, "tenant") or None
            targets = _target_uuids(tool_parameters)
            beacons = [{"beacon": build_beacon(t, target_class)} for t in targets]
            creds = self.runtime.credentials

            if operation != "update_references" and len(beacons) != 1:
                raise WeaviateApiError.validation(
                    f"{operation} takes exactly one target UUID", {"target_uuids": ["exactly one"]}
                )

            summary = {
                "class": class_name,
                "id": object_uuid,
                "property": property_name,
                "targets": [b["beacon"] for b in beacons],
            }

            # ---- add_reference ----
            if operation == "add_reference":
                run_with_client(
                    creds,
                    lambda client: client.add_reference(class_name, object_uuid, property_name, beacons[0], tenant=tenant),
                )
                message = f"Reference added to '{property_name}'"

            # ---- update_references ----
            elif operation == "update_references":
                run_with_client(
                    creds,
                    lambda client: client.update_references(class_name, object_uuid, property_name, beacons, tenant=tenant),
                )
                message = f"'{property_name}' now holds {len(beacons)} references"

            # ---- delete_reference ----
            else:
                run_with_client(
                    creds,
                    lambda client: client.delete_reference(class_name, object_uuid, property_name, beacons[0], tenant=tenant),
                )
                message = f"Reference removed from '{property_name}'"

            yield to_message(self, format_response(summary, response_format, "reference", message=message))

        except WeaviateApiError as e:
            logger.warning(f"Reference operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Reference management error")
            yield self.create_json_message(format_error(e))

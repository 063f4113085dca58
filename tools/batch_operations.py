"""
Batch Operations Tool for Weaviate Plugin

This module provides bulk operations: creating many objects in one request, deleting
every object matching a where filter, and adding many cross-references at once.

Weaviate reports batch results per item, so a batch request can succeed as a whole
while individual objects fail; the tool counts and returns those failures.

Classes:
    BatchOperationsTool: Main tool class for batch operations

Constants:
    _ALLOWED_OPS: Set of allowed operations for the tool
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    build_batch_objects,
    get_operation,
    get_response_format,
    get_str,
    parse_bool,
    parse_filter,
    parse_json_param,
    require_class_name,
    run_with_client,
    summarize_batch_results,
)

logger = logging.getLogger(__name__)

# Allowed operations for the batch tool
_ALLOWED_OPS = {"batch_create", "batch_delete", "batch_add_references"}

_DELETE_OUTPUTS = {"minimal", "verbose"}


class BatchOperationsTool(Tool):
    """
    A tool for bulk object creation, filtered deletion and bulk references.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute batch operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): batch_create, batch_delete or batch_add_references
                - collection_name (str): Target class (batch_create, batch_delete)
                - objects (str): JSON array of objects or property maps (batch_create)
                - tenant (str): Tenant for multi-tenant classes (batch_create)
                - where_filter (str): JSON filter selecting objects (batch_delete, required)
                - output (str): ``minimal`` or ``verbose`` (batch_delete, default: minimal)
                - dry_run (bool): Count matches without deleting (batch_delete)
                - references (str): JSON array of ``{"from": beacon, "to": beacon}``
                  (batch_add_references)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Batch results or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            creds = self.runtime.credentials

            # ---- batch_add_references ----
            if operation == "batch_add_references":
                references = parse_json_param(tool_parameters, "references", list)
                for i, ref in enumerate(references):
                    if not (isinstance(ref, dict) and isinstance(ref.get("from"), str) and isinstance(ref.get("to"), str)):
                        raise WeaviateApiError.validation(
                            f"Reference {i} needs 'from' and 'to' beacons", {"references": [f"item {i} invalid"]}
                        )
                results = run_with_client(creds, lambda client: client.batch_add_references(references)) or []
                yield to_message(self, format_response(
                    {"results": results, "count": len(references)},
                    response_format,
                    "references",
                    message=f"Submitted {len(references)} references",
                ))
                return

            class_name = require_class_name(tool_parameters)

            # ---- batch_create ----
            if operation == "batch_create":
                items = parse_json_param(tool_parameters, "objects", list)
                if not items:
                    raise WeaviateApiError.validation("At least one object is required", {"objects": ["empty"]})
                objects = build_batch_objects(class_name, items, get_str(tool_parameters, "tenant") or None)

                results = run_with_client(creds, lambda client: client.batch_create_objects(objects)) or []
                summary = summarize_batch_results(results)
                summary["collection"] = class_name
                yield to_message(self, format_response(
                    summary,
                    response_format,
                    "batch",
                    message=f"Batch insert completed: {summary['inserted_count']} inserted, "
                            f"{summary['failed_count']} failed",
                ))
                return

            # ---- batch_delete ----
            where = parse_filter(tool_parameters.get("where_filter"))
            if where is None:
                raise WeaviateApiError.validation(
                    "A where_filter is required for batch_delete", {"where_filter": ["required"]}
                )
            output = get_str(tool_parameters, "output") or "minimal"
            if output not in _DELETE_OUTPUTS:
                raise WeaviateApiError.validation(
                    f"Unknown output '{output}'. Allowed: {sorted(_DELETE_OUTPUTS)}", {"output": ["invalid"]}
                )
            dry_run = parse_bool(tool_parameters, "dry_run")
            request = {
                "match": {"class": class_name, "where": where.to_dict()},
                "output": output,
                "dryRun": dry_run,
            }

            result = run_with_client(creds, lambda client: client.batch_delete_objects(request)) or {}
            counts = result.get("results") or {}
            if dry_run:
                message = f"Dry run: {counts.get('matches', 0)} objects match"
            else:
                message = f"Deleted {counts.get('successful', 0)} objects, {counts.get('failed', 0)} failed"
            yield to_message(self, format_response(result, response_format, "batch", message=message))

        except WeaviateApiError as e:
            logger.warning(f"Batch operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Batch operation error")
            yield self.create_json_message(format_error(e))

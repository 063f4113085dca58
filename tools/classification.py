"""
Classification Tool for Weaviate Plugin

This module starts and monitors Weaviate classification jobs, which fill reference
properties of unlabelled objects based on their vectors. ``knn`` classification
learns from already-labelled objects; ``zeroshot`` matches against the target
class directly.

Classes:
    ClassificationTool: Main tool class for classification operations
"""

from collections.abc import Generator
from typing import Any, Dict
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
    parse_filter,
    parse_json_param,
    require_class_name,
    require_str,
    run_with_client,
)
from utils.validators import validate_uuid

logger = logging.getLogger(__name__)

_ALLOWED_OPS = {"create_classification", "get_classification"}

CLASSIFICATION_TYPES = {"knn", "zeroshot", "text2vec-contextionary"}


class ClassificationTool(Tool):
    """
    A tool for starting classification jobs and checking their progress.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute classification operations.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): create_classification or get_classification
                - collection_name (str): Class to classify (create)
                - classify_properties (str): Comma-separated reference properties to fill (create)
                - based_on_properties (str): Comma-separated text properties to use (create)
                - classification_type (str): knn (default), zeroshot or text2vec-contextionary
                - settings (str): JSON settings, e.g. ``{"k": 3}`` for knn (optional)
                - where_filter (str): Objects to classify (optional)
                - classification_id (str): Job id (get)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Classification status or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            creds = self.runtime.credentials

            # ---- get_classification ----
            if operation == "get_classification":
                classification_id = require_str(tool_parameters, "classification_id", "Classification ID")
                if not validate_uuid(classification_id):
                    raise WeaviateApiError.validation(
                        f"Invalid classification ID '{classification_id}'", {"classification_id": ["invalid uuid"]}
                    )
                status = run_with_client(creds, lambda client: client.get_classification(classification_id))
                yield to_message(self, format_response(
                    status,
                    response_format,
                    "classification",
                    message=f"Classification is {(status or {}).get('status', 'unknown')}",
                ))
                return

            # ---- create_classification ----
            class_name = require_class_name(tool_parameters)
            classify_properties = csv_or_list_to_list(tool_parameters.get("classify_properties"))
            if not classify_properties:
                raise WeaviateApiError.validation(
                    "classify_properties is required", {"classify_properties": ["required"]}
                )
            based_on = csv_or_list_to_list(tool_parameters.get("based_on_properties"))
            if not based_on:
                raise WeaviateApiError.validation(
                    "based_on_properties is required", {"based_on_properties": ["required"]}
                )
            classification_type = get_str(tool_parameters, "classification_type") or "knn"
            if classification_type not in CLASSIFICATION_TYPES:
                raise WeaviateApiError.validation(
                    f"Unknown classification_type '{classification_type}'. Allowed: {sorted(CLASSIFICATION_TYPES)}",
                    {"classification_type": ["invalid"]},
                )

            request: Dict[str, Any] = {
                "class": class_name,
                "classifyProperties": classify_properties,
                "basedOnProperties": based_on,
                "type": classification_type,
            }
            settings = parse_json_param(tool_parameters, "settings", dict, required=False)
            if settings:
                request["settings"] = settings
            where = parse_filter(tool_parameters.get("where_filter"))
            if where is not None:
                request["filters"] = {"sourceWhere": where.to_dict()}

            status = run_with_client(creds, lambda client: client.create_classification(request))
            yield to_message(self, format_response(
                status,
                response_format,
                "classification",
                message=f"Classification {(status or {}).get('id')} started on '{class_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Classification failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Classification error")
            yield self.create_json_message(format_error(e))

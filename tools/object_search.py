"""
Object Search Tool for Weaviate Plugin

This module provides a "more like this" search: given the id of an existing object,
it finds the objects whose vectors are closest to it using Weaviate's ``nearObject``
operator.

Classes:
    ObjectSearchTool: Main tool class for nearObject search operations
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.entities import NearObjectParams
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    extract_get_results,
    get_response_format,
    parse_optional_float,
    parse_query_options,
    require_class_name,
    require_str,
    run_with_client,
)
from utils.validators import validate_uuid

logger = logging.getLogger(__name__)


class ObjectSearchTool(Tool):
    """
    A similarity search tool anchored on an existing object.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a nearObject search.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing search parameters
                - collection_name (str): Class to search (required)
                - object_uuid (str): Id of the anchor object (required)
                - certainty (float), distance (float): Similarity thresholds (optional)
                - limit, where_filter, return_properties, tenant, response_format: as for every search

        Yields:
            ToolInvokeMessage: Search results or error information
        """
        try:
            collection_name = require_class_name(tool_parameters)
            object_uuid = require_str(tool_parameters, "object_uuid", "Object UUID")
            if not validate_uuid(object_uuid):
                raise WeaviateApiError.validation(
                    f"Invalid object UUID '{object_uuid}'", {"object_uuid": ["invalid uuid"]}
                )

            params = NearObjectParams(
                id=object_uuid,
                certainty=parse_optional_float(tool_parameters, "certainty"),
                distance=parse_optional_float(tool_parameters, "distance"),
            )
            options = parse_query_options(tool_parameters)
            response_format = get_response_format(tool_parameters)

            response = run_with_client(
                self.runtime.credentials,
                lambda client: client.near_object(collection_name, params, options),
            )
            data = extract_get_results(response, collection_name)
            data.update({"collection": collection_name, "object_uuid": object_uuid, "search_type": "object"})

            yield to_message(self, format_response(
                data,
                response_format,
                "results",
                message=f"Found {data['count']} objects similar to '{object_uuid}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Object search failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Object search error")
            yield self.create_json_message(format_error(e))

"""
Vector Search Tool for Weaviate Plugin

This module provides a vector similarity search tool that finds objects whose
vectors are closest to a query vector, using Weaviate's GraphQL ``nearVector``
operator. Results can be narrowed with a where filter, a certainty or distance
threshold, and a tenant.

Classes:
    VectorSearchTool: Main tool class for vector similarity search operations
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.entities import NearVectorParams
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    extract_get_results,
    get_response_format,
    parse_optional_float,
    parse_query_options,
    parse_vector,
    require_class_name,
    run_with_client,
)

logger = logging.getLogger(__name__)


class VectorSearchTool(Tool):
    """
    A vector similarity search tool that finds objects near a query vector.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a nearVector search.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing search parameters
                - collection_name (str): Class to search (required)
                - query_vector (str): JSON array or comma-separated numbers (required)
                - certainty (float): Minimum certainty, 0-1 (optional)
                - distance (float): Maximum distance (optional)
                - limit (int): Maximum number of results, 1-100 (default: 10)
                - where_filter (str): JSON where filter or ``{property: value}`` pairs (optional)
                - return_properties (str): Comma-separated fields to return (optional)
                - tenant (str): Tenant for multi-tenant classes (optional)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Search results or error information
        """
        try:
            collection_name = require_class_name(tool_parameters)
            query_vector = parse_vector(tool_parameters.get("query_vector"))
            if query_vector is None:
                raise WeaviateApiError.validation(
                    "Query vector must be a non-empty JSON array or comma-separated list of numbers",
                    {"query_vector": ["invalid vector"]},
                )
            params = NearVectorParams(
                vector=query_vector,
                certainty=parse_optional_float(tool_parameters, "certainty"),
                distance=parse_optional_float(tool_parameters, "distance"),
            )
            options = parse_query_options(tool_parameters)
            response_format = get_response_format(tool_parameters)

            response = run_with_client(
                self.runtime.credentials,
                lambda client: client.near_vector(collection_name, params, options),
            )
            data = extract_get_results(response, collection_name)
            data.update({"collection": collection_name, "search_type": "vector"})

            yield to_message(self, format_response(
                data,
                response_format,
                "results",
                message=f"Found {data['count']} results in '{collection_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Vector search failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Vector search error")
            yield self.create_json_message(format_error(e))

"""
GraphQL Query Tool for Weaviate Plugin

This module runs a raw GraphQL document against Weaviate's ``/v1/graphql`` endpoint,
for queries the dedicated search tools do not cover (``Aggregate``, ``Explore``,
nested references, custom ``_additional`` fields, ...).

GraphQL-level errors are reported by Weaviate inside a successful HTTP response and
are passed back unchanged in the ``errors`` field.

Classes:
    GraphQLQueryTool: Main tool class for raw GraphQL queries
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import get_response_format, require_str, run_with_client

logger = logging.getLogger(__name__)


class GraphQLQueryTool(Tool):

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a raw GraphQL query.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing
                - query (str): GraphQL document (required)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: The GraphQL response or error information
        """
        try:
            query = require_str(tool_parameters, "query", "GraphQL query")
            response_format = get_response_format(tool_parameters)

            response = run_with_client(self.runtime.credentials, lambda client: client.graphql_query(query))
            message = "GraphQL query completed"
            if (response or {}).get("errors"):
                message = "GraphQL query returned errors"

            yield to_message(self, format_response(response, response_format, "graphql", message=message))

        except WeaviateApiError as e:
            logger.warning(f"GraphQL query failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("GraphQL query error")
            yield self.create_json_message(format_error(e))

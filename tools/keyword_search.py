"""
Keyword Search Tool for Weaviate Plugin

This module provides a BM25 keyword search tool. BM25 ranks objects by term
frequency, inverse document frequency and document length, and does not need a
vectorizer, which makes it the right choice for exact terms, codes and names.

Classes:
    KeywordSearchTool: Main tool class for BM25 search operations
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.entities import Bm25Params
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    csv_or_list_to_list,
    extract_get_results,
    get_response_format,
    parse_query_options,
    require_class_name,
    require_str,
    run_with_client,
)

logger = logging.getLogger(__name__)


class KeywordSearchTool(Tool):
    """
    A BM25 keyword search tool.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a BM25 search.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing search parameters
                - collection_name (str): Class to search (required)
                - query (str): Search text (required)
                - search_properties (str): Comma-separated properties to search within;
                  all text properties when unset (optional)
                - limit, where_filter, return_properties, tenant, response_format: as for every search

        Yields:
            ToolInvokeMessage: Search results or error information
        """
        try:
            collection_name = require_class_name(tool_parameters)
            query = require_str(tool_parameters, "query", "Query")
            params = Bm25Params(
                query=query,
                properties=csv_or_list_to_list(tool_parameters.get("search_properties")),
            )
            options = parse_query_options(tool_parameters)
            response_format = get_response_format(tool_parameters)

            response = run_with_client(
                self.runtime.credentials,
                lambda client: client.bm25_search(collection_name, params, options),
            )
            data = extract_get_results(response, collection_name)
            data.update({"collection": collection_name, "query": query, "search_type": "keyword"})

            yield to_message(self, format_response(
                data,
                response_format,
                "results",
                message=f"Found {data['count']} results in '{collection_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Keyword search failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Keyword search error")
            yield self.create_json_message(format_error(e))

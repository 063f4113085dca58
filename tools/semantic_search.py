"""
Semantic Search Tool for Weaviate Plugin

This module provides a text-based semantic search tool built on Weaviate's
``nearText`` operator. The collection's vectorizer module turns the query concepts
into a vector, so the class must be configured with a text vectorizer and the
matching provider key must be set in the plugin credentials.

Results can be steered towards or away from other concepts or objects with the
``move_to`` / ``move_away_from`` parameters.

Classes:
    SemanticSearchTool: Main tool class for nearText search operations
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.entities import NearTextParams
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    csv_or_list_to_list,
    extract_get_results,
    get_response_format,
    parse_move,
    parse_optional_float,
    parse_query_options,
    require_class_name,
    run_with_client,
)

logger = logging.getLogger(__name__)


class SemanticSearchTool(Tool):
    """
    A semantic search tool that vectorizes text concepts server-side and searches by them.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a nearText search.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing search parameters
                - collection_name (str): Class to search (required)
                - concepts (str): Comma-separated concepts or a single query text (required)
                - certainty (float), distance (float): Similarity thresholds (optional)
                - move_to (str), move_away_from (str): JSON move objects (optional)
                - limit, where_filter, return_properties, tenant, response_format: as for every search

        Yields:
            ToolInvokeMessage: Search results or error information
        """
        try:
            collection_name = require_class_name(tool_parameters)
            concepts = csv_or_list_to_list(tool_parameters.get("concepts"))
            if not concepts:
                raise WeaviateApiError.validation("At least one concept is required", {"concepts": ["required"]})

            params = NearTextParams(
                concepts=concepts,
                certainty=parse_optional_float(tool_parameters, "certainty"),
                distance=parse_optional_float(tool_parameters, "distance"),
                move_to=parse_move(tool_parameters, "move_to"),
                move_away_from=parse_move(tool_parameters, "move_away_from"),
            )
            options = parse_query_options(tool_parameters)
            response_format = get_response_format(tool_parameters)

            response = run_with_client(
                self.runtime.credentials,
                lambda client: client.near_text(collection_name, params, options),
            )
            data = extract_get_results(response, collection_name)
            data.update({"collection": collection_name, "concepts": concepts, "search_type": "semantic"})

            yield to_message(self, format_response(
                data,
                response_format,
                "results",
                message=f"Found {data['count']} results in '{collection_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Semantic search failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Semantic search error")
            yield self.create_json_message(format_error(e))

"""
Hybrid Search Tool for Weaviate Plugin

This module provides a hybrid search tool that combines BM25 keyword ranking with
vector similarity. The ``alpha`` parameter balances the two: 0.0 ranks by keywords
only, 1.0 by vectors only, and the default 0.5 weighs them equally.

If no query vector is given, Weaviate vectorizes the query text with the
collection's vectorizer module.

Classes:
    HybridSearchTool: Main tool class for hybrid search operations
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.entities import FusionType, HybridParams
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    csv_or_list_to_list,
    extract_get_results,
    get_response_format,
    get_str,
    parse_query_options,
    parse_vector,
    require_class_name,
    require_str,
    run_with_client,
)
from utils.validators import validate_alpha, validate_fusion_type

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.5


class HybridSearchTool(Tool):
    """
    A hybrid search tool that merges keyword and vector rankings.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute a hybrid search.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing search parameters
                - collection_name (str): Class to search (required)
                - query (str): Search text (required)
                - alpha (float): Keyword/vector balance, 0-1 (default: 0.5)
                - query_vector (str): Vector to use instead of vectorizing the query (optional)
                - search_properties (str): Comma-separated properties for the keyword part (optional)
                - fusion_type (str): ``rankedFusion`` or ``relativeScoreFusion`` (optional)
                - limit, where_filter, return_properties, tenant, response_format: as for every search

        Yields:
            ToolInvokeMessage: Search results or error information
        """
        try:
            collection_name = require_class_name(tool_parameters)
            query = require_str(tool_parameters, "query", "Query")

            alpha_raw = tool_parameters.get("alpha")
            if alpha_raw is None or alpha_raw == "":
                alpha = DEFAULT_ALPHA
            elif validate_alpha(alpha_raw):
                alpha = float(alpha_raw)
            else:
                raise WeaviateApiError.validation("Alpha must be between 0.0 and 1.0", {"alpha": ["0-1"]})

            query_vector = None
            if get_str(tool_parameters, "query_vector"):
                query_vector = parse_vector(tool_parameters.get("query_vector"))
                if query_vector is None:
                    raise WeaviateApiError.validation(
                        "Query vector must be a JSON array or comma-separated list of numbers",
                        {"query_vector": ["invalid vector"]},
                    )

            fusion_type = get_str(tool_parameters, "fusion_type") or None
            if fusion_type is not None and not validate_fusion_type(fusion_type):
                raise WeaviateApiError.validation(
                    f"Unknown fusion_type '{fusion_type}'. Allowed: {[f.value for f in FusionType]}",
                    {"fusion_type": ["invalid"]},
                )

            params = HybridParams(
                query=query,
                alpha=alpha,
                vector=query_vector,
                properties=csv_or_list_to_list(tool_parameters.get("search_properties")),
                fusion_type=fusion_type,
            )
            options = parse_query_options(tool_parameters)
            response_format = get_response_format(tool_parameters)

            response = run_with_client(
                self.runtime.credentials,
                lambda client: client.hybrid_search(collection_name, params, options),
            )
            data = extract_get_results(response, collection_name)
            data.update({"collection": collection_name, "query": query, "alpha": alpha, "search_type": "hybrid"})

            yield to_message(self, format_response(
                data,
                response_format,
                "results",
                message=f"Found {data['count']} results in '{collection_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Hybrid search failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Hybrid search error")
            yield self.create_json_message(format_error(e))

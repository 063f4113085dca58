"""
Cluster Info Tool for Weaviate Plugin

This module reports on the Weaviate instance itself: version and module metadata,
liveness and readiness checks, node status and Raft cluster statistics.

Classes:
    ClusterInfoTool: Main tool class for cluster information
"""

from collections.abc import Generator
from typing import Any
import logging

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import get_operation, get_response_format, get_str, run_with_client

logger = logging.getLogger(__name__)

_ALLOWED_OPS = {"meta", "live", "ready", "nodes", "statistics"}

_NODE_OUTPUTS = {"minimal", "verbose"}


class ClusterInfoTool(Tool):

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Report cluster information.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing
                - operation (str): meta, live, ready, nodes or statistics
                - output (str): ``minimal`` or ``verbose`` node detail (nodes only)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Cluster information or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            creds = self.runtime.credentials

            if operation == "meta":
                data = run_with_client(creds, lambda client: client.get_meta())
                entity, message = "meta", f"Weaviate {(data or {}).get('version')}"

            elif operation == "live":
                data = run_with_client(creds, lambda client: client.is_live())
                entity, message = "status", f"Liveness: {data['status']}"

            elif operation == "ready":
                data = run_with_client(creds, lambda client: client.is_ready())
                entity, message = "status", f"Readiness: {data['status']}"

            elif operation == "nodes":
                output = get_str(tool_parameters, "output") or None
                if output is not None and output not in _NODE_OUTPUTS:
                    raise WeaviateApiError.validation(
                        f"Unknown output '{output}'. Allowed: {sorted(_NODE_OUTPUTS)}", {"output": ["invalid"]}
                    )
                data = run_with_client(creds, lambda client: client.get_nodes(output))
                entity, message = "nodes", f"Found {len(data)} nodes"

            else:
                data = run_with_client(creds, lambda client: client.get_cluster_statistics())
                entity, message = "statistics", "Cluster statistics retrieved"

            yield to_message(self, format_response(data, response_format, entity, message=message))

        except WeaviateApiError as e:
            logger.warning(f"Cluster info failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Cluster info error")
            yield self.create_json_message(format_error(e))

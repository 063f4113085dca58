"""
Backup Management Tool for Weaviate Plugin

This module drives Weaviate's backup API: starting a backup on a storage backend,
polling its status, restoring it, polling the restore, and cancelling a running
backup. Backups run asynchronously on the server, so create/restore return
immediately with a status to poll.

Classes:
    BackupManagementTool: Main tool class for backup operations

Constants:
    _ALLOWED_OPS: Set of allowed operations for the tool
"""

from collections.abc import Generator
from typing import Any, Dict, Mapping
import logging
import re

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage
from utils.errors import WeaviateApiError
from utils.formatters import format_error, format_response, to_message
from utils.helpers import (
    csv_or_list_to_list,
    get_operation,
    get_response_format,
    require_str,
    run_with_client,
)
from utils.validators import BACKUP_BACKENDS, validate_backup_backend

logger = logging.getLogger(__name__)

# Allowed operations for the backup tool
_ALLOWED_OPS = {"create_backup", "get_backup_status", "restore_backup", "get_restore_status", "cancel_backup"}

# Weaviate backup ids: lowercase letters, digits, hyphen and underscore
_BACKUP_ID_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def _class_selection(tool_parameters: Mapping[str, Any]) -> Dict[str, Any]:
    include = csv_or_list_to_list(tool_parameters.get("include_collections"))
    exclude = csv_or_list_to_list(tool_parameters.get("exclude_collections"))
    if include and exclude:
        raise WeaviateApiError.validation(
            "Use either include_collections or exclude_collections, not both",
            {"include_collections": ["conflicts with exclude_collections"]},
        )
    selection: Dict[str, Any] = {}
    if include:
        selection["include"] = include
    if exclude:
        selection["exclude"] = exclude
    return selection


class BackupManagementTool(Tool):
    """
    A tool for creating, restoring and monitoring Weaviate backups.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute backup operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): create_backup, get_backup_status, restore_backup,
                  get_restore_status or cancel_backup
                - backend (str): filesystem, s3, gcs or azure (required)
                - backup_id (str): Backup id; lowercase letters, digits, ``-`` and ``_`` (required)
                - include_collections (str): Comma-separated classes to include (create/restore)
                - exclude_collections (str): Comma-separated classes to exclude (create/restore)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Backup status or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            backend = require_str(tool_parameters, "backend", "Backend").lower()
            if not validate_backup_backend(backend):
                raise WeaviateApiError.validation(
                    f"Unknown backend '{backend}'. Allowed: {sorted(BACKUP_BACKENDS)}", {"backend": ["invalid"]}
                )
            backup_id = require_str(tool_parameters, "backup_id", "Backup ID")
            if not _BACKUP_ID_PATTERN.match(backup_id):
                raise WeaviateApiError.validation(
                    "Backup ID may only contain lowercase letters, digits, '-' and '_'", {"backup_id": ["invalid"]}
                )
            creds = self.runtime.credentials

            # ---- create_backup ----
            if operation == "create_backup":
                request = {"id": backup_id, **_class_selection(tool_parameters)}
                status = run_with_client(creds, lambda client: client.create_backup(backend, request))
                message = f"Backup '{backup_id}' started"

            # ---- get_backup_status ----
            elif operation == "get_backup_status":
                status = run_with_client(creds, lambda client: client.get_backup_status(backend, backup_id))
                message = f"Backup '{backup_id}' is {(status or {}).get('status', 'UNKNOWN')}"

            # ---- restore_backup ----
            elif operation == "restore_backup":
                request = _class_selection(tool_parameters) or None
                status = run_with_client(creds, lambda client: client.restore_backup(backend, backup_id, request))
                message = f"Restore of '{backup_id}' started"

            # ---- get_restore_status ----
            elif operation == "get_restore_status":
                status = run_with_client(creds, lambda client: client.get_restore_status(backend, backup_id))
                message = f"Restore of '{backup_id}' is {(status or {}).get('status', 'UNKNOWN')}"

            # ---- cancel_backup ----
            else:
                run_with_client(creds, lambda client: client.cancel_backup(backend, backup_id))
                status = {"id": backup_id, "backend": backend, "status": "CANCELED"}
                message = f"Backup '{backup_id}' cancelled"

            yield to_message(self, format_response(status, response_format, "backup", message=message))

        except WeaviateApiError as e:
            logger.warning(f"Backup operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Backup management error")
            yield self.create_json_message(format_error(e))

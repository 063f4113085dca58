"""
Tenant Management Tool for Weaviate Plugin

This module provides a tenant management tool for multi-tenant Weaviate classes. It
lists, creates, updates, activates, deactivates and deletes tenants, and checks
whether a tenant exists.

Multi-tenancy keeps each tenant's objects in a separate shard of the same class.
Tenants can be moved between activity states (HOT/ACTIVE, COLD/INACTIVE, and on
update FROZEN/OFFLOADED) to control which shards are loaded.

Classes:
    TenantManagementTool: Main tool class for tenant management operations
"""

from collections.abc import Generator
from typing import Any, List, Mapping, Optional
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
    require_class_name,
    require_str,
    run_with_client,
)
from utils.validators import TENANT_CREATE_STATUSES, TENANT_UPDATE_STATUSES, validate_tenant_status

logger = logging.getLogger(__name__)

# Allowed operations for tenant management
_ALLOWED_OPS = {
    "list_tenants",
    "create_tenants",
    "update_tenants",
    "activate_tenants",
    "deactivate_tenants",
    "delete_tenants",
    "tenant_exists",
}

# Status set by the activate/deactivate shortcuts
_SHORTCUT_STATUS = {"activate_tenants": "ACTIVE", "deactivate_tenants": "INACTIVE"}


def _tenant_names(tool_parameters: Mapping[str, Any]) -> List[str]:
    names = csv_or_list_to_list(tool_parameters.get("tenants"))
    if not names:
        raise WeaviateApiError.validation("At least one tenant name is required", {"tenants": ["required"]})
    return names


def _activity_status(tool_parameters: Mapping[str, Any], for_update: bool) -> Optional[str]:
    status = get_str(tool_parameters, "activity_status").upper() or None
    if status is None:
        if for_update:
            raise WeaviateApiError.validation(
                "activity_status is required for update_tenants", {"activity_status": ["required"]}
            )
        return None
    if not validate_tenant_status(status, for_update=for_update):
        allowed = TENANT_UPDATE_STATUSES if for_update else TENANT_CREATE_STATUSES
        raise WeaviateApiError.validation(
            f"Invalid activity_status '{status}'. Allowed: {sorted(allowed)}", {"activity_status": ["invalid"]}
        )
    return status


class TenantManagementTool(Tool):
    """
    A tenant management tool for multi-tenant Weaviate classes.

    Attributes:
        runtime: Runtime context containing credentials and configuration
    """

    def _invoke(self, tool_parameters: dict[str, Any]) -> Generator[ToolInvokeMessage]:
        """
        Execute tenant management operations based on provided parameters.

        Parameters:
            tool_parameters (dict[str, Any]): Dictionary containing operation parameters
                - operation (str): list_tenants, create_tenants, update_tenants,
                  activate_tenants, deactivate_tenants, delete_tenants or tenant_exists
                - collection_name (str): Multi-tenant class (required)
                - tenants (str): Comma-separated tenant names
                  (create/update/activate/deactivate/delete)
                - tenant_name (str): Tenant to look up (tenant_exists)
                - activity_status (str): Status for created tenants (optional) or the
                  new status for updated tenants (required)
                - response_format (str): ``json`` (default) or ``markdown``

        Yields:
            ToolInvokeMessage: Operation results or error information
        """
        try:
            operation = get_operation(tool_parameters, _ALLOWED_OPS)
            response_format = get_response_format(tool_parameters)
            class_name = require_class_name(tool_parameters)
            creds = self.runtime.credentials

            # ---- list_tenants ----
            if operation == "list_tenants":
                tenants = run_with_client(creds, lambda client: client.get_tenants(class_name))
                yield to_message(self, format_response(
                    tenants, response_format, "tenants", message=f"Found {len(tenants)} tenants in '{class_name}'"
                ))
                return

            # ---- tenant_exists ----
            if operation == "tenant_exists":
                tenant_name = require_str(tool_parameters, "tenant_name", "Tenant name")
                exists = run_with_client(creds, lambda client: client.tenant_exists(class_name, tenant_name))
                yield to_message(self, format_response(
                    {"class": class_name, "tenant": tenant_name, "exists": exists},
                    response_format,
                    "tenant",
                    message="Tenant exists" if exists else "Tenant not found",
                ))
                return

            names = _tenant_names(tool_parameters)

            # ---- create_tenants ----
            if operation == "create_tenants":
                status = _activity_status(tool_parameters, for_update=False)
                tenants = [{"name": n, **({"activityStatus": status} if status else {})} for n in names]
                created = run_with_client(creds, lambda client: client.create_tenants(class_name, tenants))
                yield to_message(self, format_response(
                    created or tenants,
                    response_format,
                    "tenants",
                    message=f"Created {len(names)} tenants in '{class_name}'",
                ))
                return

            # ---- update_tenants ----
            if operation == "update_tenants":
                status = _activity_status(tool_parameters, for_update=True)
                tenants = [{"name": n, "activityStatus": status} for n in names]
                run_with_client(creds, lambda client: client.update_tenants(class_name, tenants))
                yield to_message(self, format_response(
                    tenants,
                    response_format,
                    "tenants",
                    message=f"Set {len(names)} tenants to {status}",
                ))
                return

            # ---- activate_tenants / deactivate_tenants ----
            if operation in _SHORTCUT_STATUS:
                status = _SHORTCUT_STATUS[operation]
                tenants = [{"name": n, "activityStatus": status} for n in names]
                run_with_client(creds, lambda client: client.update_tenants(class_name, tenants))
                verb = "Activated" if status == "ACTIVE" else "Deactivated"
                yield to_message(self, format_response(
                    tenants,
                    response_format,
                    "tenants",
                    message=f"{verb} {len(names)} tenants in '{class_name}'",
                ))
                return

            # ---- delete_tenants ----
            run_with_client(creds, lambda client: client.delete_tenants(class_name, names))
            yield to_message(self, format_response(
                {"class": class_name, "deleted": names},
                response_format,
                "tenants",
                message=f"Deleted {len(names)} tenants from '{class_name}'",
            ))

        except WeaviateApiError as e:
            logger.warning(f"Tenant operation failed: {e.message}")
            yield self.create_json_message(format_error(e))

        except Exception as e:
            logger.exception("Tenant management error")
            yield self.create_json_message(format_error(e))

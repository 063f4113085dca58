"""
Validation Utilities Module for Weaviate Plugin

This module provides validation functions for the parameters accepted by the Weaviate
tools: URLs, API keys, class and property names, object ids, vectors, filters, limits,
hybrid weighting, tenant activity statuses and response formats. Validators return
booleans so tools can report a specific error message for each failure.

Author: Weaviate Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Union
import re

from weaviate.util import get_valid_uuid

from utils.entities import FusionType
from utils.filters import WhereFilter

MAX_SEARCH_LIMIT = 100

RESPONSE_FORMATS = {"json", "markdown"}

TENANT_CREATE_STATUSES = {"HOT", "COLD", "ACTIVE", "INACTIVE"}
TENANT_UPDATE_STATUSES = TENANT_CREATE_STATUSES | {"FROZEN", "OFFLOADED"}

BACKUP_BACKENDS = {"filesystem", "s3", "gcs", "azure"}

_NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def validate_weaviate_url(url: str) -> bool:
    """
    Validate Weaviate instance URL format.

    Args:
        url (str): URL string to validate

    Returns:
        bool: True if URL format is valid, False otherwise
    """
    pattern = r'^https?://[a-zA-Z0-9.-]+(:\d+)?(/.*)?$'
    return bool(url and re.match(pattern, url))


def validate_api_key(api_key: str) -> bool:
    return bool(api_key and api_key.strip())


def validate_collection_name(name: str) -> bool:
    """
    Validate a Weaviate class name: letters, digits and underscores, not starting
    with a digit.
    """
    return bool(name and _NAME_PATTERN.match(name))


def validate_property_definition(prop: Dict[str, Any]) -> bool:
    """
    Validate a property definition for ``add_property`` / ``create_class``.

    Args:
        prop (Dict[str, Any]): Property with ``name`` and a non-empty ``dataType`` list

    Returns:
        bool: True if the definition is well formed
    """
    if not isinstance(prop, dict):
        return False
    name, data_type = prop.get("name"), prop.get("dataType")
    if not (isinstance(name, str) and _NAME_PATTERN.match(name)):
        return False
    if not (isinstance(data_type, list) and data_type and all(isinstance(t, str) and t for t in data_type)):
        return False
    return True


def validate_uuid(value: str) -> bool:
    """
    Validate an object id using the Weaviate client's UUID parser.

    Args:
        value (str): Candidate UUID, with or without hyphens

    Returns:
        bool: True if ``value`` is a valid UUID
    """
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        get_valid_uuid(value.strip())
        return True
    except (TypeError, ValueError):
        return False


def validate_vector(vector: List[Union[int, float]], expected_dim: int = None) -> bool:
    """
    Validate vector data format and dimensions.

    Args:
        vector (List[Union[int, float]]): Vector data to validate
        expected_dim (int, optional): Expected dimension count for validation

    Returns:
        bool: True if vector format is valid, False otherwise
    """
    if not isinstance(vector, list) or not vector:
        return False
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in vector):
        return False
    if expected_dim and len(vector) != expected_dim:
        return False
    return True


def validate_where_filter(where_filter: Dict[str, Any]) -> bool:
    """
    Validate a where filter in Weaviate's JSON shape, including every nested operand.
    """
    try:
        WhereFilter.from_dict(where_filter)
        return True
    except ValueError:
        return False


def validate_limit(limit: Union[int, str], max_limit: int = MAX_SEARCH_LIMIT) -> bool:
    """
    Validate limit parameter for searches and listings.

    Args:
        limit (Union[int, str]): Limit value to validate
        max_limit (int): Maximum allowed limit value

    Returns:
        bool: True if limit is valid, False otherwise
    """
    try:
        val = int(limit)
        return 1 <= val <= max_limit
    except (TypeError, ValueError):
        return False


def validate_alpha(alpha: Union[float, int, str]) -> bool:
    """
    Validate the hybrid search weighting, which must lie in [0.0, 1.0].
    """
    try:
        val = float(alpha)
        return 0.0 <= val <= 1.0
    except (TypeError, ValueError):
        return False


def validate_fusion_type(fusion_type: str) -> bool:
    return fusion_type in {f.value for f in FusionType}


def validate_tenant_status(status: str, for_update: bool = False) -> bool:
    """
    Validate a tenant activity status.

    Updates accept ``FROZEN`` and ``OFFLOADED`` in addition to the statuses allowed
    on creation.
    """
    allowed = TENANT_UPDATE_STATUSES if for_update else TENANT_CREATE_STATUSES
    return isinstance(status, str) and status.upper() in allowed


def validate_response_format(response_format: str) -> bool:
    return response_format in RESPONSE_FORMATS


def validate_backup_backend(backend: str) -> bool:
    return backend in BACKUP_BACKENDS

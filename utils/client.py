"""
Weaviate Client Utility Module

This module provides an asynchronous client for Weaviate's REST and GraphQL API.
It covers schema, object, batch, reference, search, tenant, backup, cluster and
classification operations, turning HTTP status codes into classified
``WeaviateApiError`` failures and building GraphQL documents for the search variants.

A client is bound to the credentials of a single tool invocation and is not shared
between invocations.

Author: Weaviate Team
Version: 1.0.0
"""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from utils.credentials import Credentials
from utils.entities import (
    Bm25Params,
    HybridParams,
    NearObjectParams,
    NearTextParams,
    NearVectorParams,
    QueryOptions,
)
from utils.errors import DEFAULT_RETRY_AFTER_SECONDS, WeaviateApiError
from utils.graphql import (
    bm25_clause,
    build_get_query,
    hybrid_clause,
    near_object_clause,
    near_text_clause,
    near_vector_clause,
)
from utils.pagination import PaginatedResponse, create_paginated_response, normalize_pagination_params

logger = logging.getLogger(__name__)

API_VERSION_PREFIX = "/v1"
DEFAULT_TIMEOUT = 60


def _seg(value: Any) -> str:
    """Percent-encode a single path segment."""
    return quote(str(value), safe="")


def _params(**kwargs: Any) -> Dict[str, str]:
    """Drop unset query parameters and stringify the rest."""
    out: Dict[str, str] = {}
    for key, value in kwargs.items():
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        out[key] = str(value)
    return out


def _parse_retry_after(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(0, int(float(value.strip())))
    except (ValueError, OverflowError):
        return DEFAULT_RETRY_AFTER_SECONDS


def _extract_error_message(body: str, status_code: int) -> str:
    """
    Pull a readable message out of an error response body.

    Weaviate reports errors as ``{"error": [{"message": ...}]}``; other gateways use
    ``{"error": {"message": ...}}``, ``{"message": ...}`` or ``{"error": "..."}``. Falls
    back to the raw body, then to a message naming the status code.
    """
    fallback = f"Weaviate API error: {status_code}"
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body or fallback

    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, list) and err and isinstance(err[0], dict) and err[0].get("message"):
            return str(err[0]["message"])
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if data.get("message"):
            return str(data["message"])
        if isinstance(err, str) and err:
            return err
    return fallback


class WeaviateClient:
    """
    Asynchronous client for one Weaviate instance and one set of credentials.

    The underlying ``httpx.AsyncClient`` is created on first use and released by
    ``aclose()``; the client can also be used as an ``async with`` context manager.

    Attributes:
        credentials (Credentials): Connection parameters for this invocation
        base_url (str): Instance URL without trailing slash ("" when not configured)
        timeout (int): Request timeout in seconds
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: int = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Weaviate client.

        Args:
            credentials (Credentials): Instance URL plus Weaviate and provider API keys
            timeout (int): Request timeout in seconds. Defaults to 60.
            transport (Optional[httpx.AsyncBaseTransport]): Custom transport, used by tests
        """
        self.credentials = credentials
        self.base_url = (credentials.weaviate_url or "").strip().rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "WeaviateClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _http(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http_client

    async def aclose(self) -> None:
        """
        Release the HTTP connection pool. Safe to call more than once.
        """
        try:
            if self._http_client is not None:
                await self._http_client.aclose()
        except Exception:
            logger.debug("HTTP client close failed quietly", exc_info=True)
        finally:
            self._http_client = None

    # ---------- HTTP pipeline ----------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_VERSION_PREFIX}{path}"

    async def _request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue one authenticated request and classify the response.

        Status codes are checked in order: 429 (rate limit), 401/403 (authentication),
        404 (not found), any other non-2xx (generic API error), then 204 or an empty
        body (no data), otherwise the JSON-decoded body is returned.

        Args:
            path (str): Path below ``/v1``, already percent-encoded
            method (str): HTTP method
            body (Any): JSON-serializable request body
            params (Optional[Dict[str, str]]): Query parameters
            headers (Optional[Dict[str, str]]): Extra headers, overriding the auth headers

        Returns:
            Any: Decoded JSON payload, or None for empty responses

        Raises:
            WeaviateApiError: For missing configuration and non-2xx responses
            httpx.TransportError: When the request cannot be delivered
        """
        if not self.base_url:
            raise WeaviateApiError.authentication(
                "No Weaviate URL provided. Configure the Weaviate URL credential."
            )

        merged = {**self.credentials.auth_headers(), **(headers or {})}
        content = json.dumps(body) if body is not None else None

        response = await self._http().request(
            method,
            self._url(path),
            params=params or None,
            headers=merged,
            content=content,
        )
        status = response.status_code
        logger.debug(f"{method} {path} -> {status}")

        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(f"Rate limited on {method} {path}; retry after {retry_after}s")
            raise WeaviateApiError.rate_limit("Rate limit exceeded", retry_after)

        if status in (401, 403):
            logger.warning(f"Authentication rejected on {method} {path} ({status})")
            raise WeaviateApiError.authentication("Authentication failed. Check your Weaviate API key.")

        if status == 404:
            raise WeaviateApiError.not_found("Resource", path)

        if not response.is_success:
            message = _extract_error_message(response.text, status)
            logger.warning(f"Weaviate error on {method} {path} ({status}): {message}")
            raise WeaviateApiError.api(message, status)

        if status == 204:
            return None

        text = response.text
        if not text:
            return None
        return json.loads(text)

    # ---------- Connection / Health ----------

    async def test_connection(self) -> Dict[str, Any]:
        """
        Check that the instance answers with the configured credentials.

        Returns:
            Dict[str, Any]: ``connected`` flag and a human-readable ``message``
        """
        try:
            meta = await self.get_meta() or {}
            return {
                "connected": True,
                "message": f"Connected to Weaviate {meta.get('version')} at {meta.get('hostname')}",
            }
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return {"connected": False, "message": str(e) or "Connection failed"}

    async def get_meta(self) -> Dict[str, Any]:
        return await self._request("/meta")

    async def is_live(self) -> Dict[str, str]:
        """Liveness check; any failure is reported as ``{"status": "error"}``."""
        try:
            await self._request("/.well-known/live")
            return {"status": "ok"}
        except Exception as e:
            logger.debug(f"Liveness check failed: {e}")
            return {"status": "error"}

    async def is_ready(self) -> Dict[str, str]:
        """Readiness check; any failure is reported as ``{"status": "error"}``."""
        try:
            await self._request("/.well-known/ready")
            return {"status": "ok"}
        except Exception as e:
            logger.debug(f"Readiness check failed: {e}")
            return {"status": "error"}

    # ---------- Collections / Schema ----------

    async def get_schema(self) -> Dict[str, Any]:
        return await self._request("/schema")

    async def get_class(self, class_name: str) -> Dict[str, Any]:
        return await self._request(f"/schema/{_seg(class_name)}")

    async def create_class(self, class_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a collection.

        Args:
            class_config (Dict[str, Any]): Class definition (``class``, ``properties``,
                ``vectorizer``, ``multiTenancyConfig``, ...)

        Returns:
            Dict[str, Any]: The class definition as stored by Weaviate
        """
        return await self._request("/schema", method="POST", body=class_config)

    async def update_class(self, class_name: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(f"/schema/{_seg(class_name)}", method="PUT", body=updates)

    async def delete_class(self, class_name: str) -> None:
        await self._request(f"/schema/{_seg(class_name)}", method="DELETE")

    async def add_property(self, class_name: str, prop: Dict[str, Any]) -> None:
        """
        Add a property to an existing collection.

        Args:
            class_name (str): Collection to extend
            prop (Dict[str, Any]): Property definition with ``name``, ``dataType`` and
                optional ``description``
        """
        await self._request(f"/schema/{_seg(class_name)}/properties", method="POST", body=prop)

    # ---------- Data Objects ----------

    async def list_objects(
        self,
        class_name: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        include: Optional[List[str]] = None,
        tenant: Optional[str] = None,
    ) -> PaginatedResponse:
        """
        List one page of objects from a collection.

        Weaviate does not always report a total, so ``has_more`` is true whenever the
        page came back full; the next cursor is then the following offset as a string.

        Args:
            class_name (str): Collection to list
            limit (Optional[int]): Page size (default 20, capped at 100)
            offset (Optional[int]): Number of objects to skip
            include (Optional[List[str]]): Additional fields such as ``vector``
            tenant (Optional[str]): Tenant of a multi-tenant collection

        Returns:
            PaginatedResponse: Objects on the page plus continuation info
        """
        page = normalize_pagination_params(limit=limit, offset=offset)
        limit = page["limit"]
        offset = page["offset"] or 0

        response = await self._request(
            "/objects",
            params=_params(
                **{"class": class_name},
                limit=limit,
                offset=offset or None,
                include=include,
                tenant=tenant,
            ),
        ) or {}
        objects = response.get("objects") or []

        has_more = len(objects) == limit
        return create_paginated_response(
            objects,
            total=response.get("totalResults"),
            has_more=has_more,
            next_cursor=str(offset + limit) if has_more else None,
        )

    async def get_object(
        self,
        class_name: str,
        uuid: str,
        include: Optional[List[str]] = None,
        tenant: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            f"/objects/{_seg(class_name)}/{_seg(uuid)}",
            params=_params(include=include, tenant=tenant),
        )

    async def create_object(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a single object.

        Args:
            obj (Dict[str, Any]): Object with ``class``, ``properties`` and optional
                ``id``, ``vector`` and ``tenant``

        Returns:
            Dict[str, Any]: The stored object including its id
        """
        return await self._request("/objects", method="POST", body=obj)

    async def update_object(
        self,
        class_name: str,
        uuid: str,
        properties: Dict[str, Any],
        vector: Optional[List[float]] = None,
        tenant: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Replace an object's properties (and optionally its vector).

        Returns:
            Dict[str, Any]: The replaced object
        """
        body: Dict[str, Any] = {"class": class_name, "properties": properties}
        if vector:
            body["vector"] = vector
        return await self._request(
            f"/objects/{_seg(class_name)}/{_seg(uuid)}",
            method="PUT",
            body=body,
            params=_params(tenant=tenant),
        )

    async def patch_object(
        self,
        class_name: str,
        uuid: str,
        properties: Dict[str, Any],
        tenant: Optional[str] = None,
    ) -> None:
        """Merge ``properties`` into an existing object."""
        await self._request(
            f"/objects/{_seg(class_name)}/{_seg(uuid)}",
            method="PATCH",
            body={"class": class_name, "properties": properties},
            params=_params(tenant=tenant),
        )

    async def delete_object(self, class_name: str, uuid: str, tenant: Optional[str] = None) -> None:
        await self._request(
            f"/objects/{_seg(class_name)}/{_seg(uuid)}",
            method="DELETE",
            params=_params(tenant=tenant),
        )

    async def object_exists(self, class_name: str, uuid: str, tenant: Optional[str] = None) -> bool:
        """
        Check whether an object exists with a HEAD request.

        Only HTTP 200 and 204 count as existing. Every other outcome, including a
        transport failure or a missing URL, is reported as False, so an unreachable
        instance looks the same as a missing object.

        Args:
            class_name (str): Collection of the object
            uuid (str): Object id
            tenant (Optional[str]): Tenant of a multi-tenant collection

        Returns:
            bool: True if the object exists
        """
        if not self.base_url:
            return False
        try:
            response = await self._http().head(
                self._url(f"/objects/{_seg(class_name)}/{_seg(uuid)}"),
                params=_params(tenant=tenant) or None,
                headers=self.credentials.auth_headers(),
            )
            return response.status_code in (200, 204)
        except Exception as e:
            logger.debug(f"Existence check for {class_name}/{uuid} failed: {e}")
            return False

    # ---------- Batch ----------

    async def batch_create_objects(self, objects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Create many objects in one request.

        Weaviate decides success per object; inspect each entry's ``result.errors``.

        Args:
            objects (List[Dict[str, Any]]): Objects in the same shape as ``create_object``

        Returns:
            List[Dict[str, Any]]: One result per submitted object
        """
        return await self._request("/batch/objects", method="POST", body={"objects": objects})

    async def batch_delete_objects(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Delete every object matching a filter.

        Args:
            request (Dict[str, Any]): ``{"match": {"class": ..., "where": ...}}`` plus optional
                ``output`` ("minimal" or "verbose") and ``dryRun``

        Returns:
            Dict[str, Any]: Match, success and failure counts
        """
        return await self._request("/batch/objects", method="DELETE", body=request)

    async def batch_add_references(self, references: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        return await self._request("/batch/references", method="POST", body=references)

    # ---------- References ----------

    def _reference_path(self, class_name: str, uuid: str, property_name: str) -> str:
        return f"/objects/{_seg(class_name)}/{_seg(uuid)}/references/{_seg(property_name)}"

    async def add_reference(
        self,
        class_name: str,
        uuid: str,
        property_name: str,
        reference: Dict[str, str],
        tenant: Optional[str] = None,
    ) -> None:
        await self._request(
            self._reference_path(class_name, uuid, property_name),
            method="POST",
            body=reference,
            params=_params(tenant=tenant),
        )

    async def update_references(
        self,
        class_name: str,
        uuid: str,
        property_name: str,
        references: List[Dict[str, str]],
        tenant: Optional[str] = None,
    ) -> None:
        """Replace every reference held by ``property_name``."""
        await self._request(
            self._reference_path(class_name, uuid, property_name),
            method="PUT",
            body=references,
            params=_params(tenant=tenant),
        )

    async def delete_reference(
        self,
        class_name: str,
        uuid: str,
        property_name: str,
        reference: Dict[str, str],
        tenant: Optional[str] = None,
    ) -> None:
        await self._request(
            self._reference_path(class_name, uuid, property_name),
            method="DELETE",
            body=reference,
            params=_params(tenant=tenant),
        )

    # ---------- Queries ----------

    async def graphql_query(self, query: str) -> Dict[str, Any]:
        """
        Run a GraphQL document against ``/v1/graphql``.

        GraphQL-level errors come back inside the response's ``errors`` array and are
        returned as-is.
        """
        return await self._request("/graphql", method="POST", body={"query": query})

    async def near_vector(
        self, class_name: str, params: NearVectorParams, options: Optional[QueryOptions] = None
    ) -> Dict[str, Any]:
        return await self.graphql_query(build_get_query(class_name, near_vector_clause(params), options))

    async def near_text(
        self, class_name: str, params: NearTextParams, options: Optional[QueryOptions] = None
    ) -> Dict[str, Any]:
        """
        Semantic search by text concepts. Requires a text vectorizer on the collection.
        """
        return await self.graphql_query(build_get_query(class_name, near_text_clause(params), options))

    async def near_object(
        self, class_name: str, params: NearObjectParams, options: Optional[QueryOptions] = None
    ) -> Dict[str, Any]:
        return await self.graphql_query(build_get_query(class_name, near_object_clause(params), options))

    async def hybrid_search(
        self, class_name: str, params: HybridParams, options: Optional[QueryOptions] = None
    ) -> Dict[str, Any]:
        """
        Hybrid search combining BM25 and vector similarity.

        ``alpha`` balances the two (0.0 = keyword only, 1.0 = vector only).
        """
        return await self.graphql_query(build_get_query(class_name, hybrid_clause(params), options))

    async def bm25_search(
        self, class_name: str, params: Bm25Params, options: Optional[QueryOptions] = None
    ) -> Dict[str, Any]:
        return await self.graphql_query(build_get_query(class_name, bm25_clause(params), options))

    # ---------- Tenants ----------

    async def get_tenants(self, class_name: str) -> List[Dict[str, Any]]:
        return await self._request(f"/schema/{_seg(class_name)}/tenants") or []

    async def create_tenants(self, class_name: str, tenants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Create tenants in a multi-tenant collection.

        Args:
            class_name (str): Collection with multi-tenancy enabled
            tenants (List[Dict[str, Any]]): ``{"name": ..., "activityStatus": ...}`` entries

        Returns:
            List[Dict[str, Any]]: The created tenants
        """
        return await self._request(f"/schema/{_seg(class_name)}/tenants", method="POST", body=tenants) or []

    async def update_tenants(self, class_name: str, tenants: List[Dict[str, Any]]) -> None:
        await self._request(f"/schema/{_seg(class_name)}/tenants", method="PUT", body=tenants)

    async def delete_tenants(self, class_name: str, tenant_names: List[str]) -> None:
        await self._request(f"/schema/{_seg(class_name)}/tenants", method="DELETE", body=tenant_names)

    async def tenant_exists(self, class_name: str, tenant_name: str) -> bool:
        """
        Check for a tenant by listing the collection's tenants and scanning them.

        Any failure (missing collection, auth, network) is reported as False.
        """
        try:
            tenants = await self.get_tenants(class_name)
        except Exception as e:
            logger.debug(f"Tenant lookup for {class_name} failed: {e}")
            return False
        return any(t.get("name") == tenant_name for t in tenants)

    # ---------- Backups ----------

    def _backup_path(self, backend: str, backup_id: Optional[str] = None) -> str:
        path = f"/backups/{_seg(backend)}"
        if backup_id is not None:
            path += f"/{_seg(backup_id)}"
        return path

    async def create_backup(self, backend: str, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Start a backup on a storage backend (``filesystem``, ``s3``, ``gcs``, ``azure``).

        Args:
            backend (str): Backup backend name
            request (Dict[str, Any]): ``id`` plus optional ``include``/``exclude`` class lists

        Returns:
            Dict[str, Any]: Backup status
        """
        return await self._request(self._backup_path(backend), method="POST", body=request)

    async def get_backup_status(self, backend: str, backup_id: str) -> Dict[str, Any]:
        return await self._request(self._backup_path(backend, backup_id))

    async def restore_backup(
        self, backend: str, backup_id: str, request: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request(
            f"{self._backup_path(backend, backup_id)}/restore", method="POST", body=request
        )

    async def get_restore_status(self, backend: str, backup_id: str) -> Dict[str, Any]:
        return await self._request(f"{self._backup_path(backend, backup_id)}/restore")

    async def cancel_backup(self, backend: str, backup_id: str) -> None:
        await self._request(self._backup_path(backend, backup_id), method="DELETE")

    # ---------- Nodes / Cluster ----------

    async def get_nodes(self, output: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List cluster nodes.

        Args:
            output (Optional[str]): ``minimal`` or ``verbose`` (verbose adds shard details)

        Returns:
            List[Dict[str, Any]]: Node status entries
        """
        response = await self._request("/nodes", params=_params(output=output)) or {}
        return response.get("nodes") or []

    async def get_cluster_statistics(self) -> Dict[str, Any]:
        return await self._request("/cluster/statistics")

    # ---------- Classification ----------

    async def create_classification(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("/classifications", method="POST", body=request)

    async def get_classification(self, classification_id: str) -> Dict[str, Any]:
        return await self._request(f"/classifications/{_seg(classification_id)}")

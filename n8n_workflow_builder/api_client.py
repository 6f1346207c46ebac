"""
Async client for the n8n REST API.

Wraps the public API (``/api/v1``) endpoints for workflows and executions,
plus the node-types listing used to build the node registry.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from n8n_workflow_builder.config import DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
NODE_TYPES_PATH = "/node-types"


class N8nApiError(Exception):
    """Raised when the n8n API is unreachable or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class N8nApiClient:
    """Thin request/response proxy to an n8n instance."""

    def __init__(self, base_url: str, api_key: str = "",
                 timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 transport: httpx.AsyncBaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        h = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._api_key:
            h["X-N8N-API-KEY"] = self._api_key
        return h

    async def _request(self, method: str, path: str, *,
                       params: dict[str, Any] | None = None,
                       json: Any = None) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug(f"{method} {url} params={params}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method, url, headers=self._headers(), params=params, json=json,
                )
        except httpx.HTTPError as e:
            raise N8nApiError(f"Network error: {e}") from e

        if response.is_error:
            raise N8nApiError(
                f"n8n API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise N8nApiError(f"Invalid JSON from n8n API: {e}") from e

    async def _api(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        return await self._request(method, f"{API_PREFIX}{endpoint}", **kwargs)

    # ── Workflows ───────────────────────────────────────────────────────

    async def list_workflows(self, active: bool | None = None, tags: str | None = None,
                             name: str | None = None) -> list[dict]:
        params: dict[str, Any] = {}
        if active is not None:
            params["active"] = str(active).lower()
        if tags:
            params["tags"] = tags
        if name:
            params["name"] = name
        response = await self._api("GET", "/workflows", params=params or None)
        return _unwrap_data(response)

    async def create_workflow(self, workflow: dict, activate: bool = False) -> dict:
        """Create a workflow, optionally activating it straight away."""
        created = await self._api("POST", "/workflows", json=workflow)
        if activate and created.get("id"):
            await self.activate_workflow(created["id"])
            created["active"] = True
        return created

    async def get_workflow(self, workflow_id: str) -> dict:
        return await self._api("GET", f"/workflows/{workflow_id}")

    async def update_workflow(self, workflow_id: str, workflow: dict) -> dict:
        return await self._api("PUT", f"/workflows/{workflow_id}", json=workflow)

    async def delete_workflow(self, workflow_id: str) -> dict:
        return await self._api("DELETE", f"/workflows/{workflow_id}")

    async def activate_workflow(self, workflow_id: str) -> dict:
        return await self._api("POST", f"/workflows/{workflow_id}/activate")

    async def deactivate_workflow(self, workflow_id: str) -> dict:
        return await self._api("POST", f"/workflows/{workflow_id}/deactivate")

    # ── Executions ──────────────────────────────────────────────────────

    async def list_executions(self, workflow_id: str | None = None, status: str | None = None,
                              limit: int | None = None) -> list[dict]:
        params: dict[str, Any] = {}
        if workflow_id:
            params["workflowId"] = workflow_id
        if status:
            params["status"] = status
        if limit:
            params["limit"] = limit
        response = await self._api("GET", "/executions", params=params or None)
        return _unwrap_data(response)

    async def get_execution(self, execution_id: str, include_data: bool | None = None) -> dict:
        params = None
        if include_data is not None:
            params = {"includeData": str(include_data).lower()}
        return await self._api("GET", f"/executions/{execution_id}", params=params)

    async def delete_execution(self, execution_id: str) -> dict:
        return await self._api("DELETE", f"/executions/{execution_id}")

    # ── Node types ──────────────────────────────────────────────────────

    async def list_node_types(self) -> Any:
        """Raw node-types payload, expected as ``{"data": [...]}``."""
        return await self._request("GET", NODE_TYPES_PATH)


def _unwrap_data(response: Any) -> Any:
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response

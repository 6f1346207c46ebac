"""
Node catalog sources.

Provides a uniform interface for loading the list of node types
from either a live n8n instance or a local JSON export.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from n8n_workflow_builder.api_client import N8nApiClient


class NodeCatalogSource(ABC):
    """Abstract interface for loading raw node catalog entries."""

    @abstractmethod
    async def fetch_nodes(self) -> list[dict]:
        """Return raw catalog entries. Raises on network or format errors."""


class ApiNodeCatalogSource(NodeCatalogSource):
    """Loads node types from the n8n instance the client points at."""

    def __init__(self, client: N8nApiClient):
        self._client = client

    async def fetch_nodes(self) -> list[dict]:
        return parse_catalog_payload(await self._client.list_node_types())


class FileNodeCatalogSource(NodeCatalogSource):
    """Reads node types from a JSON file shaped like the API payload."""

    def __init__(self, path: str):
        self._path = Path(path)

    async def fetch_nodes(self) -> list[dict]:
        if not self._path.exists():
            raise FileNotFoundError(f"Node catalog not found: {self._path}")
        with open(self._path, encoding="utf-8") as f:
            return parse_catalog_payload(json.load(f))


def parse_catalog_payload(payload: Any) -> list[dict]:
    """Extract the entry list from ``{"data": [...]}``. Raises ValueError otherwise."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ValueError("Node catalog payload must be an object with a 'data' list")
    return [entry for entry in payload["data"] if isinstance(entry, dict)]

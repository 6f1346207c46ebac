"""
Node type validation against the node registry of an n8n instance.

The registry is loaded from a catalog source on first use and refreshed
once it is older than the cache duration. Concurrent callers share a
single in-flight load. Load failures never reach callers: previously
loaded data is kept, and when there is none the built-in fallback node
list is used instead.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from n8n_workflow_builder.catalog import NodeCatalogSource
from n8n_workflow_builder.domain.node_types import (
    FALLBACK_NODES,
    NodeDescriptor,
    find_closest,
)

logger = logging.getLogger(__name__)

CACHE_DURATION = 60 * 60


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"valid": self.valid}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass(frozen=True)
class InvalidNode:
    """A node type that failed validation, with the closest known type if any."""

    node_type: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"node_type": self.node_type}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


class NodeValidator:
    """Cached registry of the node types available on an n8n instance."""

    def __init__(self, source: NodeCatalogSource,
                 cache_duration: float = CACHE_DURATION,
                 clock: Callable[[], float] = time.monotonic,
                 fallback_nodes: Iterable[NodeDescriptor] = FALLBACK_NODES):
        self._source = source
        self._cache_duration = cache_duration
        self._clock = clock
        self._fallback_nodes = tuple(fallback_nodes)
        self._registry: dict[str, NodeDescriptor] = {}
        self._last_fetch_time: float | None = None
        self._is_fetching = False
        self._fetch_task: asyncio.Task | None = None

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    @property
    def last_fetch_time(self) -> float | None:
        return self._last_fetch_time

    # ── Public API ──────────────────────────────────────────────────────

    async def validate(self, node_type: str) -> ValidationResult:
        """Check a node type, suggesting the closest known type when it is unknown."""
        await self._ensure_loaded()
        return self._check(node_type)

    async def validate_many(self, node_types: Iterable[str]) -> list[InvalidNode]:
        """Validate each type in order and return only the invalid ones."""
        await self._ensure_loaded()
        invalid = []
        for node_type in node_types:
            result = self._check(node_type)
            if not result.valid:
                invalid.append(InvalidNode(node_type=node_type, suggestion=result.suggestion))
        return invalid

    async def validate_workflow_nodes(self, nodes: Iterable[Mapping[str, Any]]) -> list[InvalidNode]:
        return await self.validate_many(node.get("type") for node in nodes)

    async def list_types(self) -> list[str]:
        await self._ensure_loaded()
        return list(self._registry)

    async def list_descriptors(self) -> list[NodeDescriptor]:
        await self._ensure_loaded()
        return list(self._registry.values())

    def _check(self, node_type: str) -> ValidationResult:
        registry = self._registry
        if not isinstance(node_type, str):
            return ValidationResult(valid=False)
        if node_type in registry:
            return ValidationResult(valid=True)
        return ValidationResult(valid=False, suggestion=find_closest(node_type, registry))

    # ── Refresh ─────────────────────────────────────────────────────────

    def _is_fresh(self) -> bool:
        if not self._registry or self._last_fetch_time is None:
            return False
        return self._clock() - self._last_fetch_time < self._cache_duration

    async def _ensure_loaded(self) -> None:
        # No await between the checks and starting the task, so only one
        # load can ever be in flight.
        task = self._fetch_task
        if task is None:
            if self._is_fresh():
                return
            self._is_fetching = True
            task = self._fetch_task = asyncio.ensure_future(self._load())
        await asyncio.shield(task)

    async def _load(self) -> None:
        try:
            await self._fetch_registry()
        finally:
            self._is_fetching = False
            self._fetch_task = None

    async def _fetch_registry(self) -> None:
        try:
            registry = self._build_registry(await self._source.fetch_nodes())
        except Exception:
            logger.exception("Error fetching node registry")
            if not self._registry:
                self._use_fallback_nodes()
                self._last_fetch_time = self._clock()
            return

        self._registry = registry
        self._last_fetch_time = self._clock()
        logger.info(f"Node registry loaded with {len(registry)} node types")

    @staticmethod
    def _build_registry(entries: Iterable[Mapping[str, Any]]) -> dict[str, NodeDescriptor]:
        registry: dict[str, NodeDescriptor] = {}
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            descriptor = NodeDescriptor.from_catalog_entry(entry)
            if descriptor is not None:
                registry[descriptor.name] = descriptor
        return registry

    def _use_fallback_nodes(self) -> None:
        logger.warning("Using fallback node list. This may not match your n8n instance.")
        self._registry = {node.name: node for node in self._fallback_nodes}

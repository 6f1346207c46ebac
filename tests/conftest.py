"""Shared test fixtures."""

import json

import httpx
import pytest

from n8n_workflow_builder.catalog import NodeCatalogSource


# ── Sample Payloads ─────────────────────────────────────────────────────

CATALOG_ENTRIES = [
    {
        "name": "n8n-nodes-base.httpRequest",
        "displayName": "HTTP Request",
        "description": "Makes an HTTP request and returns the response data",
        "type": "n8n-nodes-base.httpRequest",
        "version": 4,
    },
    {"name": "n8n-nodes-base.merge", "displayName": "Merge", "version": 3},
    {"name": "n8n-nodes-base.scheduleTrigger", "displayName": "Schedule Trigger"},
    {"name": "@n8n/n8n-nodes-langchain.agent", "displayName": "AI Agent"},
    {"name": "n8n-nodes-base.noOp"},
]

WORKFLOW = {
    "id": "wf-1",
    "name": "Nightly Sync",
    "active": True,
    "createdAt": "2024-03-01T10:00:00.000Z",
    "updatedAt": "2024-03-02T11:30:00.000Z",
    "tags": [{"id": "t1", "name": "sync"}, {"id": "t2", "name": "nightly"}],
    "nodes": [
        {
            "id": "n1",
            "name": "Schedule",
            "type": "n8n-nodes-base.scheduleTrigger",
            "position": [0, 0],
        },
        {
            "id": "n2",
            "name": "Fetch",
            "type": "n8n-nodes-base.httpRequest",
            "position": [200, 0],
            "parameters": {"url": "https://example.com/items"},
        },
    ],
    "connections": {
        "Schedule": {"main": [[{"node": "Fetch", "type": "main", "index": 0}]]},
    },
    "settings": {},
}

EXECUTION = {
    "id": 42,
    "finished": True,
    "mode": "trigger",
    "status": "success",
    "startedAt": "2024-03-02T00:00:00.000Z",
    "stoppedAt": "2024-03-02T00:00:02.500Z",
    "workflowId": "wf-1",
    "workflowData": {"name": "Nightly Sync"},
}


# ── Fakes ───────────────────────────────────────────────────────────────


class FakeCatalogSource(NodeCatalogSource):
    """Catalog source returning canned entries, counting fetches.

    Set ``gate`` to an asyncio.Event to hold fetches until it is set.
    """

    def __init__(self, entries=None, error=None):
        self.entries = list(entries or [])
        self.error = error
        self.calls = 0
        self.gate = None

    async def fetch_nodes(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays routes.

    Routes map ``(method, path)`` to a response or a callable taking the request.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text=f"No route for {request.method} {request.url.path}")
        if callable(route):
            return route(request)
        return route

    def body(self, index: int = -1):
        return json.loads(self.requests[index].content)


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def catalog_source():
    return FakeCatalogSource(CATALOG_ENTRIES)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def transport(handler):
    return httpx.MockTransport(handler)


@pytest.fixture
def catalog_file(tmp_path):
    """Write a node catalog JSON file and return its path."""
    def _write(payload, filename: str = "node-types.json") -> str:
        path = tmp_path / filename
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return _write

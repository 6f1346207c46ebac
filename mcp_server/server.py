"""
n8n Workflow Builder MCP Server.

Exposes an n8n instance's workflows, executions and node types to LLM
clients via the Model Context Protocol. Workflows are checked against the
node types the instance actually has before they are created or updated.

Usage:
    # Against a running n8n instance
    N8N_HOST=http://localhost:5678 N8N_API_KEY=... python -m mcp_server

    # Validate node types against an exported catalog instead of the API
    python -m mcp_server --node-catalog node-types.json
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Literal

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from n8n_workflow_builder.api_client import N8nApiClient
from n8n_workflow_builder.catalog import (
    ApiNodeCatalogSource,
    FileNodeCatalogSource,
    NodeCatalogSource,
)
from n8n_workflow_builder.config import SERVER_NAME, VERBOSITY_LEVELS, Settings
from n8n_workflow_builder.domain.composition_guide import get_guide
from n8n_workflow_builder.domain.models import Workflow
from n8n_workflow_builder.node_validator import NodeValidator
from n8n_workflow_builder.output.formatter import (
    describe_invalid_nodes,
    summarize_execution,
    summarize_executions,
    summarize_nodes,
    summarize_workflow,
    summarize_workflows,
    with_details,
)

logger = logging.getLogger(__name__)

# ── Globals ─────────────────────────────────────────────────────────────


@dataclass
class ServerState:
    settings: Settings
    client: N8nApiClient
    validator: NodeValidator


_state: ServerState | None = None
mcp = FastMCP(
    SERVER_NAME,
    instructions=(
        "Build and manage n8n workflows. Check node types with list_available_nodes "
        "or validate_node_types before calling create_workflow."
    ),
)


def configure(settings: Settings, catalog_source: NodeCatalogSource | None = None,
              transport: httpx.AsyncBaseTransport | None = None) -> ServerState:
    """Build the API client and node registry the tools run against."""
    global _state
    client = N8nApiClient(
        settings.n8n_host,
        settings.n8n_api_key,
        timeout=settings.request_timeout,
        transport=transport,
    )
    if catalog_source is None:
        if settings.node_catalog_path:
            catalog_source = FileNodeCatalogSource(settings.node_catalog_path)
        else:
            catalog_source = ApiNodeCatalogSource(client)
    validator = NodeValidator(catalog_source, cache_duration=settings.node_cache_ttl)
    _state = ServerState(settings=settings, client=client, validator=validator)
    return _state


def _context() -> ServerState:
    if _state is None:
        raise RuntimeError("Server not configured")
    return _state


def _verbosity(requested: str | None) -> str:
    return requested or _context().settings.output_verbosity


async def _check_node_types(workflow: Workflow) -> None:
    invalid = await _context().validator.validate_many(workflow.node_types)
    if invalid:
        raise ToolError(describe_invalid_nodes([item.to_dict() for item in invalid]))


def _dump(data: object) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# ── Workflow tools ──────────────────────────────────────────────────────


@mcp.tool()
async def list_workflows(active: bool | None = None, tags: str | None = None,
                         name: str | None = None,
                         verbosity: Literal["concise", "full"] | None = None) -> str:
    """List workflows with their ID, name, status, creation date and tags.

    Use this to get an overview before operating on specific workflows.

    Args:
        active: Only return active (true) or inactive (false) workflows.
        tags: Comma-separated tag names to filter by.
        name: Filter by workflow name.
        verbosity: "concise" for the summary only, "full" to append the raw JSON.
    """
    workflows = await _context().client.list_workflows(active=active, tags=tags, name=name)
    if not workflows:
        return summarize_workflows(workflows)
    return with_details(summarize_workflows(workflows), workflows, _verbosity(verbosity))


@mcp.tool()
async def create_workflow(workflow: Workflow, activate: bool = False) -> str:
    """Create a workflow from nodes and connections.

    Every node type must exist on the n8n instance; unknown types are rejected
    with the closest valid type. Only workflows with an automatic trigger
    (schedule, webhook, ...) can be activated.

    Args:
        workflow: Complete workflow: name, nodes, connections and optional settings.
        activate: Activate the workflow right after creating it.
    """
    await _check_node_types(workflow)
    created = await _context().client.create_workflow(workflow.to_api(), activate=activate)
    status = "activated" if created.get("active") else "created (not activated)"
    return f'Successfully {status} workflow "{created.get("name")}" (ID: {created.get("id")})'


@mcp.tool()
async def get_workflow(workflow_id: str, verbosity: Literal["concise", "full"] | None = None) -> str:
    """Get a workflow's details, including nodes, connections and settings.

    Args:
        workflow_id: Workflow ID (from list_workflows).
        verbosity: "concise" for the summary only, "full" to append the raw JSON.
    """
    workflow = await _context().client.get_workflow(workflow_id)
    return with_details(summarize_workflow(workflow), workflow, _verbosity(verbosity))


@mcp.tool()
async def update_workflow(workflow_id: str, workflow: Workflow) -> str:
    """Replace a workflow's definition.

    The complete workflow must be sent, not only the changed parts. Fetch it
    with get_workflow first, modify it, then save it here.

    Args:
        workflow_id: Workflow ID (from list_workflows).
        workflow: Complete updated workflow.
    """
    await _check_node_types(workflow)
    updated = await _context().client.update_workflow(workflow_id, workflow.to_api())
    status = "active" if updated.get("active") else "inactive"
    return f'Successfully updated workflow "{updated.get("name")}" (ID: {workflow_id}, Status: {status})'


@mcp.tool()
async def delete_workflow(workflow_id: str) -> str:
    """Permanently delete a workflow. This cannot be undone; consider deactivating instead.

    Args:
        workflow_id: Workflow ID (from list_workflows).
    """
    client = _context().client
    workflow = await client.get_workflow(workflow_id)
    await client.delete_workflow(workflow_id)
    return f'Successfully deleted workflow "{workflow.get("name")}" (ID: {workflow_id})'


@mcp.tool()
async def activate_workflow(workflow_id: str) -> str:
    """Activate a workflow so its trigger runs it automatically.

    Args:
        workflow_id: Workflow ID (from list_workflows).
    """
    result = await _context().client.activate_workflow(workflow_id)
    return f'Successfully activated workflow "{result.get("name")}" (ID: {workflow_id})'


@mcp.tool()
async def deactivate_workflow(workflow_id: str) -> str:
    """Deactivate a workflow. It can still be run manually or reactivated later.

    Args:
        workflow_id: Workflow ID (from list_workflows).
    """
    result = await _context().client.deactivate_workflow(workflow_id)
    return f'Successfully deactivated workflow "{result.get("name")}" (ID: {workflow_id})'


# ── Execution tools ─────────────────────────────────────────────────────


@mcp.tool()
async def list_executions(workflow_id: str | None = None,
                          status: Literal["error", "success", "waiting"] | None = None,
                          limit: int | None = None,
                          verbosity: Literal["concise", "full"] | None = None) -> str:
    """List workflow executions with status, duration and timestamps.

    Args:
        workflow_id: Only executions of this workflow.
        status: Only executions with this status.
        limit: Maximum number of executions to return.
        verbosity: "concise" for the summary only, "full" to append the raw JSON.
    """
    executions = await _context().client.list_executions(
        workflow_id=workflow_id, status=status, limit=limit,
    )
    if not executions:
        return summarize_executions(executions)
    return with_details(summarize_executions(executions), executions, _verbosity(verbosity))


@mcp.tool()
async def get_execution(execution_id: str, include_data: bool | None = None,
                        verbosity: Literal["concise", "full"] | None = None) -> str:
    """Get one execution, optionally with the data each node produced.

    Args:
        execution_id: Execution ID (from list_executions).
        include_data: Include per-node input/output data (can be large).
        verbosity: "concise" for the summary only, "full" to append the raw JSON.
    """
    execution = await _context().client.get_execution(execution_id, include_data=include_data)
    return with_details(summarize_execution(execution), execution, _verbosity(verbosity))


@mcp.tool()
async def delete_execution(execution_id: str) -> str:
    """Permanently delete an execution record and its data.

    Args:
        execution_id: Execution ID (from list_executions).
    """
    await _context().client.delete_execution(execution_id)
    return f"Successfully deleted execution {execution_id}"


# ── Node tools ──────────────────────────────────────────────────────────


@mcp.tool()
async def list_available_nodes(verbosity: Literal["concise", "summary", "full"] = "concise",
                               category: str | None = None) -> str:
    """List the node types installed on the n8n instance, grouped by package.

    Call this before creating workflows so only valid node types are used.

    Args:
        verbosity: "summary" for counts per package, "concise" for names,
                   "full" for names with descriptions.
        category: Only show one package (e.g. "n8n-nodes-base").
    """
    nodes = await _context().validator.list_descriptors()
    return summarize_nodes(nodes, verbosity=verbosity, package=category)


@mcp.tool()
async def validate_node_types(node_types: list[str]) -> dict:
    """Check node types against the instance, suggesting close matches for unknown ones.

    Args:
        node_types: Fully-qualified node types (e.g. "n8n-nodes-base.httpRequest").
    """
    invalid = await _context().validator.validate_many(node_types)
    return {
        "valid": not invalid,
        "invalid_nodes": [item.to_dict() for item in invalid],
    }


@mcp.tool()
def get_workflow_composition_guide(section: str | None = None) -> str:
    """Get guidance on composing n8n workflows: principles, patterns, and node tips.

    Args:
        section: Optional section: core_principles, node_types, node_categories,
                 common_patterns, ai_patterns, creation_process, node_tips, security.
                 Omit for the whole guide.
    """
    try:
        return get_guide(section)
    except KeyError as e:
        raise ToolError(e.args[0]) from e


# ── Resources ───────────────────────────────────────────────────────────


@mcp.resource("n8n://workflows", name="n8n Workflows",
              description="List of all workflows in n8n", mime_type="application/json")
async def workflows_resource() -> str:
    return _dump(await _context().client.list_workflows())


@mcp.resource("n8n://workflows/{workflow_id}", name="n8n Workflow",
              description="Details of a specific n8n workflow", mime_type="application/json")
async def workflow_resource(workflow_id: str) -> str:
    return _dump(await _context().client.get_workflow(workflow_id))


@mcp.resource("n8n://executions/{execution_id}", name="n8n Execution",
              description="Details of a specific n8n workflow execution",
              mime_type="application/json")
async def execution_resource(execution_id: str) -> str:
    return _dump(await _context().client.get_execution(execution_id))


@mcp.resource("n8n://node-types", name="n8n Node Types",
              description="Node types available on the n8n instance", mime_type="application/json")
async def node_types_resource() -> str:
    nodes = await _context().validator.list_descriptors()
    return _dump([node.to_dict() for node in nodes])


# ── Entry point ─────────────────────────────────────────────────────────

def main(argv: list[str] | None = None):
    import argparse

    parser = argparse.ArgumentParser(description="n8n Workflow Builder MCP Server")
    parser.add_argument("--n8n-host", help="n8n base URL (default: $N8N_HOST or http://localhost:5678)")
    parser.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL or info)")
    parser.add_argument("--verbosity", choices=VERBOSITY_LEVELS,
                        help="Default tool output verbosity (default: $OUTPUT_VERBOSITY or concise)")
    parser.add_argument("--node-catalog", metavar="FILE",
                        help="Load node types from a JSON export instead of the n8n API")

    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.n8n_host:
        settings.n8n_host = args.n8n_host
    if args.log_level:
        settings.log_level = args.log_level
    if args.verbosity:
        settings.output_verbosity = args.verbosity
    if args.node_catalog:
        settings.node_catalog_path = os.path.abspath(args.node_catalog)

    if settings.node_catalog_path and not os.path.isfile(settings.node_catalog_path):
        print(f"Error: {settings.node_catalog_path} is not a file", file=sys.stderr)
        sys.exit(1)

    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    configure(settings)
    logger.info(f"{SERVER_NAME} MCP server running on stdio against {settings.n8n_host}")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

"""Human-readable summaries of n8n API payloads for tool output."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable

from n8n_workflow_builder.domain.node_types import NodeDescriptor

NODE_LIST_VERBOSITY = ("concise", "summary", "full")


def with_details(summary: str, details: Any, verbosity: str = "concise") -> str:
    """Append the full JSON payload when verbosity is 'full'."""
    if verbosity == "full":
        return f"{summary}\n\nFull details:\n{json.dumps(details, indent=2, ensure_ascii=False)}"
    return summary


def format_timestamp(value: str | None) -> str:
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _tag_names(item: dict) -> str:
    names = [t.get("name", "") for t in item.get("tags") or []]
    return ", ".join(n for n in names if n) or "None"


# ── Workflows ───────────────────────────────────────────────────────────


def summarize_workflows(workflows: list[dict]) -> str:
    if not workflows:
        return "No workflows found."

    active = sum(1 for wf in workflows if wf.get("active"))
    header = (
        f"Found {_plural(len(workflows), 'workflow')} "
        f"({active} active, {len(workflows) - active} inactive):\n\n"
    )
    entries = []
    for i, wf in enumerate(workflows, 1):
        entries.append(
            f'{i}. "{wf.get("name")}" (ID: {wf.get("id")})\n'
            f'   Status: {"Active" if wf.get("active") else "Inactive"}\n'
            f'   Created: {format_timestamp(wf.get("createdAt"))}\n'
            f'   Tags: {_tag_names(wf)}'
        )
    return header + "\n\n".join(entries)


def summarize_workflow(workflow: dict) -> str:
    nodes = workflow.get("nodes") or []
    triggers = sum(1 for n in nodes if "trigger" in str(n.get("type", "")).lower())
    return "\n".join([
        f'Workflow: "{workflow.get("name")}" (ID: {workflow.get("id")})',
        f'Status: {"Active" if workflow.get("active") else "Inactive"}',
        f'Created: {format_timestamp(workflow.get("createdAt"))}',
        f'Updated: {format_timestamp(workflow.get("updatedAt"))}',
        f"Nodes: {len(nodes)} (including {triggers} trigger nodes)",
        f"Tags: {_tag_names(workflow)}",
    ])


# ── Executions ──────────────────────────────────────────────────────────


def execution_status(execution: dict) -> str:
    if not execution.get("finished") and not execution.get("stoppedAt"):
        return "Running"
    return "Successful" if execution.get("status") == "success" else "Failed"


def execution_duration(execution: dict) -> str:
    started, stopped = execution.get("startedAt"), execution.get("stoppedAt")
    if not started or not stopped:
        return "Still running"
    try:
        start = datetime.fromisoformat(started.replace("Z", "+00:00"))
        end = datetime.fromisoformat(stopped.replace("Z", "+00:00"))
    except ValueError:
        return "Unknown"
    return f"{(end - start).total_seconds():.2f} seconds"


def _workflow_name(execution: dict) -> str:
    data = execution.get("workflowData") or {}
    return data.get("name") or "Unknown"


def summarize_executions(executions: list[dict]) -> str:
    if not executions:
        return "No executions found."

    statuses = [execution_status(e) for e in executions]
    header = (
        f"Found {_plural(len(executions), 'execution')} "
        f"({statuses.count('Successful')} successful, {statuses.count('Failed')} failed, "
        f"{statuses.count('Running')} running):\n\n"
    )
    entries = []
    for i, (ex, status) in enumerate(zip(executions, statuses), 1):
        entries.append(
            f"{i}. Execution ID: {ex.get('id')}\n"
            f"   Status: {status}\n"
            f"   Workflow: {_workflow_name(ex)} (ID: {ex.get('workflowId')})\n"
            f"   Started: {format_timestamp(ex.get('startedAt'))}\n"
            f"   Duration: {execution_duration(ex)}"
        )
    return header + "\n\n".join(entries)


def summarize_execution(execution: dict) -> str:
    stopped = execution.get("stoppedAt")
    return "\n".join([
        f"Execution ID: {execution.get('id')}",
        f"Status: {execution_status(execution)}",
        f"Workflow: {_workflow_name(execution)} (ID: {execution.get('workflowId')})",
        f"Mode: {execution.get('mode', 'unknown')}",
        f"Started: {format_timestamp(execution.get('startedAt'))}",
        f"Ended: {format_timestamp(stopped) if stopped else 'Still running'}",
        f"Duration: {execution_duration(execution)}",
    ])


# ── Nodes ───────────────────────────────────────────────────────────────


def group_by_package(nodes: Iterable[NodeDescriptor]) -> dict[str, list[NodeDescriptor]]:
    """Group node descriptors by package, each group sorted by name."""
    grouped: dict[str, list[NodeDescriptor]] = {}
    for node in sorted(nodes, key=lambda n: n.name):
        grouped.setdefault(node.package, []).append(node)
    return grouped


def summarize_nodes(nodes: list[NodeDescriptor], verbosity: str = "concise",
                    package: str | None = None) -> str:
    grouped = group_by_package(nodes)
    if package:
        grouped = {k: v for k, v in grouped.items() if k.lower() == package.lower()}

    out = (
        f"Found {len(nodes)} available nodes in the n8n instance.\n\n"
        "When creating workflows, use these exact node types to ensure compatibility.\n\n"
    )

    if verbosity == "summary":
        out += "Node counts by category:\n\n"
        out += "".join(f"- {name}: {len(group)} nodes\n" for name, group in grouped.items())
        return out

    sections = []
    for name, group in grouped.items():
        lines = []
        for node in group:
            line = f"- `{node.name}`: {node.display_name}"
            if verbosity == "full" and node.description:
                line += f" - {node.description}"
            lines.append(line)
        sections.append(f"## {name}\n\n" + "\n".join(lines))
    return out + "Available nodes by category:\n\n" + "\n\n".join(sections)


def describe_invalid_nodes(invalid: list[dict]) -> str:
    lines = ["Invalid node types:"]
    for item in invalid:
        line = f"- {item['node_type']}"
        if item.get("suggestion"):
            line += f" (did you mean {item['suggestion']}?)"
        lines.append(line)
    lines.append("Use list_available_nodes to see the node types this instance supports.")
    return "\n".join(lines)

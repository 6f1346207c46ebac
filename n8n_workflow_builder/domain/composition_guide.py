"""
Guidance for LLMs composing n8n workflows.

Each section is standalone Markdown so clients can fetch only the part
they need.
"""

from typing import Dict, Optional

CORE_PRINCIPLES = """\
# Core Principles

1. **Start with a trigger.** Every workflow begins with a trigger node.
   - Automated runs: Schedule Trigger, Webhook, or a service-specific trigger
   - Testing: Manual Trigger
   - Sub-workflows: Execute Workflow Trigger
   - Chat: Chat Trigger
2. **Keep data flowing left to right.** Lay nodes out in the order data moves through them.
3. **Reshape data in small steps.** Put Set or Code nodes between major operations.
4. **Plan for failure.** Use an Error Trigger workflow or IF branches on error conditions.
5. **One job per workflow.** Split large processes into sub-workflows.
6. **Name things.** Descriptive node and workflow names make workflows self-documenting.
7. **Activation needs an automatic trigger.** A workflow whose only trigger is a
   Manual Trigger cannot be activated.
"""

NODE_TYPES = """\
# Node Types

Node `type` values are fully-qualified identifiers: a package prefix and a node
kind joined by a dot, e.g. `n8n-nodes-base.httpRequest`. Types are case-sensitive
and must match a node installed on the target instance.

- Call `list_available_nodes` before building a workflow.
- Call `validate_node_types` to check a draft; unknown types come back with the
  closest known type when one is similar enough.
- `create_workflow` and `update_workflow` refuse workflows with unknown types.
"""

NODE_CATEGORIES = """\
# Node Categories

## Triggers
Manual Trigger, Schedule Trigger (cron), Webhook, Error Trigger, Chat Trigger,
and service-specific triggers (Gmail, Slack, ...).

## Actions
HTTP Request, Send Email, database nodes (Postgres, MySQL, ...), file
operations, and service-specific actions.

## Transformations
Set, Code, Function, JSON/XML parsing, Split Out, Aggregate, Filter.

## Flow Control
IF (two branches), Switch (many branches), Merge (join branches), Wait,
Split In Batches (loop over items).

## AI
OpenAI and other model nodes, LangChain Agent, memory nodes, tool nodes.
"""

COMMON_PATTERNS = """\
# Common Patterns

## Fetch and Process
Schedule Trigger -> HTTP Request -> Set -> database node.
Pull data from an API on a schedule, reshape it, store it.

## Webhook API
Webhook -> Code -> Respond to Webhook.
Expose an endpoint that computes and returns a response.

## Conditional Routing
Trigger -> fetch -> IF / Switch -> one action per branch.

## Batch Processing
Trigger -> source -> Split In Batches -> process -> Merge.
Work through large datasets in chunks.

## Error Handling
Main workflows set an error workflow; that workflow starts with Error Trigger
and sends a notification.

## Polling
Schedule Trigger -> HTTP Request -> Filter (new items only) -> process.

## Synchronization
Trigger -> read source -> read target -> Code (diff) -> create/update/delete.
"""

AI_PATTERNS = """\
# AI Patterns

## Basic Model Call
Trigger -> Set (prompt) -> model node -> Code (post-process) -> action.

## Chained Calls
Trigger -> model (analyze) -> model (generate) -> action.
Break a complex task into specialized steps.

## Single Agent
Chat Trigger -> Agent with tool nodes -> respond.

## Mixture of Experts
Chat Trigger -> router model -> Switch -> expert models -> Merge -> respond.
Keep expert output formats consistent and give the router a fallback branch.

## Gatekeeper
A main agent delegates to specialist agents and writes the final answer.

## Memory
Attach a memory node to the agent so it can use earlier turns of the conversation.
"""

CREATION_PROCESS = """\
# Building a Workflow Step by Step

1. **Define the goal**: what starts the workflow and what it must produce.
2. **Plan the structure**: trigger, processing steps, transformations, failure paths.
3. **Check node types**: confirm each type with `list_available_nodes` or `validate_node_types`.
4. **Add the trigger** and configure it (schedule, webhook path, ...).
5. **Add the processing nodes** and connect them. Every connection names the
   target node by its `name`, not its `id`.
6. **Add error handling**.
7. **Create the workflow** with `create_workflow`, inspect it with `get_workflow`.
8. **Activate** it if it has an automatic trigger, then watch `list_executions`.
"""

NODE_TIPS = """\
# Node Tips

## HTTP Request
Use stored credentials for authenticated APIs, expressions for dynamic URLs,
and retries for rate-limited endpoints.

## Code / Function
Keep each node focused. Return a list of items with a `json` key each.

## Databases
Use parameterized queries. Group related writes in a transaction.

## Merge
Pick the merge mode explicitly (append, by key, by position).

## Split In Batches
Size batches for what downstream nodes and APIs can handle.
"""

SECURITY = """\
# Security

- Keep secrets in the n8n credentials store, never in node parameters.
- Protect public webhooks with authentication and rate limiting.
- Use HTTPS for external calls.
- Keep sensitive data out of error messages and logs.
- Separate development and production instances.
"""

GUIDE_SECTIONS: Dict[str, str] = {
    'core_principles': CORE_PRINCIPLES,
    'node_types': NODE_TYPES,
    'node_categories': NODE_CATEGORIES,
    'common_patterns': COMMON_PATTERNS,
    'ai_patterns': AI_PATTERNS,
    'creation_process': CREATION_PROCESS,
    'node_tips': NODE_TIPS,
    'security': SECURITY,
}


def get_guide(section: Optional[str] = None) -> str:
    """
    Return one guide section, or the whole guide when no section is given.

    Raises:
        KeyError: If the section name is unknown.
    """
    if section is None:
        return '\n'.join(GUIDE_SECTIONS.values())
    if section not in GUIDE_SECTIONS:
        raise KeyError(
            f"Unknown guide section '{section}'. Available: {', '.join(GUIDE_SECTIONS)}"
        )
    return GUIDE_SECTIONS[section]

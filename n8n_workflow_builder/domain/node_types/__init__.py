"""
Node type descriptors and similarity matching.

Example:
    >>> from n8n_workflow_builder.domain.node_types import FALLBACK_NODES, find_closest
    >>> find_closest('n8n-nodes-base.merg', [n.name for n in FALLBACK_NODES])
    'n8n-nodes-base.merge'

Module Contents:
    NodeDescriptor: Immutable dataclass describing one node type
    FALLBACK_NODES: Node types used when no catalog can be loaded
    package_of: Package prefix of a node type name
    similarity: Case-insensitive 0..1 similarity of two strings
    find_closest: Best candidate above the suggestion threshold
"""

from n8n_workflow_builder.domain.node_types.registry import (
    FALLBACK_NODES,
    NodeDescriptor,
    package_of,
)
from n8n_workflow_builder.domain.node_types.similarity import (
    SUGGESTION_THRESHOLD,
    find_closest,
    levenshtein_distance,
    similarity,
)

__all__ = [
    'FALLBACK_NODES',
    'NodeDescriptor',
    'package_of',
    'SUGGESTION_THRESHOLD',
    'find_closest',
    'levenshtein_distance',
    'similarity',
]

"""
Node descriptors and the built-in fallback node list.

A node type is identified by its fully-qualified name, made of a package
prefix and a node kind (e.g. 'n8n-nodes-base.httpRequest'). The fallback
list is only used when no catalog data could be loaded at all and may not
match what a given n8n instance actually has installed.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

DEFAULT_PACKAGE = 'other'


@dataclass(frozen=True)
class NodeDescriptor:
    """
    Immutable description of one node type.

    Attributes:
        name: Fully-qualified node type (e.g. 'n8n-nodes-base.merge')
        display_name: Human-readable label (e.g. 'Merge')
        description: Optional free-text description from the catalog
        type: Optional node type reported by the catalog
        version: Optional node version

    Example:
        >>> info = NodeDescriptor('n8n-nodes-base.merge', 'Merge')
        >>> info.package
        'n8n-nodes-base'
    """
    name: str
    display_name: str
    description: Optional[str] = None
    type: Optional[str] = None
    version: Optional[int] = None

    @classmethod
    def from_catalog_entry(cls, entry: Dict[str, Any]) -> Optional['NodeDescriptor']:
        """
        Build a descriptor from one catalog entry.

        Catalog entries use the n8n field names (``displayName``). Entries
        without a string name are not node types and yield None. Optional
        fields of the wrong type are dropped.

        Example:
            >>> NodeDescriptor.from_catalog_entry({'name': 'n8n-nodes-base.set'}).display_name
            'n8n-nodes-base.set'
        """
        name = _text(entry.get('name'))
        if not name:
            return None
        version = entry.get('version')
        if isinstance(version, bool) or not isinstance(version, int):
            version = None
        return cls(
            name=name,
            display_name=_text(entry.get('displayName')) or name,
            description=_text(entry.get('description')),
            type=_text(entry.get('type')),
            version=version,
        )

    @property
    def package(self) -> str:
        return package_of(self.name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'name': self.name, 'display_name': self.display_name}
        for key in ('description', 'type', 'version'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def package_of(node_type: str) -> str:
    """
    Package prefix of a node type name.

    Example:
        >>> package_of('@n8n/n8n-nodes-langchain.agent')
        '@n8n/n8n-nodes-langchain'
        >>> package_of('standalone')
        'other'
    """
    parts = node_type.split('.')
    return parts[0] if len(parts) > 1 else DEFAULT_PACKAGE


# Well-known nodes shipped with every n8n installation
FALLBACK_NODES: Tuple[NodeDescriptor, ...] = (
    NodeDescriptor('n8n-nodes-base.start', 'Start'),
    NodeDescriptor('n8n-nodes-base.manualTrigger', 'Manual Trigger'),
    NodeDescriptor('n8n-nodes-base.httpRequest', 'HTTP Request'),
    NodeDescriptor('n8n-nodes-base.set', 'Set'),
    NodeDescriptor('n8n-nodes-base.function', 'Function'),
    NodeDescriptor('n8n-nodes-base.if', 'IF'),
    NodeDescriptor('n8n-nodes-base.switch', 'Switch'),
    NodeDescriptor('n8n-nodes-base.merge', 'Merge'),
)

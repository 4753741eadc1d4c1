"""
Node-type Registry - Explicit map from node-type tag to constructor.

Populated once at startup from the catalog; there is no class scanning.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from reqdef.graph.node import GraphNode

logger = logging.getLogger(__name__)

SOURCE_GROUP = "SOURCE"

NodeFactory = Callable[[str], GraphNode]


@dataclass
class NodeTypeEntry:
    """A registered node kind"""
    tag: str
    group: str          # SOURCE, FILTER, COMPARATOR, AGGREGATOR, PRESENTATION
    factory: NodeFactory
    description: str = ""


class NodeTypeRegistry:
    """
    Central registry for graph node kinds.

    `create` calls the factory each time, so two sessions never share a
    node, endpoint or counter.
    """

    def __init__(self):
        self._entries: Dict[str, NodeTypeEntry] = {}

    def register(self, tag: str, factory: NodeFactory, group: str, description: str = "") -> None:
        if tag in self._entries:
            raise ValueError(f"Node type '{tag}' is already registered")
        self._entries[tag] = NodeTypeEntry(tag=tag, group=group, factory=factory, description=description)
        logger.debug("[REGISTRY] Registered node type %s (%s)", tag, group)

    def get(self, tag: str) -> Optional[NodeTypeEntry]:
        return self._entries.get(tag)

    def create(self, tag: str, node_id: str) -> GraphNode:
        entry = self._entries.get(tag)
        if entry is None:
            raise KeyError(f"Unknown node type '{tag}'")
        return entry.factory(node_id)

    def list_tags(self) -> List[str]:
        return list(self._entries)

    def available_by_group(self) -> Dict[str, List[str]]:
        """Tags grouped by node group; SOURCE first, then the other groups sorted."""
        groups: Dict[str, List[str]] = {}
        for entry in self._entries.values():
            groups.setdefault(entry.group, []).append(entry.tag)

        ordered: Dict[str, List[str]] = {SOURCE_GROUP: groups.pop(SOURCE_GROUP, [])}
        for group in sorted(groups):
            ordered[group] = groups[group]
        return ordered

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Global registry instance
_global_registry: Optional[NodeTypeRegistry] = None


def get_node_registry() -> NodeTypeRegistry:
    """Get or create the global node-type registry"""
    global _global_registry
    if _global_registry is None:
        _global_registry = NodeTypeRegistry()
        from reqdef.nodes.catalog import register_builtin_nodes
        register_builtin_nodes(_global_registry)
        logger.info("[REGISTRY] Loaded %d node types", len(_global_registry))
    return _global_registry

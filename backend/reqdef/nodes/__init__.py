"""
Node library offered by the design toolbox.
"""

from reqdef.nodes.registry import (
    SOURCE_GROUP,
    NodeTypeEntry,
    NodeTypeRegistry,
    get_node_registry,
)
from reqdef.nodes.catalog import register_builtin_nodes

__all__ = [
    "SOURCE_GROUP",
    "NodeTypeEntry",
    "NodeTypeRegistry",
    "get_node_registry",
    "register_builtin_nodes",
]

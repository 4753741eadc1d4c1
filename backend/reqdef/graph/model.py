import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .endpoint import Endpoint
from .errors import (
    CapacityExceeded,
    DirectionMismatch,
    DuplicateId,
    NotFound,
    ScopeMismatch,
    SelfLoopNotAllowed,
)
from .node import GraphNode
from .scopes import scopes_compatible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    source_node_id: str
    source_endpoint_id: str
    target_node_id: str
    target_endpoint_id: str

    def touches(self, node_id: str) -> bool:
        return self.source_node_id == node_id or self.target_node_id == node_id

    @property
    def is_self_loop(self) -> bool:
        return self.source_node_id == self.target_node_id

    def to_dict(self) -> dict:
        return {
            "source_node_id": self.source_node_id,
            "source_endpoint_id": self.source_endpoint_id,
            "target_node_id": self.target_node_id,
            "target_endpoint_id": self.target_endpoint_id,
        }


class GraphModel:
    """
    Mutable graph of nodes and edges for one editing session.

    Responsibilities:
    - Keep node ids unique and nodes in insertion order
    - Check edge legality at connect time (direction, scope, capacity)
    - Keep endpoint connection counters in step with the edge list

    Global validity (cycles, required endpoints) is not enforced here;
    see GraphValidator.
    """

    def __init__(self, allow_self_loops: bool = False):
        self.allow_self_loops = allow_self_loops
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: List[Edge] = []
        # node id -> edges touching it, in insertion order
        self._edges_by_node: Dict[str, List[Edge]] = {}

    # ==========================================================
    # NODE OPERATIONS
    # ==========================================================

    def add_node(self, node: GraphNode) -> GraphNode:
        if node.id in self._nodes:
            raise DuplicateId(f"Node '{node.id}' already exists.", node_id=node.id)
        self._nodes[node.id] = node
        logger.debug("[GraphModel] Added node %s (%s)", node.id, node.type)
        return node

    def remove_node(self, node_id: str) -> GraphNode:
        node = self.get_node(node_id)
        for edge in self.edges_of(node_id):
            self.disconnect(edge)
        del self._nodes[node_id]
        self._edges_by_node.pop(node_id, None)
        logger.debug("[GraphModel] Removed node %s", node_id)
        return node

    def get_node(self, node_id: str) -> GraphNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFound(f"Node '{node_id}' does not exist.", node_id=node_id)
        return node

    def find_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    @property
    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    # ==========================================================
    # EDGE OPERATIONS
    # ==========================================================

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def resolve(self, node_id: str, endpoint_id: str) -> Tuple[GraphNode, Endpoint]:
        node = self.get_node(node_id)
        return node, node.find_endpoint(endpoint_id)

    def connect(
        self,
        source_node_id: str,
        source_endpoint_id: str,
        target_node_id: str,
        target_endpoint_id: str,
    ) -> Edge:
        _, source = self.resolve(source_node_id, source_endpoint_id)
        _, target = self.resolve(target_node_id, target_endpoint_id)

        if source_node_id == target_node_id and not self.allow_self_loops:
            raise SelfLoopNotAllowed(
                f"Node '{source_node_id}' cannot be connected to itself",
                node_id=source_node_id,
            )

        if not (source.is_output and target.is_input):
            raise DirectionMismatch(
                f"Edges must run Output -> Input, got "
                f"{source.direction.value} -> {target.direction.value}",
                node_id=target_node_id,
                endpoint_id=target_endpoint_id,
            )

        if not scopes_compatible(source.scope, target.scope):
            raise ScopeMismatch(
                f"Scope '{source.scope}' of '{source_node_id}.{source.id}' is not "
                f"compatible with scope '{target.scope}' of '{target_node_id}.{target.id}'",
                node_id=target_node_id,
                endpoint_id=target_endpoint_id,
            )

        edge = Edge(source_node_id, source_endpoint_id, target_node_id, target_endpoint_id)
        if edge in self._edges_by_node.get(source_node_id, ()):
            raise DuplicateId(
                f"Edge {source_node_id}.{source_endpoint_id} -> "
                f"{target_node_id}.{target_endpoint_id} already exists",
                node_id=target_node_id,
                endpoint_id=target_endpoint_id,
            )

        for node_id, endpoint in ((source_node_id, source), (target_node_id, target)):
            if endpoint.is_saturated():
                raise CapacityExceeded(
                    f"Endpoint '{node_id}.{endpoint.id}' accepts at most "
                    f"{endpoint.max_connections} connections",
                    node_id=node_id,
                    endpoint_id=endpoint.id,
                )

        source.attach()
        try:
            target.attach()
        except CapacityExceeded:
            source.detach()
            raise

        self._edges.append(edge)
        for node_id in self._touched_nodes(edge):
            self._edges_by_node.setdefault(node_id, []).append(edge)
        logger.debug(
            "[GraphModel] Connected %s.%s -> %s.%s",
            source_node_id, source_endpoint_id, target_node_id, target_endpoint_id,
        )
        return edge

    def disconnect(self, edge: Edge) -> None:
        if edge not in self._edges_by_node.get(edge.source_node_id, ()):
            raise NotFound(
                f"Edge {edge.source_node_id}.{edge.source_endpoint_id} -> "
                f"{edge.target_node_id}.{edge.target_endpoint_id} does not exist",
                node_id=edge.target_node_id,
                endpoint_id=edge.target_endpoint_id,
            )
        _, source = self.resolve(edge.source_node_id, edge.source_endpoint_id)
        _, target = self.resolve(edge.target_node_id, edge.target_endpoint_id)
        source.detach()
        target.detach()
        self._edges.remove(edge)
        for node_id in self._touched_nodes(edge):
            self._edges_by_node[node_id].remove(edge)
        logger.debug(
            "[GraphModel] Disconnected %s.%s -> %s.%s",
            edge.source_node_id, edge.source_endpoint_id,
            edge.target_node_id, edge.target_endpoint_id,
        )

    @staticmethod
    def _touched_nodes(edge: Edge) -> Tuple[str, ...]:
        if edge.is_self_loop:
            return (edge.source_node_id,)
        return (edge.source_node_id, edge.target_node_id)

    def edges_of(self, node_id: str) -> List[Edge]:
        return list(self._edges_by_node.get(node_id, ()))

    def outgoing_edges(self, node_id: str) -> List[Edge]:
        """Edges leaving `node_id`, in endpoint-then-edge insertion order."""
        node = self.get_node(node_id)
        touching = self._edges_by_node.get(node_id, ())
        result = []
        for endpoint in node.output_endpoints():
            result.extend(
                edge for edge in touching
                if edge.source_node_id == node_id and edge.source_endpoint_id == endpoint.id
            )
        return result

    def incoming_edges(self, node_id: str) -> List[Edge]:
        """Edges entering `node_id`, in endpoint-then-edge insertion order."""
        node = self.get_node(node_id)
        touching = self._edges_by_node.get(node_id, ())
        result = []
        for endpoint in node.input_endpoints():
            result.extend(
                edge for edge in touching
                if edge.target_node_id == node_id and edge.target_endpoint_id == endpoint.id
            )
        return result

    # ==========================================================
    # WORKSPACE
    # ==========================================================

    def clear(self) -> None:
        for node in self._nodes.values():
            node.reset_connections()
        self._nodes.clear()
        self._edges.clear()
        self._edges_by_node.clear()
        logger.debug("[GraphModel] Cleared")

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(list(self._nodes.values()))

    def to_dict(self) -> dict:
        return {
            "allow_self_loops": self.allow_self_loops,
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self._edges],
        }

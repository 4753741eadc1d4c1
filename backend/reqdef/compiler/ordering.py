from typing import Iterator, List, Set, Tuple

from reqdef.graph.model import Edge, GraphModel
from reqdef.graph.node import GraphNode


def dependency_order(model: GraphModel) -> List[GraphNode]:
    """
    Order nodes so that every node follows the nodes feeding it.

    Nodes are taken in insertion order; before a node is placed, its
    upstream nodes are placed by walking its input endpoints in order and,
    per endpoint, its edges in insertion order. Deterministic for identical
    graphs. The model must be acyclic (self-loops are ignored).

    Unlike the cycle check, the walk follows incoming edges: a node is
    emitted once its producers are, so a node with several consumers
    appears before all of them without a reversal pass.
    """
    ordered: List[GraphNode] = []
    placed: Set[str] = set()
    visiting: Set[str] = set()
    stack: List[Tuple[str, Iterator[Edge]]] = []

    def enter(node_id: str) -> None:
        visiting.add(node_id)
        stack.append((node_id, iter(model.incoming_edges(node_id))))

    for node in model.nodes:
        if node.id in placed:
            continue
        enter(node.id)
        while stack:
            node_id, edges = stack[-1]
            edge = next(edges, None)
            if edge is None:
                stack.pop()
                visiting.discard(node_id)
                placed.add(node_id)
                ordered.append(model.get_node(node_id))
                continue
            upstream = edge.source_node_id
            if edge.is_self_loop or upstream in placed or upstream in visiting:
                continue
            enter(upstream)

    return ordered

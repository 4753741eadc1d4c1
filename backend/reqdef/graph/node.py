from typing import Any, Dict, Iterable, List, Optional

from .endpoint import Endpoint
from .errors import DuplicateId, NotFound


class GraphNode:
    """
    A typed vertex of the application graph.

    Endpoint order is significant: the toolbox and the generator both
    walk endpoints in the order they were added (a source node's first
    endpoint is its filter input).
    """

    def __init__(
        self,
        node_id: str,
        node_type: str,
        label: str = "",
        properties: Optional[Dict[str, Any]] = None,
        endpoints: Optional[Iterable[Endpoint]] = None,
    ):
        if not node_type:
            raise ValueError("node_type must not be empty")
        self.id = node_id
        self._type = node_type
        self.label = label or node_id
        self.properties: Dict[str, Any] = dict(properties or {})
        self._endpoints: List[Endpoint] = []
        for endpoint in endpoints or []:
            self.add_endpoint(endpoint)

    @property
    def type(self) -> str:
        return self._type

    @property
    def endpoints(self) -> List[Endpoint]:
        return list(self._endpoints)

    def add_endpoint(self, endpoint: Endpoint) -> None:
        if any(e.id == endpoint.id for e in self._endpoints):
            raise DuplicateId(
                f"Endpoint '{endpoint.id}' already exists on node '{self.id}'",
                node_id=self.id,
                endpoint_id=endpoint.id,
            )
        self._endpoints.append(endpoint)

    def find_endpoint(self, endpoint_id: str) -> Endpoint:
        for endpoint in self._endpoints:
            if endpoint.id == endpoint_id:
                return endpoint
        raise NotFound(
            f"Endpoint '{endpoint_id}' not found on node '{self.id}'",
            node_id=self.id,
            endpoint_id=endpoint_id,
        )

    def input_endpoints(self) -> List[Endpoint]:
        return [e for e in self._endpoints if e.is_input]

    def output_endpoints(self) -> List[Endpoint]:
        return [e for e in self._endpoints if e.is_output]

    def connected_endpoints(self) -> List[Endpoint]:
        return [e for e in self._endpoints if e.connection_count > 0]

    def is_connected(self) -> bool:
        return any(e.connection_count > 0 for e in self._endpoints)

    def reset_connections(self) -> None:
        for endpoint in self._endpoints:
            endpoint.reset()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "properties": dict(self.properties),
            "endpoints": [e.to_dict() for e in self._endpoints],
        }

    def __repr__(self) -> str:
        return f"GraphNode(id={self.id!r}, type={self.type!r}, label={self.label!r})"

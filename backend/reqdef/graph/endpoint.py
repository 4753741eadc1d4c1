import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import CapacityExceeded
from .scopes import scopes_compatible


UNBOUNDED = math.inf


class EndpointDirection(Enum):
    INPUT = "Input"
    OUTPUT = "Output"

    @property
    def opposite(self) -> "EndpointDirection":
        if self is EndpointDirection.INPUT:
            return EndpointDirection.OUTPUT
        return EndpointDirection.INPUT


class ConnectorType(Enum):
    DOT = "Dot"
    RECTANGLE = "Rectangle"


class AnchorType(Enum):
    LEFT = "Left"
    RIGHT = "Right"
    TOP = "Top"
    BOTTOM = "Bottom"


@dataclass
class Endpoint:
    """
    A typed connection point on a graph node.

    max_connections == -1 means the endpoint accepts any number of edges.
    connection_count is runtime state maintained by GraphModel.
    """
    id: str
    direction: EndpointDirection
    scope: str
    label: str = ""
    connector_type: ConnectorType = ConnectorType.DOT
    anchor: AnchorType = AnchorType.LEFT
    max_connections: int = -1
    required: bool = False
    user_data: Optional[str] = None
    connection_count: int = field(default=0, compare=False)

    def __post_init__(self):
        if not self.label:
            self.label = self.id
        if self.max_connections < -1:
            raise ValueError(
                f"Endpoint '{self.id}' has invalid max_connections {self.max_connections}"
            )

    @property
    def is_input(self) -> bool:
        return self.direction is EndpointDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction is EndpointDirection.OUTPUT

    @property
    def is_unbounded(self) -> bool:
        return self.max_connections == -1

    def can_connect_to(self, other: "Endpoint") -> bool:
        return (
            self.direction is other.direction.opposite
            and scopes_compatible(self.scope, other.scope)
        )

    def remaining_capacity(self):
        """Free connection slots, or UNBOUNDED."""
        if self.is_unbounded:
            return UNBOUNDED
        return self.max_connections - self.connection_count

    def is_saturated(self) -> bool:
        return self.remaining_capacity() <= 0

    def attach(self) -> None:
        if self.is_saturated():
            raise CapacityExceeded(
                f"Endpoint '{self.label}' accepts at most {self.max_connections} connections",
                endpoint_id=self.id,
            )
        self.connection_count += 1

    def detach(self) -> None:
        if self.connection_count <= 0:
            raise CapacityExceeded(
                f"Endpoint '{self.label}' has no connection to release",
                endpoint_id=self.id,
            )
        self.connection_count -= 1

    def reset(self) -> None:
        self.connection_count = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "direction": self.direction.value,
            "connector_type": self.connector_type.value,
            "anchor": self.anchor.value,
            "max_connections": self.max_connections,
            "required": self.required,
            "scope": self.scope,
            "user_data": self.user_data,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Endpoint":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            direction=EndpointDirection(data["direction"]),
            connector_type=ConnectorType(data.get("connector_type", ConnectorType.DOT.value)),
            anchor=AnchorType(data.get("anchor", AnchorType.LEFT.value)),
            max_connections=int(data.get("max_connections", -1)),
            required=bool(data.get("required", False)),
            scope=data["scope"],
            user_data=data.get("user_data"),
        )

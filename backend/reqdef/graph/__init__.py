"""
Typed node-graph application model.
"""

from reqdef.graph.endpoint import (
    UNBOUNDED,
    AnchorType,
    ConnectorType,
    Endpoint,
    EndpointDirection,
)
from reqdef.graph.errors import (
    CapacityExceeded,
    DirectionMismatch,
    DuplicateId,
    GraphError,
    NotFound,
    ScopeMismatch,
    SelfLoopNotAllowed,
    SpecificationFormatError,
    ValidationFailed,
)
from reqdef.graph.model import Edge, GraphModel
from reqdef.graph.node import GraphNode
from reqdef.graph.scopes import SCOPE_BUCKETS, scopes_compatible

__all__ = [
    "UNBOUNDED",
    "AnchorType",
    "ConnectorType",
    "Endpoint",
    "EndpointDirection",
    "CapacityExceeded",
    "DirectionMismatch",
    "DuplicateId",
    "GraphError",
    "NotFound",
    "ScopeMismatch",
    "SelfLoopNotAllowed",
    "SpecificationFormatError",
    "ValidationFailed",
    "Edge",
    "GraphModel",
    "GraphNode",
    "SCOPE_BUCKETS",
    "scopes_compatible",
]

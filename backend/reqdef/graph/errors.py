"""
Graph error taxonomy.

Every error is local and recoverable: the caller decides what to show
and whether to try again. Each class carries a machine-readable code
that the API layer forwards unchanged.
"""

from typing import List, Optional


class GraphError(ValueError):
    code = "GRAPH_ERROR"

    def __init__(self, message: str, node_id: Optional[str] = None, endpoint_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id
        self.endpoint_id = endpoint_id

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "endpoint_id": self.endpoint_id,
        }


class NotFound(GraphError):
    code = "NOT_FOUND"


class DuplicateId(GraphError):
    code = "DUPLICATE_ID"


class DirectionMismatch(GraphError):
    code = "DIRECTION_MISMATCH"


class ScopeMismatch(GraphError):
    code = "SCOPE_MISMATCH"


class CapacityExceeded(GraphError):
    code = "CAPACITY_EXCEEDED"


class SelfLoopNotAllowed(GraphError):
    code = "SELF_LOOP_NOT_ALLOWED"


class ValidationFailed(GraphError):
    """Generation aborted; `errors` holds every error-severity issue in report order."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: List):
        self.errors = list(errors)
        summary = "; ".join(f"[{e.code}] {e.message}" for e in self.errors)
        super().__init__(
            f"Graph validation failed with {len(self.errors)} errors: {summary}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data


class SpecificationFormatError(GraphError):
    code = "SPECIFICATION_FORMAT"

"""
Graph Validator - Checks an application graph before generation.

Catches:
- Directed cycles (errors)
- Required endpoints left unconnected (errors)
- Nodes with no connections at all (warnings)

Validation is a pure pass over the model. Nothing is cached, so callers
re-run it after every structural change.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from reqdef import config
from reqdef.graph.model import Edge, GraphModel

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    ERROR = "error"      # Generation is blocked
    WARNING = "warning"  # Graph can be generated but looks unfinished


CYCLE_DETECTED = "CYCLE_DETECTED"
MISSING_REQUIRED_CONNECTION = "MISSING_REQUIRED_CONNECTION"
ORPHAN_NODE = "ORPHAN_NODE"


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding"""
    severity: ValidationSeverity
    code: str
    message: str
    node_id: Optional[str] = None
    endpoint_id: Optional[str] = None
    path: Tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity is ValidationSeverity.ERROR

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "endpoint_id": self.endpoint_id,
            "path": list(self.path),
        }


@dataclass(frozen=True)
class GraphValidationResult:
    errors: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()
    stats: dict = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def issues(self) -> Tuple[ValidationIssue, ...]:
        return self.errors + self.warnings

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "stats": dict(self.stats),
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


class GraphValidator:
    """
    Validates a GraphModel.

    Usage:
        validator = GraphValidator()
        result = validator.validate(model)

        for issue in result.errors:
            print(f"[{issue.code}] {issue.message}")
    """

    def __init__(self, root_types: Optional[Iterable[str]] = None):
        if root_types is None:
            root_types = config.ROOT_NODE_TYPES
        self.root_types = frozenset(root_types)

    def validate(self, model: GraphModel) -> GraphValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        errors.extend(self._check_cycles(model))
        errors.extend(self._check_required_endpoints(model))
        warnings.extend(self._check_orphan_nodes(model))

        result = GraphValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            stats=self._calculate_stats(model),
        )
        logger.debug("[VALIDATOR] %s", result.get_summary())
        return result

    def _check_cycles(self, model: GraphModel) -> List[ValidationIssue]:
        """
        Depth-first search with an explicit stack, so long chains do not
        hit the interpreter recursion limit.

        `path` mirrors the stack; `on_stack` maps a node to its position
        in `path`.
        """
        issues: List[ValidationIssue] = []
        visited = set()
        on_stack: Dict[str, int] = {}
        path: List[str] = []
        stack: List[Tuple[str, Iterator[Edge]]] = []

        def enter(node_id: str) -> None:
            visited.add(node_id)
            on_stack[node_id] = len(path)
            path.append(node_id)
            stack.append((node_id, iter(model.outgoing_edges(node_id))))

        for node in model.nodes:
            if node.id in visited:
                continue
            enter(node.id)
            while stack:
                node_id, edges = stack[-1]
                edge = next(edges, None)
                if edge is None:
                    stack.pop()
                    path.pop()
                    del on_stack[node_id]
                    continue
                if edge.is_self_loop and model.allow_self_loops:
                    continue
                neighbor = edge.target_node_id
                if neighbor in on_stack:
                    cycle = path[on_stack[neighbor]:] + [neighbor]
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code=CYCLE_DETECTED,
                        message=f"Cycle detected: {' -> '.join(cycle)}",
                        node_id=neighbor,
                        endpoint_id=edge.target_endpoint_id,
                        path=tuple(cycle),
                    ))
                elif neighbor not in visited:
                    enter(neighbor)
        return issues

    def _check_required_endpoints(self, model: GraphModel) -> List[ValidationIssue]:
        issues = []
        for node in model.nodes:
            for endpoint in node.endpoints:
                if endpoint.required and endpoint.connection_count == 0:
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code=MISSING_REQUIRED_CONNECTION,
                        message=(
                            f"Required endpoint '{endpoint.label}' of node "
                            f"'{node.label}' ({node.id}) is not connected"
                        ),
                        node_id=node.id,
                        endpoint_id=endpoint.id,
                    ))
        return issues

    def _check_orphan_nodes(self, model: GraphModel) -> List[ValidationIssue]:
        issues = []
        for node in model.nodes:
            if node.type in self.root_types or node.is_connected():
                continue
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code=ORPHAN_NODE,
                message=f"Node '{node.label}' ({node.id}, type={node.type}) has no connections",
                node_id=node.id,
            ))
        return issues

    def _calculate_stats(self, model: GraphModel) -> dict:
        return {
            "nodes": len(model),
            "edges": len(model.edges),
            "connected_nodes": sum(1 for n in model.nodes if n.is_connected()),
        }


def validate_graph(model: GraphModel, root_types: Optional[Iterable[str]] = None) -> GraphValidationResult:
    """Convenience function to validate a graph."""
    return GraphValidator(root_types=root_types).validate(model)

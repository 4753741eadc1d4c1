"""
Validation module for application graphs.
"""

from reqdef.validation.graph_validator import (
    CYCLE_DETECTED,
    MISSING_REQUIRED_CONNECTION,
    ORPHAN_NODE,
    GraphValidationResult,
    GraphValidator,
    ValidationIssue,
    ValidationSeverity,
    validate_graph,
)

__all__ = [
    "CYCLE_DETECTED",
    "MISSING_REQUIRED_CONNECTION",
    "ORPHAN_NODE",
    "GraphValidationResult",
    "GraphValidator",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_graph",
]

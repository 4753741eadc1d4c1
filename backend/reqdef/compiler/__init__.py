from reqdef.compiler.generator import SpecificationGenerator, generate_specification
from reqdef.compiler.loader import build_model, load_specification, parse_specification
from reqdef.compiler.ordering import dependency_order
from reqdef.compiler.types import EdgeReference, Specification, Statement

__all__ = [
    "SpecificationGenerator",
    "generate_specification",
    "build_model",
    "load_specification",
    "parse_specification",
    "dependency_order",
    "EdgeReference",
    "Specification",
    "Statement",
]

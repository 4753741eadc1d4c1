import logging
from typing import Optional

from reqdef.compiler.ordering import dependency_order
from reqdef.compiler.types import EdgeReference, Specification, Statement
from reqdef.graph.errors import ValidationFailed
from reqdef.graph.model import GraphModel
from reqdef.validation.graph_validator import GraphValidator

logger = logging.getLogger(__name__)


class SpecificationGenerator:
    """
    Deterministic specification builder.

    Re-validates the model first; any error-severity issue aborts
    generation with ValidationFailed carrying all of them. Warnings
    do not block.
    """

    def __init__(self, validator: Optional[GraphValidator] = None):
        self.validator = validator or GraphValidator()

    def generate(self, model: GraphModel, name: str = "", description: str = "") -> Specification:
        result = self.validator.validate(model)
        if not result.is_valid:
            logger.info("[GENERATOR] Aborted: %s", result.get_summary())
            raise ValidationFailed(result.errors)

        statements = []
        for node in dependency_order(model):
            outputs = [
                EdgeReference(
                    source_endpoint=edge.source_endpoint_id,
                    target_node=edge.target_node_id,
                    target_endpoint=edge.target_endpoint_id,
                )
                for edge in model.outgoing_edges(node.id)
            ]
            statements.append(Statement(
                node_id=node.id,
                node_type=node.type,
                label=node.label,
                properties=dict(node.properties),
                endpoints=[e.to_dict() for e in node.endpoints],
                outputs=outputs,
            ))

        logger.debug("[GENERATOR] Generated %d statements", len(statements))
        return Specification(name=name, description=description, statements=statements)


def generate_specification(
    model: GraphModel,
    name: str = "",
    description: str = "",
    validator: Optional[GraphValidator] = None,
) -> Specification:
    return SpecificationGenerator(validator).generate(model, name, description)

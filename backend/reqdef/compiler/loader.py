"""
Rebuild a GraphModel from an exported specification document.

The model is always rebuilt from scratch: nodes are added in statement
order and every LINK is replayed through GraphModel.connect, so an
imported graph obeys the same edge rules as an interactively built one.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from reqdef.compiler.types import EdgeReference, Specification, Statement
from reqdef.graph.endpoint import Endpoint
from reqdef.graph.errors import SpecificationFormatError
from reqdef.graph.model import GraphModel
from reqdef.graph.node import GraphNode

logger = logging.getLogger(__name__)


class EndpointDocument(BaseModel):
    id: str
    label: str = ""
    direction: str
    connector_type: str = "Dot"
    anchor: str = "Left"
    max_connections: int = -1
    required: bool = False
    scope: str
    user_data: Optional[str] = None


class EdgeReferenceDocument(BaseModel):
    source_endpoint: str
    target_node: str
    target_endpoint: str


class StatementDocument(BaseModel):
    node_id: str
    node_type: str
    label: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)
    endpoints: List[EndpointDocument] = Field(default_factory=list)
    outputs: List[EdgeReferenceDocument] = Field(default_factory=list)


class SpecificationDocument(BaseModel):
    name: str = ""
    description: str = ""
    statements: List[StatementDocument] = Field(default_factory=list)


def parse_specification(document: Union[str, bytes, dict]) -> Specification:
    try:
        if isinstance(document, (str, bytes)):
            parsed = SpecificationDocument.model_validate_json(document)
        else:
            parsed = SpecificationDocument.model_validate(document)
    except ValidationError as exc:
        raise SpecificationFormatError(f"Malformed specification: {exc}") from exc

    return Specification(
        name=parsed.name,
        description=parsed.description,
        statements=[
            Statement(
                node_id=s.node_id,
                node_type=s.node_type,
                label=s.label,
                properties=dict(s.properties),
                endpoints=[e.model_dump() for e in s.endpoints],
                outputs=[EdgeReference(**o.model_dump()) for o in s.outputs],
            )
            for s in parsed.statements
        ],
    )


def build_model(spec: Specification, allow_self_loops: bool = False) -> GraphModel:
    model = GraphModel(allow_self_loops=allow_self_loops)
    try:
        for statement in spec.statements:
            model.add_node(GraphNode(
                node_id=statement.node_id,
                node_type=statement.node_type,
                label=statement.label,
                properties=statement.properties,
                endpoints=[Endpoint.from_dict(e) for e in statement.endpoints],
            ))

        for statement in spec.statements:
            for ref in statement.outputs:
                model.connect(
                    statement.node_id,
                    ref.source_endpoint,
                    ref.target_node,
                    ref.target_endpoint,
                )
    except (KeyError, ValueError) as exc:
        if isinstance(exc, SpecificationFormatError):
            raise
        raise SpecificationFormatError(f"Specification cannot be rebuilt: {exc}") from exc

    logger.debug(
        "[LOADER] Rebuilt model with %d nodes and %d edges", len(model), len(model.edges)
    )
    return model


def load_specification(document: Union[str, bytes, dict], allow_self_loops: bool = False) -> GraphModel:
    return build_model(parse_specification(document), allow_self_loops=allow_self_loops)

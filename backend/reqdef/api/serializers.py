from fastapi import HTTPException

from reqdef.graph.errors import DuplicateId, GraphError, NotFound, ValidationFailed
from reqdef.session.context import DesignContext


STATUS_BY_ERROR = (
    (NotFound, 404),
    (DuplicateId, 409),
    (ValidationFailed, 422),
    (GraphError, 422),
)


def serialize_context(context: DesignContext) -> dict:
    """JSON view of a design session. Deterministic."""
    with context.lock:
        return {
            "session_id": context.session_id,
            "application_name": context.new_application_name,
            "application_description": context.new_application_description,
            "graph": context.graph_model.to_dict(),
            "available_nodes": context.available_nodes,
        }


def graph_error_to_http(exc: GraphError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.to_dict())
    return HTTPException(status_code=400, detail=exc.to_dict())

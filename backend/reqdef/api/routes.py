import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from reqdef.api.serializers import graph_error_to_http, serialize_context
from reqdef.db.models import SpecificationRecord
from reqdef.db.session import get_db
from reqdef.graph.errors import GraphError, NotFound
from reqdef.graph.model import Edge
from reqdef.schemas import (
    AddNodeRequest,
    ConnectRequest,
    CreateSessionRequest,
    GenerateResponse,
    ImportRequest,
    PersistResponse,
    SensorLookupRequest,
    SessionResponse,
    UpdatePropertiesRequest,
    ValidationResponse,
)
from reqdef.session.context import DesignContext
from reqdef.session.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["design"])


def get_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_context(session_id: str, store: SessionStore = Depends(get_store)) -> DesignContext:
    try:
        return store.get(session_id)
    except NotFound as exc:
        raise graph_error_to_http(exc)


# ============================
# SESSIONS
# ============================

@router.post("", response_model=SessionResponse, status_code=201)
def create_session(request: CreateSessionRequest, store: SessionStore = Depends(get_store)):
    context = store.create()
    context.new_application_name = request.application_name
    context.new_application_description = request.application_description
    return serialize_context(context)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(context: DesignContext = Depends(get_context)):
    return serialize_context(context)


@router.delete("/{session_id}", status_code=204)
def drop_session(session_id: str, store: SessionStore = Depends(get_store)):
    try:
        store.drop(session_id)
    except NotFound as exc:
        raise graph_error_to_http(exc)


@router.post("/{session_id}/reset", response_model=SessionResponse)
def reset_workspace(context: DesignContext = Depends(get_context)):
    context.cleanup_workspace()
    return serialize_context(context)


@router.post("/{session_id}/sensors", response_model=SessionResponse)
def load_sensors(request: SensorLookupRequest, context: DesignContext = Depends(get_context)):
    with context.lock:
        context.filter_location_lat = request.lat
        context.filter_location_lon = request.lon
        context.filter_location_radius = request.radius
        context.update_available_sensors(request.sensor_types)
    return serialize_context(context)


# ============================
# GRAPH EDITING
# ============================

@router.post("/{session_id}/nodes", status_code=201)
def add_node(request: AddNodeRequest, context: DesignContext = Depends(get_context)):
    try:
        node = context.add_node(request.kind, request.node_id)
    except GraphError as exc:
        raise graph_error_to_http(exc)
    return node.to_dict()


@router.patch("/{session_id}/nodes/{node_id}")
def update_node(node_id: str, request: UpdatePropertiesRequest, context: DesignContext = Depends(get_context)):
    try:
        node = context.update_node_properties(node_id, request.properties)
    except GraphError as exc:
        raise graph_error_to_http(exc)
    return node.to_dict()


@router.delete("/{session_id}/nodes/{node_id}", status_code=204)
def remove_node(node_id: str, context: DesignContext = Depends(get_context)):
    try:
        context.remove_node(node_id)
    except GraphError as exc:
        raise graph_error_to_http(exc)


@router.post("/{session_id}/edges", status_code=201)
def connect(request: ConnectRequest, context: DesignContext = Depends(get_context)):
    try:
        edge = context.connect(
            request.source_node_id,
            request.source_endpoint_id,
            request.target_node_id,
            request.target_endpoint_id,
        )
    except GraphError as exc:
        raise graph_error_to_http(exc)
    return edge.to_dict()


@router.post("/{session_id}/edges/remove", status_code=204)
def disconnect(request: ConnectRequest, context: DesignContext = Depends(get_context)):
    edge = Edge(
        request.source_node_id,
        request.source_endpoint_id,
        request.target_node_id,
        request.target_endpoint_id,
    )
    try:
        context.disconnect(edge)
    except GraphError as exc:
        raise graph_error_to_http(exc)


# ============================
# VALIDATION / GENERATION
# ============================

@router.post("/{session_id}/validate", response_model=ValidationResponse)
def validate(context: DesignContext = Depends(get_context)):
    result = context.validate()
    return {
        "is_valid": result.is_valid,
        "errors": [i.to_dict() for i in result.errors],
        "warnings": [i.to_dict() for i in result.warnings],
    }


@router.post("/{session_id}/generate", response_model=GenerateResponse)
def generate(context: DesignContext = Depends(get_context)):
    with context.lock:
        try:
            spec = context.generate()
        except GraphError as exc:
            raise graph_error_to_http(exc)
        warnings = [i.to_dict() for i in context.validation_warnings]
        code = context.generated_code

    return {
        "status": "warning" if warnings else "success",
        "code": code,
        "specification": spec.to_dict(),
        "warnings": warnings,
    }


@router.get("/{session_id}/export")
def export_spec(context: DesignContext = Depends(get_context)):
    try:
        spec = context.build_spec()
    except GraphError as exc:
        raise graph_error_to_http(exc)
    return spec.to_dict()


@router.post("/{session_id}/import", response_model=SessionResponse)
def import_spec(request: ImportRequest, context: DesignContext = Depends(get_context)):
    try:
        context.import_spec(request.document)
    except GraphError as exc:
        raise graph_error_to_http(exc)
    return serialize_context(context)


@router.post("/{session_id}/persist", response_model=PersistResponse, status_code=201)
def persist_spec(context: DesignContext = Depends(get_context), db: Session = Depends(get_db)):
    with context.lock:
        try:
            document = context.export_spec()
        except GraphError as exc:
            raise graph_error_to_http(exc)
        record = SpecificationRecord(
            name=context.new_application_name,
            description=context.new_application_description,
            document=document,
        )

    db.add(record)
    db.commit()
    db.refresh(record)
    context.persist_spec = True
    logger.info("[API] Persisted specification %s (%s)", record.id, record.name)
    return {"id": record.id, "name": record.name}

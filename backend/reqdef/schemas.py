from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from reqdef.sensors.models import SensorType


class CreateSessionRequest(BaseModel):
    application_name: str = ""
    application_description: str = ""


class AddNodeRequest(BaseModel):
    kind: str                      # registry tag or sensor type name
    node_id: Optional[str] = None  # generated when omitted


class UpdatePropertiesRequest(BaseModel):
    properties: Dict[str, Any]


class ConnectRequest(BaseModel):
    source_node_id: str
    source_endpoint_id: str
    target_node_id: str
    target_endpoint_id: str


class SensorLookupRequest(BaseModel):
    """Sensor types returned by the catalog for the current location filter"""
    lat: float = 0.0
    lon: float = 0.0
    radius: float = 0.0
    sensor_types: List[SensorType] = Field(default_factory=list)


class ImportRequest(BaseModel):
    document: Dict[str, Any]


class SessionResponse(BaseModel):
    session_id: str
    application_name: str
    application_description: str
    graph: Dict[str, Any]
    available_nodes: Dict[str, List[str]]


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[Dict[str, Any]] = []
    warnings: List[Dict[str, Any]] = []


class GenerateResponse(BaseModel):
    status: str
    code: str
    specification: Dict[str, Any]
    warnings: List[Dict[str, Any]] = []


class PersistResponse(BaseModel):
    id: int
    name: str

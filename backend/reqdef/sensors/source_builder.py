import re
from typing import Optional, Set

from reqdef.graph import scopes
from reqdef.graph.endpoint import AnchorType, ConnectorType, Endpoint, EndpointDirection
from reqdef.graph.node import GraphNode
from reqdef.sensors.models import MeasurementCapability, SensorType

SOURCE_TYPE = "SOURCE"
FILTER_INPUT_ID = "SEL_FILTER_IN"

# Unit datatype local name -> endpoint scope
UNIT_TYPE_SCOPES = {
    "int": scopes.INTEGER,
    "integer": scopes.INTEGER,
    "long": scopes.LONG,
    "float": scopes.FLOAT,
    "double": scopes.DOUBLE,
    "decimal": scopes.NUMBER,
    "date": scopes.DATE,
    "datetime": scopes.DATE,
}


def local_name(uri: str) -> str:
    """Fragment after '#', or after the last ':' or '/' when there is none."""
    if "#" in uri:
        return uri[uri.index("#") + 1:]
    return re.split(r"[:/]", uri)[-1]


def scope_for_unit_type(unit_type: Optional[str]) -> str:
    if not unit_type:
        return scopes.NUMBER
    return UNIT_TYPE_SCOPES.get(local_name(unit_type).lower(), scopes.NUMBER)


def capability_label(capability: MeasurementCapability) -> str:
    label = capability.type
    if "#" in label:
        label = label[label.index("#") + 1:]
    unit_name = capability.units[0].name if capability.units else None
    if unit_name and unit_name != "null":
        label += f" ({unit_name})"
    return label


def _unique_id(base: str, taken: Set[str]) -> str:
    candidate = re.sub(r"[^a-zA-Z0-9_]", "_", base) or "out"
    if candidate not in taken:
        return candidate
    suffix = 2
    while f"{candidate}_{suffix}" in taken:
        suffix += 1
    return f"{candidate}_{suffix}"


def build_source_node(
    sensor_type: SensorType,
    node_id: str,
    lat: float = 0.0,
    lon: float = 0.0,
    radius: float = 0.0,
) -> GraphNode:
    """
    Build a SOURCE node for one sensor type.

    Endpoint order: the filter input first, one output per measurement
    capability that declares a unit, then the LAT and LON outputs.
    """
    node = GraphNode(
        node_id,
        SOURCE_TYPE,
        label=sensor_type.name,
        properties={"LAT": lat, "LON": lon, "RADIUS": radius},
    )

    node.add_endpoint(Endpoint(
        id=FILTER_INPUT_ID,
        direction=EndpointDirection.INPUT,
        scope=scopes.SENSOR,
        anchor=AnchorType.LEFT,
        connector_type=ConnectorType.DOT,
        max_connections=1,
        required=False,
    ))

    taken = {FILTER_INPUT_ID, "LAT", "LON"}
    for capability in sensor_type.measurement_capabilities:
        if not capability.units:
            continue
        endpoint_id = _unique_id(local_name(capability.type), taken)
        taken.add(endpoint_id)
        node.add_endpoint(Endpoint(
            id=endpoint_id,
            label=capability_label(capability),
            direction=EndpointDirection.OUTPUT,
            scope=scope_for_unit_type(capability.units[0].type),
            anchor=AnchorType.RIGHT,
            connector_type=ConnectorType.RECTANGLE,
            max_connections=-1,
            user_data=capability.type,
        ))

    for endpoint_id, scope, user_data in (
        ("LAT", scopes.GEO_LAT, "geo:lat"),
        ("LON", scopes.GEO_LON, "geo:lon"),
    ):
        node.add_endpoint(Endpoint(
            id=endpoint_id,
            direction=EndpointDirection.OUTPUT,
            scope=scope,
            anchor=AnchorType.RIGHT,
            connector_type=ConnectorType.RECTANGLE,
            max_connections=-1,
            user_data=user_data,
        ))

    return node

"""
Node Catalog - Built-in node kinds offered by the design toolbox.

Sensor sources are not listed here: they are built per sensor type from
the catalog provider (see reqdef.sensors).
"""

from reqdef.graph import scopes
from reqdef.graph.endpoint import AnchorType, ConnectorType, Endpoint, EndpointDirection
from reqdef.graph.node import GraphNode
from reqdef.nodes.registry import NodeTypeRegistry


def input_endpoint(endpoint_id: str, scope: str, required: bool = False, max_connections: int = 1) -> Endpoint:
    return Endpoint(
        id=endpoint_id,
        direction=EndpointDirection.INPUT,
        scope=scope,
        connector_type=ConnectorType.DOT,
        anchor=AnchorType.LEFT,
        max_connections=max_connections,
        required=required,
    )


def output_endpoint(endpoint_id: str, scope: str, max_connections: int = -1) -> Endpoint:
    return Endpoint(
        id=endpoint_id,
        direction=EndpointDirection.OUTPUT,
        scope=scope,
        connector_type=ConnectorType.RECTANGLE,
        anchor=AnchorType.RIGHT,
        max_connections=max_connections,
    )


# ============================================================
# FILTERS
# ============================================================

def selection_filter(node_id: str) -> GraphNode:
    return GraphNode(
        node_id,
        "FILTER",
        label="Selection filter",
        properties={"LAT": 0.0, "LON": 0.0, "RADIUS": 0.0},
        endpoints=[output_endpoint("SEL_FILTER_OUT", scopes.SENSOR)],
    )


# ============================================================
# COMPARATORS
# ============================================================

def compare(node_id: str) -> GraphNode:
    return GraphNode(
        node_id,
        "COMPARATOR",
        label="Compare",
        properties={"OPERATOR": ">", "VALUE": 0},
        endpoints=[
            input_endpoint("IN", scopes.NUMBER, required=True),
            output_endpoint("OUT", scopes.NUMBER),
        ],
    )


# ============================================================
# AGGREGATORS
# ============================================================

AGGREGATE_FUNCTIONS = ("Average", "Min", "Max", "Sum", "Count")


def aggregator(function: str):
    def factory(node_id: str) -> GraphNode:
        return GraphNode(
            node_id,
            "AGGREGATOR",
            label=function,
            properties={"FUNCTION": function.upper(), "WINDOW": 0},
            endpoints=[
                input_endpoint("IN", scopes.NUMBER, required=True),
                output_endpoint("OUT", scopes.NUMBER),
            ],
        )
    return factory


# ============================================================
# PRESENTATION
# ============================================================

def gauge(node_id: str) -> GraphNode:
    return GraphNode(
        node_id,
        "PRESENTATION",
        label="Gauge",
        properties={"TITLE": "", "MIN": 0, "MAX": 100},
        endpoints=[input_endpoint("VALUE", scopes.NUMBER, required=True)],
    )


def line_chart(node_id: str) -> GraphNode:
    return GraphNode(
        node_id,
        "PRESENTATION",
        label="Line chart",
        properties={"TITLE": "", "SERIES": 1},
        endpoints=[
            input_endpoint("X", scopes.DATE),
            input_endpoint("Y", scopes.NUMBER, required=True),
        ],
    )


def map_widget(node_id: str) -> GraphNode:
    return GraphNode(
        node_id,
        "PRESENTATION",
        label="Map",
        properties={"TITLE": "", "ZOOM": 10},
        endpoints=[
            input_endpoint("LAT", scopes.GEO_LAT, required=True),
            input_endpoint("LON", scopes.GEO_LON, required=True),
            input_endpoint("VALUE", scopes.NUMBER),
        ],
    )


def register_builtin_nodes(registry: NodeTypeRegistry) -> None:
    registry.register("SelectionFilter", selection_filter, "FILTER",
                      "Restricts sensor sources to a location and radius")
    registry.register("Compare", compare, "COMPARATOR",
                      "Passes values satisfying OPERATOR against VALUE")
    for function in AGGREGATE_FUNCTIONS:
        registry.register(function, aggregator(function), "AGGREGATOR",
                          f"{function} of incoming values over WINDOW")
    registry.register("Gauge", gauge, "PRESENTATION", "Single value gauge")
    registry.register("LineChart", line_chart, "PRESENTATION", "Time series chart")
    registry.register("Map", map_widget, "PRESENTATION", "Geo-located values on a map")

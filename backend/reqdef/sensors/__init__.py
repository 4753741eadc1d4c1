from reqdef.sensors.models import MeasurementCapability, SensorType, SensorTypes, Unit
from reqdef.sensors.source_builder import SOURCE_TYPE, build_source_node, scope_for_unit_type

__all__ = [
    "MeasurementCapability",
    "SensorType",
    "SensorTypes",
    "Unit",
    "SOURCE_TYPE",
    "build_source_node",
    "scope_for_unit_type",
]

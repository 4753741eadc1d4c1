import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from reqdef.compiler.generator import SpecificationGenerator
from reqdef.compiler.loader import parse_specification, build_model
from reqdef.compiler.types import Specification
from reqdef.graph.errors import DuplicateId, NotFound, ValidationFailed
from reqdef.graph.model import Edge, GraphModel
from reqdef.graph.node import GraphNode
from reqdef.nodes.registry import SOURCE_GROUP, NodeTypeRegistry, get_node_registry
from reqdef.sensors.models import SensorType
from reqdef.sensors.source_builder import build_source_node
from reqdef.validation.graph_validator import GraphValidationResult, GraphValidator, ValidationIssue

logger = logging.getLogger(__name__)


@dataclass
class DesignContext:
    """
    State of one application design session.

    Owned by exactly one session. Public methods hold `lock`, so requests
    handled on different threads see one edit at a time. Validation
    output and generated code are snapshots of the last
    validate()/generate() call and are dropped on every reset.
    """
    session_id: str
    registry: NodeTypeRegistry = field(default_factory=get_node_registry)
    graph_model: GraphModel = field(default_factory=GraphModel)
    validator: GraphValidator = field(default_factory=GraphValidator)

    # Sensor toolbox, keyed by sensor type name
    sensor_types: Dict[str, SensorType] = field(default_factory=dict)

    # Latest validation / generation output
    validation_errors: List[ValidationIssue] = field(default_factory=list)
    validation_warnings: List[ValidationIssue] = field(default_factory=list)
    specification: Optional[Specification] = None
    generated_code: Optional[str] = None

    # Sensor lookup filter
    filter_location_lat: float = 0.0
    filter_location_lon: float = 0.0
    filter_location_radius: float = 0.0

    # New application dialog
    new_application_name: str = ""
    new_application_description: str = ""
    persist_spec: bool = False

    _node_counter: int = field(default=0, init=False, repr=False)

    # Serializes edits and reads coming from concurrent requests
    lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)
    last_access: float = field(default_factory=time.monotonic, init=False, repr=False, compare=False)

    # ==========================================================
    # TOOLBOX
    # ==========================================================

    @property
    def available_nodes(self) -> Dict[str, List[str]]:
        with self.lock:
            groups = self.registry.available_by_group()
            groups[SOURCE_GROUP] = list(self.sensor_types) + groups.get(SOURCE_GROUP, [])
            return groups

    def update_available_sensors(self, sensor_types: Iterable[SensorType]) -> None:
        with self.lock:
            self.sensor_types = {sensor_type.name: sensor_type for sensor_type in sensor_types}
        logger.debug("[DesignContext] %d sensor types available", len(self.sensor_types))

    def clear_available_sensors(self) -> None:
        with self.lock:
            self.sensor_types.clear()

    def _next_node_id(self) -> str:
        while True:
            self._node_counter += 1
            node_id = f"node{self._node_counter}"
            if node_id not in self.graph_model:
                return node_id

    def create_node(self, kind: str, node_id: Optional[str] = None) -> GraphNode:
        """Instantiate a toolbox entry; sensor types win over registry tags of the same name."""
        with self.lock:
            node_id = node_id or self._next_node_id()
            sensor_type = self.sensor_types.get(kind)
            if sensor_type is not None:
                return build_source_node(
                    sensor_type,
                    node_id,
                    lat=self.filter_location_lat,
                    lon=self.filter_location_lon,
                    radius=self.filter_location_radius,
                )
            if kind in self.registry:
                return self.registry.create(kind, node_id)
        raise NotFound(f"Toolbox has no node kind '{kind}'")

    # ==========================================================
    # GRAPH EDITING
    # ==========================================================

    def add_node(self, kind: str, node_id: Optional[str] = None) -> GraphNode:
        with self.lock:
            if node_id is not None and node_id in self.graph_model:
                raise DuplicateId(f"Node '{node_id}' already exists.", node_id=node_id)
            return self.graph_model.add_node(self.create_node(kind, node_id))

    def remove_node(self, node_id: str) -> GraphNode:
        with self.lock:
            return self.graph_model.remove_node(node_id)

    def update_node_properties(self, node_id: str, properties: Dict[str, Any]) -> GraphNode:
        with self.lock:
            node = self.graph_model.get_node(node_id)
            node.properties.update(properties)
            return node

    def connect(
        self,
        source_node_id: str,
        source_endpoint_id: str,
        target_node_id: str,
        target_endpoint_id: str,
    ) -> Edge:
        with self.lock:
            return self.graph_model.connect(
                source_node_id, source_endpoint_id, target_node_id, target_endpoint_id,
            )

    def disconnect(self, edge: Edge) -> None:
        with self.lock:
            self.graph_model.disconnect(edge)

    # ==========================================================
    # VALIDATION / GENERATION
    # ==========================================================

    def validate(self) -> GraphValidationResult:
        with self.lock:
            result = self.validator.validate(self.graph_model)
            self.validation_errors = list(result.errors)
            self.validation_warnings = list(result.warnings)
            return result

    def build_spec(self) -> Specification:
        """Generate from the current graph without touching the stored output."""
        with self.lock:
            return SpecificationGenerator(self.validator).generate(
                self.graph_model,
                name=self.new_application_name,
                description=self.new_application_description,
            )

    def generate(self) -> Specification:
        with self.lock:
            self.validate()
            self.specification = None
            self.generated_code = None
            try:
                spec = self.build_spec()
            except ValidationFailed:
                logger.info(
                    "[DesignContext] Generation blocked by %d errors", len(self.validation_errors)
                )
                raise
            self.specification = spec
            self.generated_code = spec.render()
            return spec

    # ==========================================================
    # IMPORT / EXPORT
    # ==========================================================

    def export_spec(self) -> str:
        return self.generate().to_json()

    def import_spec(self, document: Union[str, bytes, dict]) -> GraphModel:
        spec = parse_specification(document)
        with self.lock:
            model = build_model(spec, allow_self_loops=self.graph_model.allow_self_loops)

            self.graph_model = model
            self.new_application_name = spec.name
            self.new_application_description = spec.description
            self.validation_errors = []
            self.validation_warnings = []
            self.specification = None
            self.generated_code = None
        logger.info("[DesignContext] Imported '%s' with %d nodes", spec.name, len(model))
        return model

    def cleanup_workspace(self) -> None:
        with self.lock:
            self.graph_model.clear()
            self.validation_errors.clear()
            self.validation_warnings.clear()
            self.specification = None
            self.generated_code = None

            self.filter_location_lat = 0.0
            self.filter_location_lon = 0.0
            self.filter_location_radius = 0.0
            self.clear_available_sensors()

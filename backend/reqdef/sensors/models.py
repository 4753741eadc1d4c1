"""Sensor-type descriptors supplied by the sensor catalog provider."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Unit(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None


class MeasurementCapability(BaseModel):
    type: str
    units: List[Unit] = Field(default_factory=list)


class SensorType(BaseModel):
    name: str
    measurement_capabilities: List[MeasurementCapability] = Field(default_factory=list)


class SensorTypes(BaseModel):
    sensor_types: List[SensorType] = Field(default_factory=list)

    def get(self, name: str) -> Optional[SensorType]:
        for sensor_type in self.sensor_types:
            if sensor_type.name == name:
                return sensor_type
        return None

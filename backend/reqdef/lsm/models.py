"""Payload models exchanged with the LSM server."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Place(BaseModel):
    id: Optional[str] = None
    lat: float = 0.0
    lng: float = 0.0
    name: Optional[str] = None


class Sensor(BaseModel):
    id: Optional[str] = None
    name: str
    sensor_type: str
    source: Optional[str] = None
    source_type: Optional[str] = None
    info: Optional[str] = None
    author: Optional[str] = None
    place: Optional[Place] = None
    properties: dict = Field(default_factory=dict)
    time: Optional[datetime] = None
    meta_graph: Optional[str] = None
    data_graph: Optional[str] = None


class Reading(BaseModel):
    property_type: str
    value: Optional[float] = None
    unit: Optional[str] = None


class Observation(BaseModel):
    id: Optional[str] = None
    sensor_id: str
    time: datetime
    readings: List[Reading] = Field(default_factory=list)
    meta_graph: Optional[str] = None
    data_graph: Optional[str] = None

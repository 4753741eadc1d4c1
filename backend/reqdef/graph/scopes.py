"""
Endpoint scope compatibility table.

Two scopes are compatible when they are the same string or when both
belong to one declared bucket. Scopes outside every bucket (geo_lat,
geo_lon, Sensor, Date, ...) only match themselves.
"""

from typing import Dict, FrozenSet, Optional

NUMBER = "Number"
INTEGER = "Integer"
LONG = "Long"
FLOAT = "Float"
DOUBLE = "Double"
DATE = "Date"
SENSOR = "Sensor"
GEO_LAT = "geo_lat"
GEO_LON = "geo_lon"


SCOPE_BUCKETS: Dict[str, FrozenSet[str]] = {
    "numeric": frozenset({NUMBER, INTEGER, LONG, FLOAT, DOUBLE}),
}


def scope_bucket(scope: str) -> Optional[str]:
    for name, members in SCOPE_BUCKETS.items():
        if scope in members:
            return name
    return None


def scopes_compatible(a: str, b: str) -> bool:
    if a == b:
        return True
    bucket = scope_bucket(a)
    return bucket is not None and bucket == scope_bucket(b)

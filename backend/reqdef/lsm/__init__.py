"""
Clients for the remote LSM server: triple-store mutations and SPARQL reads.
"""

from reqdef.lsm.errors import LSMError, LSMServerError, SecurityQueryError
from reqdef.lsm.models import Observation, Place, Reading, Sensor
from reqdef.lsm.security import LSMSecurityManagerService, RegisteredService, User
from reqdef.lsm.triple_store import LSMTripleStore

__all__ = [
    "LSMError",
    "LSMServerError",
    "SecurityQueryError",
    "Observation",
    "Place",
    "Reading",
    "Sensor",
    "LSMSecurityManagerService",
    "RegisteredService",
    "User",
    "LSMTripleStore",
]
